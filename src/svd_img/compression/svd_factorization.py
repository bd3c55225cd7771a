"""
Standard SVD factorization
"""

import torch

from .base_factorization import BaseFactorization, FactorizationResult


class StandardSVD(BaseFactorization):
    """
    Full thin SVD through torch.linalg.svd (LAPACK).

    LAPACK always runs to convergence, so ``n_iter`` has no effect here.
    Singular values at or below ``eps`` are flushed to zero.
    """

    def factorize(self, matrix, rank=None, compute_u=True, compute_v=True):
        if compute_u or compute_v:
            # Matrix = U @ S @ Vh
            U, S, Vh = torch.linalg.svd(matrix, full_matrices=False)
        else:
            U, Vh = None, None
            S = torch.linalg.svdvals(matrix)

        S = torch.where(S > self.eps, S, torch.zeros_like(S))

        return FactorizationResult(
            u=U if compute_u else None,
            s=S,
            vh=Vh if compute_v else None,
        )
