"""
Base class for dense matrix factorization primitives
"""

from typing import NamedTuple, Optional

import torch


class FactorizationResult(NamedTuple):
    """
    Thin SVD of a matrix: A ~= u @ diag(s) @ vh

    ``u`` and ``vh`` are None when they were not requested.
    ``s`` is non-negative and sorted in descending order.
    """
    u: Optional[torch.Tensor]
    s: torch.Tensor
    vh: Optional[torch.Tensor]


class BaseFactorization:
    """
    Base class for factorization primitives

    Args:
        eps: Zero/convergence tolerance
        n_iter: Iteration cap, 0 = iterate to convergence
    """

    def __init__(self, eps=1.0e-5, n_iter=0, **kwargs):
        self.eps = eps
        self.n_iter = n_iter

    def factorize(self, matrix, rank=None, compute_u=True, compute_v=True):
        """
        Factorize the input matrix

        Args:
            matrix: 2D floating point tensor
            rank: Number of leading triplets the caller will keep (a hint)
            compute_u: Return the left factors
            compute_v: Return the right factors

        Returns:
            FactorizationResult
        """
        raise NotImplementedError("Subclasses must implement factorize method")

    def __call__(self, matrix, rank=None, compute_u=True, compute_v=True):
        """Alias for factorize"""
        return self.factorize(matrix, rank=rank, compute_u=compute_u, compute_v=compute_v)
