"""
Randomized SVD factorization.

Based on "Finding Structure with Randomness: Probabilistic Algorithms for
Constructing Approximate Matrix Decompositions" (Halko, Martinsson, Tropp, 2011)

Only the leading ``rank`` triplets are computed, which is much cheaper than a
full SVD when few triplets are kept from a large image.
"""

import torch

from .base_factorization import BaseFactorization, FactorizationResult

# Power iteration cap when n_iter = 0 (iterate until the weights settle)
MAX_POWER_ITER = 50


class RandomizedSVD(BaseFactorization):
    """
    Randomized range finder followed by a small exact SVD.

    Algorithm:
    1. Draw random test matrix Omega
    2. Compute Y = A @ Omega (range finder)
    3. Power iterations, stopping once the leading weights move less than eps
    4. Orthonormalize Y to get Q
    5. Compute SVD of the smaller matrix B = Q.T @ A
    6. Recover U = Q @ U_tilde

    Args:
        eps: Convergence tolerance on the leading weights
        n_iter: Maximum power iterations (0 = until convergence)
        n_oversamples: Additional samples for accuracy (default: 10)
        random_state: Random seed for reproducibility
    """

    def __init__(self, eps=1.0e-5, n_iter=0, n_oversamples=10, random_state=None, **kwargs):
        super().__init__(eps=eps, n_iter=n_iter, **kwargs)
        self.n_oversamples = n_oversamples
        self.random_state = random_state

    def factorize(self, matrix, rank=None, compute_u=True, compute_v=True):
        if rank is None:
            raise ValueError("rank must be specified for randomized SVD")

        M, N = matrix.shape

        # Determine effective rank (rank + oversampling)
        k = min(rank, min(M, N))
        n_random = min(k + self.n_oversamples, min(M, N))

        Q = self._randomized_range_finder(matrix, n_random)

        # Project to lower dimension
        B = Q.T @ matrix  # (n_random, N)

        U_tilde, S, Vh = torch.linalg.svd(B, full_matrices=False)

        # Truncate to desired rank
        U_tilde = U_tilde[:, :k]
        S = S[:k]
        Vh = Vh[:k, :]

        U = Q @ U_tilde

        return FactorizationResult(
            u=U if compute_u else None,
            s=S,
            vh=Vh if compute_v else None,
        )

    def _randomized_range_finder(self, A, size):
        """
        Compute an approximate orthonormal basis for the range of A.

        Args:
            A: Input matrix (M, N)
            size: Size of the random subspace

        Returns:
            Q: Orthonormal basis matrix (M, size)
        """
        M, N = A.shape

        if self.random_state is not None:
            generator = torch.Generator(device=A.device)
            generator.manual_seed(self.random_state)
            Omega = torch.randn(N, size, device=A.device, dtype=A.dtype,
                                generator=generator)
        else:
            Omega = torch.randn(N, size, device=A.device, dtype=A.dtype)

        Q, _ = torch.linalg.qr(A @ Omega)  # (M, size)

        max_iter = self.n_iter if self.n_iter > 0 else MAX_POWER_ITER
        previous = None
        for _ in range(max_iter):
            Z, _ = torch.linalg.qr(A.T @ Q)  # (N, size)
            Q, _ = torch.linalg.qr(A @ Z)  # (M, size)

            estimate = torch.linalg.svdvals(A.T @ Q)
            if previous is not None:
                scale = max(estimate[0].item(), 1.0)
                if torch.max(torch.abs(estimate - previous)).item() <= self.eps * scale:
                    break
            previous = estimate

        return Q
