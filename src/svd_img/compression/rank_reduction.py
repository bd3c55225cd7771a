"""
Rank reduction: factorize a Sample Matrix and keep its leading triplets.
"""

import logging

import numpy as np
import torch

from svd_img.errors import FactorizationError, MissingFactorsError, RankTooLargeError
from svd_img.options import CodecOptions

from .base_factorization import BaseFactorization
from .randomized_svd_factorization import RandomizedSVD
from .svd_factorization import StandardSVD
from .triplets import SVDTriplets

logger = logging.getLogger(__name__)


def create_factorizer(options: CodecOptions) -> BaseFactorization:
    """Build the factorization primitive selected by ``options``."""
    if options.factorization == 'randomized':
        return RandomizedSVD(eps=options.eps, n_iter=options.n_iter,
                             n_oversamples=options.n_oversamples,
                             random_state=options.random_state)
    return StandardSVD(eps=options.eps, n_iter=options.n_iter)


def factorize_matrix(matrix: np.ndarray, n: int, options: CodecOptions,
                     factorizer: BaseFactorization = None) -> SVDTriplets:
    """
    Factorize ``matrix`` and keep its first ``n`` triplets.

    Args:
        matrix: 2D integer Sample Matrix
        n: Number of triplets to keep, 1 <= n <= min(height, width)
        options: Codec options (precision and factorization settings)
        factorizer: Primitive to use instead of the one selected by options

    Returns:
        SVDTriplets in the precision chosen by ``options.use_f64``
    """
    height, width = matrix.shape
    if n > min(height, width):
        raise RankTooLargeError(
            f"Requested {n} triplets but a {height}x{width} matrix has at most "
            f"{min(height, width)}"
        )

    if factorizer is None:
        factorizer = create_factorizer(options)

    dtype = np.float64 if options.use_f64 else np.float32
    m = torch.from_numpy(np.asarray(matrix).astype(dtype))

    logger.debug("Factorizing %dx%d matrix (%s), keeping %d triplets",
                 height, width, np.dtype(dtype).name, n)
    try:
        result = factorizer.factorize(m, rank=n, compute_u=True, compute_v=True)
    except (RuntimeError, torch.linalg.LinAlgError) as e:
        raise FactorizationError(f"SVD did not produce a result: {e}") from e

    if result is None:
        raise FactorizationError("SVD did not produce a result")
    if result.u is None or result.vh is None:
        raise MissingFactorsError("SVD result is missing the left or right factors")

    U, S, Vh = result.u, result.s, result.vh

    return SVDTriplets(
        weights=S[:n].numpy().astype(dtype),
        left=U[:, :n].T.numpy().astype(dtype),
        right=Vh[:n, :].numpy().astype(dtype),
    )


def matrix_reduce(matrix: np.ndarray, options: CodecOptions, original_file_size: int = 0,
                  factorizer: BaseFactorization = None) -> SVDTriplets:
    """Resolve the compression policy for ``matrix`` and factorize it."""
    height, width = matrix.shape
    n = options.n_with(height, width, original_file_size)
    return factorize_matrix(matrix, n, options, factorizer=factorizer)
