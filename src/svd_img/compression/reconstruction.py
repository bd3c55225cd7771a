"""
Reconstruction: recombine triplets into an approximate integer matrix.
"""

import numpy as np
import torch

from .triplets import SVDTriplets


def recompute_matrix_float(triplets: SVDTriplets) -> torch.Tensor:
    """
    Sum of weight * outer(left, right) over all triplets, accumulated in the
    triplets' own precision.

    Returns:
        (height, width) floating point tensor
    """
    if len(triplets) == 0:
        raise ValueError("Cannot reconstruct a matrix from zero triplets")

    S = torch.from_numpy(triplets.weights)
    U = torch.from_numpy(triplets.left).T  # (height, n)
    Vh = torch.from_numpy(triplets.right)  # (n, width)

    # Matrix_approx = U @ diag(S) @ Vh
    return U @ torch.diag(S) @ Vh


def recompute_matrix(triplets: SVDTriplets, dtype=np.int32) -> np.ndarray:
    """
    Reconstruct and round to the nearest value of an integer ``dtype``.

    Values beyond the range of ``dtype`` saturate at its bounds; there is no
    other clamping.
    """
    info = np.iinfo(dtype)
    m = recompute_matrix_float(triplets).numpy().astype(np.float64)
    return np.clip(np.rint(m), info.min, info.max).astype(dtype)
