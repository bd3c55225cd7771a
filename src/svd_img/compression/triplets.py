"""
Truncated factorization stored as a sequence of (weight, left, right) triplets.
"""

from dataclasses import dataclass
from typing import Iterator, NamedTuple

import numpy as np


class Triplet(NamedTuple):
    weight: float
    left: np.ndarray  # (height,)
    right: np.ndarray  # (width,)


@dataclass
class SVDTriplets:
    """
    ``n`` rank-1 terms of equal dimensions and precision, descending by weight.

    Attributes:
        weights: (n,) array
        left: (n, height) array, row k is the k-th left vector
        right: (n, width) array, row k is the k-th right vector
    """
    weights: np.ndarray
    left: np.ndarray
    right: np.ndarray

    def __post_init__(self):
        dtype = self.weights.dtype
        if dtype not in (np.float32, np.float64):
            raise ValueError(f"Triplets must be float32 or float64, got {dtype}")
        if self.left.dtype != dtype or self.right.dtype != dtype:
            raise ValueError("Triplet components must share one precision")
        n = len(self.weights)
        if self.left.ndim != 2 or self.right.ndim != 2 \
                or len(self.left) != n or len(self.right) != n:
            raise ValueError("Left and right vectors must match the number of weights")

    @property
    def use_f64(self) -> bool:
        return self.weights.dtype == np.float64

    @property
    def height(self) -> int:
        return self.left.shape[1]

    @property
    def width(self) -> int:
        return self.right.shape[1]

    def __len__(self):
        return len(self.weights)

    def __getitem__(self, index) -> Triplet:
        return Triplet(self.weights[index].item(), self.left[index], self.right[index])

    def __iter__(self) -> Iterator[Triplet]:
        for k in range(len(self)):
            yield self[k]

    def truncate(self, n: int) -> 'SVDTriplets':
        """First ``n`` triplets."""
        return SVDTriplets(self.weights[:n].copy(), self.left[:n].copy(), self.right[:n].copy())
