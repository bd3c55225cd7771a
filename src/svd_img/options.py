"""
Codec configuration: compression policies and the immutable option set that
is threaded through encode, decode, reduce and preview.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Optional, Union

from svd_img.aggregation import Aggregation
from svd_img.errors import (
    InvalidRatioError,
    NTooSmallError,
    RatioTooRestrictiveError,
)

logger = logging.getLogger(__name__)


def round_half_away(x: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.floor(x + 0.5)) if x >= 0 else -int(math.floor(-x + 0.5))


def scalar_bytes(use_f64: bool) -> int:
    return 8 if use_f64 else 4


def triplet_bytes(height: int, width: int, use_f64: bool) -> int:
    """Serialized size of one triplet: weight + left + right vectors."""
    return scalar_bytes(use_f64) * (1 + height + width)


@dataclass(frozen=True)
class FixedCount:
    """Keep exactly ``n`` triplets."""
    n: int

    def n_with(self, height: int, width: int, use_f64: bool = True,
               original_file_size: int = 0) -> int:
        if self.n <= 0:
            raise NTooSmallError(f"Triplet count must be positive, got {self.n}")
        return self.n

    def __str__(self):
        return f"{self.n} triplets"


@dataclass(frozen=True)
class RatioPercent:
    """Keep as many triplets as fit in ``r`` percent of the original file size."""
    r: float

    def n_with(self, height: int, width: int, use_f64: bool = True,
               original_file_size: int = 0) -> int:
        if not 0 < self.r <= 100:
            raise InvalidRatioError(f"Ratio must be in (0, 100], got {self.r}")

        logger.info("Original file size: %d", original_file_size)
        vector_size = triplet_bytes(height, width, use_f64)
        # n * vector_size = r/100 * original_file_size
        n = (self.r / 100.0) * original_file_size / vector_size
        rounded = round_half_away(n)
        if rounded <= 0:
            raise RatioTooRestrictiveError(
                f"Ratio {self.r}% of {original_file_size} bytes leaves no room for a "
                f"single {vector_size}-byte triplet ({height}x{width})"
            )
        logger.info("Output file size: %d", rounded * vector_size)
        return rounded

    def __str__(self):
        return f"{self.r:g}% of original size"


CompressionPolicy = Union[FixedCount, RatioPercent]


def parse_policy(text: str) -> CompressionPolicy:
    """
    Parse a policy from the command line.

    ``"30"`` is a fixed count, ``"25%"`` a ratio of the original size.
    """
    text = text.strip()
    try:
        if text.endswith('%'):
            return RatioPercent(float(text[:-1]))
        return FixedCount(int(text))
    except ValueError:
        raise ValueError(f"Invalid compression policy: {text!r}") from None


@dataclass(frozen=True)
class CodecOptions:
    """Options for a single codec invocation."""

    # Triplet selection
    policy: CompressionPolicy = field(default_factory=lambda: RatioPercent(25))
    use_f64: bool = True

    # Factorization primitive
    eps: float = 1.0e-5
    n_iter: int = 0  # 0 = iterate to convergence
    factorization: str = 'standard'  # 'standard' or 'randomized'
    n_oversamples: int = 10
    random_state: Optional[int] = None

    # Image layout
    use_aggregate: bool = True
    aggregator: Aggregation = Aggregation.BIT_INTERLEAVE
    with_alpha: bool = False

    # Treat the input as WAV regardless of its extension
    force_wav: bool = False

    def __post_init__(self):
        if self.factorization not in ('standard', 'randomized'):
            raise ValueError(f"Unknown factorization: {self.factorization}")
        if self.n_iter < 0:
            raise ValueError(f"n_iter must be >= 0, got {self.n_iter}")

    def n_with(self, height: int, width: int, original_file_size: int = 0) -> int:
        """Resolve the policy to a triplet count for a height x width matrix."""
        return self.policy.n_with(height, width, self.use_f64, original_file_size)

    def with_options(self, **changes) -> 'CodecOptions':
        return replace(self, **changes)
