"""
PCM samples <-> Sample Matrix adapter.

Samples fill an as-square-as-possible matrix row by row; trailing cells
beyond the sample count are zero.
"""

import logging
import math

import numpy as np

from svd_img.errors import AudioFormatError
from svd_img.options import round_half_away

logger = logging.getLogger(__name__)

# Valid sample range for each supported bit depth
SAMPLE_RANGES = {
    8: (0, 0xFF),
    16: (-(1 << 15), (1 << 15) - 1),
    24: (-(1 << 23), (1 << 23) - 1),
}


def matrix_shape(count: int):
    """Rows and columns used for ``count`` samples."""
    if count <= 0:
        raise AudioFormatError("Cannot build a matrix from an empty sample stream")
    rows = round_half_away(math.sqrt(count))
    cols = math.ceil(count / rows)
    return rows, cols


def sound_matrix(samples: np.ndarray) -> np.ndarray:
    """Arrange a flat int32 sample stream into a zero-padded matrix."""
    count = len(samples)
    rows, cols = matrix_shape(count)

    flat = np.zeros(rows * cols, dtype=np.int32)
    flat[:count] = samples
    return flat.reshape(rows, cols)


def sound_from_matrix(matrix: np.ndarray, sample_count: int,
                      bits_per_sample: int) -> np.ndarray:
    """
    Read ``sample_count`` samples back in row-major order and re-quantize
    them to ``bits_per_sample``.

    Returns an empty array for bit depths other than 8, 16 and 24.
    """
    if bits_per_sample not in SAMPLE_RANGES:
        logger.warning("Unsupported bit depth %d, audio payload left empty", bits_per_sample)
        return np.zeros(0, dtype=np.int32)

    low, high = SAMPLE_RANGES[bits_per_sample]
    samples = np.asarray(matrix).reshape(-1)[:sample_count]
    return np.clip(samples, low, high).astype(np.int32)
