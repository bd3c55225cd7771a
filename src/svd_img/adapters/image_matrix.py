"""
Image <-> Sample Matrix adapter.

With aggregation every pixel becomes one int32 cell of a height x width
matrix. Without it each pixel is spread over a 2x2 block of a
2*height x 2*width matrix:

    (2i, 2j)   = R    (2i, 2j+1)   = B
    (2i+1, 2j) = G    (2i+1, 2j+1) = A
"""

from typing import Optional

import numpy as np

from svd_img.aggregation import Aggregation, aggregate, disaggregate

ALPHA_MAX = 0xFF


def image_matrix(pixels: np.ndarray, aggregator: Optional[Aggregation]) -> np.ndarray:
    """
    Build the Sample Matrix of an RGB or RGBA pixel grid.

    Args:
        pixels: uint8 array of shape (height, width, 3 or 4)
        aggregator: Packing scheme, or None for the 2x2 block layout

    Returns:
        int32 matrix
    """
    height, width, channels = pixels.shape

    if aggregator is not None:
        return aggregate(pixels, aggregator)

    matrix = np.zeros((2 * height, 2 * width), dtype=np.int32)
    matrix[0::2, 0::2] = pixels[..., 0]
    matrix[1::2, 0::2] = pixels[..., 1]
    matrix[0::2, 1::2] = pixels[..., 2]
    if channels == 4:
        matrix[1::2, 1::2] = pixels[..., 3]
    else:
        matrix[1::2, 1::2] = ALPHA_MAX
    return matrix


def imgbuf_from_matrix(matrix: np.ndarray, with_alpha: bool,
                       aggregator: Optional[Aggregation]) -> np.ndarray:
    """
    Inverse of image_matrix.

    ``matrix`` holds int32 cells when aggregated, uint8 cells otherwise.
    """
    channels = 4 if with_alpha else 3

    if aggregator is not None:
        return disaggregate(matrix, channels, aggregator)

    m_height, m_width = matrix.shape
    pixels = np.empty((m_height // 2, m_width // 2, channels), dtype=np.uint8)
    pixels[..., 0] = matrix[0::2, 0::2]
    pixels[..., 1] = matrix[1::2, 0::2]
    pixels[..., 2] = matrix[0::2, 1::2]
    if with_alpha:
        pixels[..., 3] = matrix[1::2, 1::2]
    return pixels
