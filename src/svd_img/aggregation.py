"""
Pixel aggregation: packing the channels of a pixel into one signed 32-bit
matrix cell, and unpacking them again.

Two schemes are available:
- BIT_INTERLEAVE: bit i of every channel lands in a group of 3 (RGB) or 4
  (RGBA) bits at offset 3*i (or 4*i), red highest inside the group. Equal
  bit-planes of neighbouring pixels end up in the same integer bit range,
  which a truncated factorization approximates better than plain bytes.
- BYTE_PACK: one 8-bit field per channel, alpha (or blue for RGB) highest,
  red lowest.

All functions work on whole numpy arrays; ``pixels`` has shape (..., C) with
C in {3, 4} and dtype uint8, packed values are int32.
"""

from enum import Enum

import numpy as np


class Aggregation(Enum):
    BIT_INTERLEAVE = 'bit_interleave'
    BYTE_PACK = 'byte_pack'


def _check_channels(channels):
    if channels not in (3, 4):
        raise ValueError(f"Aggregation needs 3 or 4 channels, got {channels}")


def interleave_bits(pixels: np.ndarray) -> np.ndarray:
    """
    Pack uint8 channels into int32 values by interleaving their bit-planes.

    Args:
        pixels: Array of shape (..., C), C = 3 (RGB) or 4 (RGBA)

    Returns:
        int32 array of shape (...)
    """
    channels = pixels.shape[-1]
    _check_channels(channels)

    planes = pixels.astype(np.uint32)
    packed = np.zeros(pixels.shape[:-1], dtype=np.uint32)
    for i in range(8):
        for c in range(channels):
            bit = (planes[..., c] >> i) & 1
            # channel 0 (red) is the highest bit of each group
            packed |= bit << (channels * i + (channels - 1 - c))
    return packed.view(np.int32)


def deinterleave_bits(values: np.ndarray, channels: int) -> np.ndarray:
    """
    Inverse of interleave_bits.

    Args:
        values: int32 array of packed pixels
        channels: 3 or 4

    Returns:
        uint8 array of shape values.shape + (channels,)
    """
    _check_channels(channels)

    bits = np.ascontiguousarray(values, dtype=np.int32).view(np.uint32)
    pixels = np.zeros(bits.shape + (channels,), dtype=np.uint32)
    for i in range(8):
        for c in range(channels):
            bit = (bits >> (channels * i + (channels - 1 - c))) & 1
            pixels[..., c] |= bit << i
    return pixels.astype(np.uint8)


def pack_bytes(pixels: np.ndarray) -> np.ndarray:
    """Pack channels into 8-bit fields, red in the lowest byte."""
    channels = pixels.shape[-1]
    _check_channels(channels)

    planes = pixels.astype(np.uint32)
    packed = np.zeros(pixels.shape[:-1], dtype=np.uint32)
    for c in range(channels):
        packed |= planes[..., c] << (8 * c)
    return packed.view(np.int32)


def unpack_bytes(values: np.ndarray, channels: int) -> np.ndarray:
    """Inverse of pack_bytes."""
    _check_channels(channels)

    fields = np.ascontiguousarray(values, dtype=np.int32).view(np.uint32)
    pixels = np.empty(fields.shape + (channels,), dtype=np.uint8)
    for c in range(channels):
        pixels[..., c] = (fields >> (8 * c)) & 0xFF
    return pixels


def aggregate(pixels: np.ndarray, scheme: Aggregation) -> np.ndarray:
    """Pack a pixel grid with the given scheme."""
    if scheme is Aggregation.BIT_INTERLEAVE:
        return interleave_bits(pixels)
    elif scheme is Aggregation.BYTE_PACK:
        return pack_bytes(pixels)
    raise ValueError(f"Unknown aggregation scheme: {scheme}")


def disaggregate(values: np.ndarray, channels: int, scheme: Aggregation) -> np.ndarray:
    """Unpack a grid of aggregated cells with the given scheme."""
    if scheme is Aggregation.BIT_INTERLEAVE:
        return deinterleave_bits(values, channels)
    elif scheme is Aggregation.BYTE_PACK:
        return unpack_bytes(values, channels)
    raise ValueError(f"Unknown aggregation scheme: {scheme}")
