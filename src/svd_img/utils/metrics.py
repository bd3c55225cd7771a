"""
Quality and size metrics for truncated factorizations.

This module provides utilities for measuring:
1. Reconstruction error (how far the approximation is from the source)
2. PSNR of 8-bit media
3. Container size and compression ratio
"""

import math

import numpy as np
import torch
import torch.nn.functional as F

from svd_img.options import triplet_bytes
from svd_img.media.wav_io import WAV_HEADER_SIZE


# =============================================================================
# 1. Reconstruction Error
# =============================================================================

def compute_reconstruction_error(original, reconstructed, metric='relative'):
    """
    Compute reconstruction error between original and reconstructed matrices.

    Args:
        original: Original matrix (tensor or array)
        reconstructed: Reconstructed matrix (must have same shape)
        metric: Error metric type:
            - 'relative': Relative Frobenius norm (default, scale-invariant)
            - 'frobenius': Absolute Frobenius norm
            - 'mse': Mean squared error
            - 'max': Largest absolute cell difference

    Returns:
        float: Reconstruction error
    """
    original = torch.as_tensor(np.asarray(original), dtype=torch.float64)
    reconstructed = torch.as_tensor(np.asarray(reconstructed), dtype=torch.float64)
    assert original.shape == reconstructed.shape, "Matrices must have same shape"

    if metric == 'relative':
        # Relative Frobenius norm: ||A - B||_F / ||A||_F
        diff_norm = torch.linalg.norm(original - reconstructed)
        orig_norm = torch.linalg.norm(original)
        error = (diff_norm / orig_norm).item() if orig_norm > 0 else 0.0

    elif metric == 'frobenius':
        error = torch.linalg.norm(original - reconstructed).item()

    elif metric == 'mse':
        error = F.mse_loss(reconstructed, original).item()

    elif metric == 'max':
        error = torch.max(torch.abs(original - reconstructed)).item() if original.numel() else 0.0

    else:
        raise ValueError(f"Unknown metric: {metric}. Use 'relative', 'frobenius', 'mse' or 'max'")

    return error


# =============================================================================
# 2. PSNR
# =============================================================================

def compute_psnr(original, reconstructed, peak=255.0):
    """
    Peak signal-to-noise ratio in dB (inf for identical inputs).

    Args:
        original: Original samples, e.g. uint8 pixels
        reconstructed: Reconstructed samples of the same shape
        peak: Largest possible sample value
    """
    mse = compute_reconstruction_error(original, reconstructed, metric='mse')
    if mse == 0:
        return math.inf
    return 10.0 * math.log10(peak * peak / mse)


# =============================================================================
# 3. Container Size
# =============================================================================

def container_size(n, height, width, use_f64=True, is_audio=False):
    """Exact size in bytes of a container holding ``n`` triplets."""
    header = 1 + 12 + (WAV_HEADER_SIZE + 4 if is_audio else 0)
    return header + n * triplet_bytes(height, width, use_f64)


def get_compression_ratio(original_size, n, height, width, use_f64=True, is_audio=False):
    """
    Compression ratio (original_size / container_size).

    Returns:
        float, > 1 when the container is smaller than the original
    """
    return original_size / container_size(n, height, width, use_f64, is_audio)
