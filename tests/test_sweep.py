#!/usr/bin/env python3
"""
Test script for quality metrics and the rank sweep runner.
"""

import math
import os
import sys

import numpy as np
import pytest
from PIL import Image

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from svd_img.media import WavHeader, write_wav
from svd_img.options import CodecOptions
from svd_img.utils.metrics import (
    compute_psnr,
    compute_reconstruction_error,
    container_size,
    get_compression_ratio,
)
from svd_img.utils.sweep_runner import SweepResults, SweepRunner


def test_reconstruction_error_metrics():
    a = np.array([[3.0, 0.0], [0.0, 4.0]])
    b = np.zeros((2, 2))

    assert compute_reconstruction_error(a, a) == 0.0
    assert compute_reconstruction_error(a, b) == pytest.approx(1.0)
    assert compute_reconstruction_error(a, b, metric='frobenius') == pytest.approx(5.0)
    assert compute_reconstruction_error(a, b, metric='mse') == pytest.approx(25.0 / 4)
    assert compute_reconstruction_error(a, b, metric='max') == pytest.approx(4.0)
    assert compute_reconstruction_error(b, b) == 0.0

    with pytest.raises(ValueError):
        compute_reconstruction_error(a, b, metric='l1')


def test_psnr():
    a = np.full((4, 4), 100, dtype=np.uint8)
    assert compute_psnr(a, a) == math.inf

    b = a.copy()
    b[0, 0] = 116  # mse = 16
    assert compute_psnr(a, b) == pytest.approx(10 * math.log10(255 ** 2 / 16))


def test_container_size():
    assert container_size(1, 2, 3) == 13 + 48
    assert container_size(2, 2, 3, use_f64=False) == 13 + 48
    assert container_size(1, 2, 3, is_audio=True) == 33 + 48
    assert get_compression_ratio(122, 1, 2, 3) == pytest.approx(2.0)


def test_image_sweep(tmp_path):
    y, x = np.mgrid[0:16, 0:12]
    rng = np.random.default_rng(0)
    pixels = np.stack([x * 20, y * 15, rng.integers(0, 256, size=(16, 12))], axis=-1)
    source = tmp_path / 'gradient.png'
    Image.fromarray(pixels.astype(np.uint8)).save(source)

    runner = SweepRunner(output_dir=tmp_path / 'results')
    results = runner.run_sweep(source, [8, 1, 2, 4, 12], CodecOptions())

    assert [p.n for p in results.points] == [1, 2, 4, 8, 12]
    assert (results.height, results.width) == (16, 12)

    errors = [p.relative_error for p in results.points]
    for previous, current in zip(errors, errors[1:]):
        assert current <= previous + 1e-9
    assert errors[-1] < 1e-9
    assert results.points[-1].psnr == math.inf

    sizes = [p.container_bytes for p in results.points]
    assert sizes == [container_size(n, 16, 12) for n in [1, 2, 4, 8, 12]]

    saved = tmp_path / 'results' / 'gradient_sweep.json'
    assert saved.exists()
    loaded = SweepResults.load(saved)
    assert [p.n for p in loaded.points] == [1, 2, 4, 8, 12]
    assert loaded.options['aggregator'] == 'bit_interleave'


def test_audio_sweep(tmp_path):
    samples = (3000 * np.sin(np.arange(400) / 5.0)).astype(np.int32)
    write_wav(tmp_path / 'tone.wav', WavHeader.pcm(1, 8000, 16), samples)

    runner = SweepRunner(output_dir=tmp_path)
    results = runner.run_sweep(tmp_path / 'tone.wav', [1, 20], save=False)

    assert results.is_audio
    assert all(p.psnr is None for p in results.points)
    assert results.points[-1].relative_error < 1e-9
    assert not (tmp_path / 'tone_sweep.json').exists()


def main():
    print("=" * 70)
    print("Metrics and Sweep Test Suite")
    print("=" * 70)
    return pytest.main([__file__, '-v'])


if __name__ == '__main__':
    sys.exit(main())
