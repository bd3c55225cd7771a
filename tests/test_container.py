#!/usr/bin/env python3
"""
Test script for the binary container format.
"""

import io
import os
import struct
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from svd_img.aggregation import Aggregation
from svd_img.compression import SVDTriplets
from svd_img.container import (
    ContentType,
    SVDHeader,
    load_container,
    make_header,
    read_container,
    save_container,
    write_container,
)
from svd_img.errors import ContainerError, MediaReadError, UnexpectedEOFError
from svd_img.media import WavHeader


def make_triplets(n, height, width, dtype=np.float64, seed=0):
    rng = np.random.default_rng(seed)
    return SVDTriplets(
        weights=np.sort(rng.random(n))[::-1].astype(dtype),
        left=rng.normal(size=(n, height)).astype(dtype),
        right=rng.normal(size=(n, width)).astype(dtype),
    )


def serialize(header, triplets):
    buffer = io.BytesIO()
    write_container(buffer, header, triplets)
    return buffer.getvalue()


def test_image_layout_f64():
    triplets = make_triplets(1, 2, 3)
    content_type = ContentType.for_image(True, True, Aggregation.BIT_INTERLEAVE)
    data = serialize(make_header(content_type, triplets), triplets)

    assert data[0] == 0x07
    assert struct.unpack('>III', data[1:13]) == (1, 2, 3)
    assert len(data) == 1 + 12 + (1 + 2 + 3) * 8

    values = struct.unpack('>6d', data[13:])
    assert values[0] == triplets.weights[0]
    assert values[1:3] == tuple(triplets.left[0])
    assert values[3:] == tuple(triplets.right[0])


def test_image_layout_f32_without_aggregation():
    triplets = make_triplets(2, 4, 5, dtype=np.float32)
    content_type = ContentType.for_image(False, False, None)
    data = serialize(make_header(content_type, triplets), triplets)

    assert data[0] == 0x00
    assert len(data) == 1 + 12 + 2 * (1 + 4 + 5) * 4
    second = struct.unpack('>10f', data[13 + 40:])
    assert second[0] == triplets.weights[1]


def test_audio_layout():
    triplets = make_triplets(2, 3, 3)
    wav_header = WavHeader.pcm(1, 44100, 16)
    header = make_header(ContentType.for_audio(True), triplets, wav_header, 9)
    data = serialize(header, triplets)

    assert data[0] == 0x0C
    assert data[1:17] == wav_header.to_bytes()
    assert struct.unpack('>I', data[17:21]) == (9,)
    assert struct.unpack('>III', data[21:33]) == (2, 3, 3)
    assert header.size == 33
    assert len(data) == 33 + 2 * 7 * 8


def test_byte_packing_flag():
    content_type = ContentType.for_image(True, False, Aggregation.BYTE_PACK)
    assert content_type.to_byte() == 0x15
    assert ContentType.from_byte(0x15).aggregator is Aggregation.BYTE_PACK
    assert ContentType.from_byte(0x05).aggregator is Aggregation.BIT_INTERLEAVE
    assert ContentType.from_byte(0x04).aggregator is None


@pytest.mark.parametrize('dtype', [np.float32, np.float64])
def test_round_trip(dtype):
    triplets = make_triplets(3, 6, 4, dtype=dtype, seed=1)
    content_type = ContentType.for_image(dtype == np.float64, False, Aggregation.BIT_INTERLEAVE)
    header = make_header(content_type, triplets)

    read_header, read_triplets = read_container(io.BytesIO(serialize(header, triplets)))

    assert read_header == header
    assert read_triplets.weights.dtype == dtype
    np.testing.assert_array_equal(read_triplets.weights, triplets.weights)
    np.testing.assert_array_equal(read_triplets.left, triplets.left)
    np.testing.assert_array_equal(read_triplets.right, triplets.right)


def test_audio_round_trip_through_file(tmp_path):
    triplets = make_triplets(2, 3, 4)
    wav_header = WavHeader.pcm(2, 22050, 24)
    header = make_header(ContentType.for_audio(True), triplets, wav_header, 11)

    path = tmp_path / 'sound.svd'
    save_container(path, header, triplets)
    read_header, _ = load_container(path)

    assert read_header.wav_header == wav_header
    assert read_header.sample_count == 11


def test_truncated_stream():
    triplets = make_triplets(2, 3, 3)
    header = make_header(ContentType(), triplets)
    data = serialize(header, triplets)

    with pytest.raises(UnexpectedEOFError):
        read_container(io.BytesIO(data[:-1]))
    with pytest.raises(UnexpectedEOFError):
        read_container(io.BytesIO(data[:7]))
    with pytest.raises(UnexpectedEOFError):
        read_container(io.BytesIO(b''))


def test_invalid_headers():
    with pytest.raises(ContainerError):
        read_container(io.BytesIO(bytes([0x80]) + b'\x00' * 12))
    with pytest.raises(ContainerError):
        read_container(io.BytesIO(bytes([0x04]) + struct.pack('>III', 0, 3, 3)))
    with pytest.raises(ContainerError):
        read_container(io.BytesIO(bytes([0x04]) + struct.pack('>III', 4, 3, 3)))


def test_header_must_match_triplets():
    triplets = make_triplets(2, 3, 3)
    header = SVDHeader(ContentType(), 3, 3, 3)
    with pytest.raises(ContainerError):
        serialize(header, triplets)

    with pytest.raises(ContainerError):
        make_header(ContentType(use_f64=False), triplets)
    with pytest.raises(ContainerError):
        make_header(ContentType.for_audio(True), triplets)


def test_missing_file(tmp_path):
    with pytest.raises(MediaReadError):
        load_container(tmp_path / 'missing.svd')


def main():
    print("=" * 70)
    print("Container Format Test Suite")
    print("=" * 70)
    return pytest.main([__file__, '-v'])


if __name__ == '__main__':
    sys.exit(main())
