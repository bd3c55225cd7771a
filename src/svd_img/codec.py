"""
Encode, decode, reduce and preview pipelines.

    encode  = read media -> Sample Matrix -> policy -> rank reduction -> container
    decode  = container -> reconstruction -> media
    reduce  = container -> policy -> truncate -> container
    preview = read media -> ... -> rank reduction -> reconstruction -> media
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from svd_img.adapters import image_matrix, imgbuf_from_matrix, sound_from_matrix, sound_matrix
from svd_img.compression import SVDTriplets, matrix_reduce, recompute_matrix
from svd_img.container import (
    ContentType,
    SVDHeader,
    load_container,
    make_header,
    save_container,
)
from svd_img.errors import MediaReadError, ReduceError
from svd_img.media import WavHeader, read_image, read_wav, write_image, write_wav
from svd_img.options import CodecOptions

logger = logging.getLogger(__name__)


@dataclass
class MediaMatrix:
    """Sample Matrix of a media file, plus what is needed to describe it."""
    matrix: np.ndarray
    content_type: ContentType
    original_file_size: int
    wav_header: Optional[WavHeader] = None
    sample_count: int = 0


def is_wav_path(path) -> bool:
    return Path(path).suffix.lower() == '.wav'


def file_size(path) -> int:
    try:
        return os.path.getsize(path)
    except OSError as e:
        raise MediaReadError(f"Cannot stat {path}: {e}") from e


def read_matrix(input_path, options: CodecOptions) -> MediaMatrix:
    """Read an image or WAV file into its Sample Matrix."""
    original_file_size = file_size(input_path)

    if options.force_wav or is_wav_path(input_path):
        wav_header, samples = read_wav(input_path)
        logger.debug("Read %d samples at %d bits from %s",
                     len(samples), wav_header.bits_per_sample, input_path)
        return MediaMatrix(
            matrix=sound_matrix(samples),
            content_type=ContentType.for_audio(options.use_f64),
            original_file_size=original_file_size,
            wav_header=wav_header,
            sample_count=len(samples),
        )

    pixels = read_image(input_path, with_alpha=options.with_alpha)
    aggregator = options.aggregator if options.use_aggregate else None
    logger.debug("Read %dx%d image from %s", pixels.shape[1], pixels.shape[0], input_path)
    return MediaMatrix(
        matrix=image_matrix(pixels, aggregator),
        content_type=ContentType.for_image(options.use_f64, options.with_alpha, aggregator),
        original_file_size=original_file_size,
    )


def compress_media(input_path, options: CodecOptions) -> Tuple[SVDHeader, SVDTriplets]:
    """Build the container header and triplets of a media file in memory."""
    media = read_matrix(input_path, options)
    triplets = matrix_reduce(media.matrix, options, media.original_file_size)
    header = make_header(media.content_type, triplets, media.wav_header, media.sample_count)
    return header, triplets


def reconstruct_media(header: SVDHeader, triplets: SVDTriplets) -> np.ndarray:
    """
    Recombine triplets into output samples.

    Returns:
        int32 sample stream for audio, uint8 (height, width, C) pixels for images
    """
    content_type = header.content_type

    if content_type.is_audio:
        matrix = recompute_matrix(triplets, np.int32)
        return sound_from_matrix(matrix, header.sample_count,
                                 header.wav_header.bits_per_sample)

    aggregator = content_type.aggregator
    matrix = recompute_matrix(triplets, np.int32 if aggregator is not None else np.uint8)
    return imgbuf_from_matrix(matrix, content_type.has_alpha, aggregator)


def write_media(output_path, header: SVDHeader, data: np.ndarray):
    if header.content_type.is_audio:
        write_wav(output_path, header.wav_header, data)
    else:
        write_image(output_path, data)


def encode(input_path, output_path, options: CodecOptions = None) -> SVDHeader:
    """
    Encode an image or WAV file into a container.

    Args:
        input_path: Media file
        output_path: Container to create
        options: Codec options (defaults to CodecOptions())

    Returns:
        Header of the written container
    """
    options = options or CodecOptions()
    logger.info("Encoding %s (%s)", input_path, options.policy)

    header, triplets = compress_media(input_path, options)
    save_container(output_path, header, triplets)
    return header


def decode(input_path, output_path) -> SVDHeader:
    """Decode a container into an image or WAV file."""
    logger.info("Decoding %s", input_path)
    header, triplets = load_container(input_path)
    write_media(output_path, header, reconstruct_media(header, triplets))
    return header


def reduce(input_path, output_path, options: CodecOptions = None) -> SVDHeader:
    """
    Truncate an existing container to fewer triplets.

    The new count comes from ``options.policy`` applied to the stored
    dimensions and precision; a ratio policy is relative to the size of the
    input container. The factorization is not recomputed.
    """
    options = options or CodecOptions()
    logger.info("Reducing %s (%s)", input_path, options.policy)

    header, triplets = load_container(input_path)
    n = options.policy.n_with(header.height, header.width,
                              header.content_type.use_f64, file_size(input_path))
    if n > header.n:
        raise ReduceError(f"Cannot reduce {header.n} triplets to {n}")

    reduced = header.with_count(n)
    save_container(output_path, reduced, triplets.truncate(n))
    return reduced


def preview(input_path, output_path, options: CodecOptions = None) -> SVDHeader:
    """Compress and reconstruct in memory, writing only the approximated media."""
    options = options or CodecOptions()
    logger.info("Previewing %s (%s)", input_path, options.policy)

    header, triplets = compress_media(input_path, options)
    write_media(output_path, header, reconstruct_media(header, triplets))
    return header
