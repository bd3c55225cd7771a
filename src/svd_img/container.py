"""
Binary container for truncated factorizations.

Layout (big-endian):

    u8     content type flags
           bit0 use_aggregate, bit1 has_alpha, bit2 use_f64, bit3 is_audio,
           bit4 byte_packing (aggregation scheme, only meaningful with bit0)
    [is_audio] 16-byte WAV fmt header, u32 sample count
    u32    n
    u32    height
    u32    width
    n x (weight, left[height], right[width]) as f32 or f64
"""

import io
import logging
import struct
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from svd_img.aggregation import Aggregation
from svd_img.compression.triplets import SVDTriplets
from svd_img.errors import ContainerError, MediaReadError, MediaWriteError, UnexpectedEOFError
from svd_img.media.wav_io import WAV_HEADER_SIZE, WavHeader

logger = logging.getLogger(__name__)

FLAG_AGGREGATE = 0x01
FLAG_ALPHA = 0x02
FLAG_F64 = 0x04
FLAG_AUDIO = 0x08
FLAG_BYTE_PACKING = 0x10
KNOWN_FLAGS = FLAG_AGGREGATE | FLAG_ALPHA | FLAG_F64 | FLAG_AUDIO | FLAG_BYTE_PACKING

_U32 = struct.Struct('>I')


@dataclass(frozen=True)
class ContentType:
    is_audio: bool = False
    use_f64: bool = True
    has_alpha: bool = False
    use_aggregate: bool = True
    byte_packing: bool = False

    @classmethod
    def for_image(cls, use_f64, with_alpha, aggregator: Optional[Aggregation]):
        return cls(
            is_audio=False,
            use_f64=use_f64,
            has_alpha=with_alpha,
            use_aggregate=aggregator is not None,
            byte_packing=aggregator is Aggregation.BYTE_PACK,
        )

    @classmethod
    def for_audio(cls, use_f64):
        return cls(is_audio=True, use_f64=use_f64, has_alpha=False,
                   use_aggregate=False, byte_packing=False)

    @property
    def aggregator(self) -> Optional[Aggregation]:
        """Aggregation scheme of image cells, None for the 2x2 layout."""
        if not self.use_aggregate:
            return None
        return Aggregation.BYTE_PACK if self.byte_packing else Aggregation.BIT_INTERLEAVE

    def to_byte(self) -> int:
        return ((FLAG_AUDIO if self.is_audio else 0)
                | (FLAG_F64 if self.use_f64 else 0)
                | (FLAG_ALPHA if self.has_alpha else 0)
                | (FLAG_AGGREGATE if self.use_aggregate else 0)
                | (FLAG_BYTE_PACKING if self.use_aggregate and self.byte_packing else 0))

    @classmethod
    def from_byte(cls, value: int) -> 'ContentType':
        if value & ~KNOWN_FLAGS:
            raise ContainerError(f"Unknown content type flags: {value:#04x}")
        return cls(
            is_audio=bool(value & FLAG_AUDIO),
            use_f64=bool(value & FLAG_F64),
            has_alpha=bool(value & FLAG_ALPHA),
            use_aggregate=bool(value & FLAG_AGGREGATE),
            byte_packing=bool(value & FLAG_BYTE_PACKING),
        )


@dataclass(frozen=True)
class SVDHeader:
    content_type: ContentType
    n: int
    height: int
    width: int
    wav_header: Optional[WavHeader] = None
    sample_count: int = 0

    @property
    def scalar_dtype(self) -> np.dtype:
        return np.dtype('>f8' if self.content_type.use_f64 else '>f4')

    @property
    def size(self) -> int:
        """Encoded header length in bytes."""
        audio = WAV_HEADER_SIZE + 4 if self.content_type.is_audio else 0
        return 1 + audio + 12

    def with_count(self, n: int) -> 'SVDHeader':
        return SVDHeader(self.content_type, n, self.height, self.width,
                         self.wav_header, self.sample_count)


def make_header(content_type: ContentType, triplets: SVDTriplets,
                wav_header: Optional[WavHeader] = None, sample_count: int = 0) -> SVDHeader:
    """Header describing ``triplets``; dimensions and count come from the data."""
    if content_type.use_f64 != triplets.use_f64:
        raise ContainerError("Content type precision does not match the triplets")
    if content_type.is_audio and wav_header is None:
        raise ContainerError("Audio containers need a WAV header")
    return SVDHeader(content_type, len(triplets), triplets.height, triplets.width,
                     wav_header, sample_count)


# =============================================================================
# Writing
# =============================================================================

def write_vectors_header(stream, header: SVDHeader):
    stream.write(bytes([header.content_type.to_byte()]))

    if header.content_type.is_audio:
        stream.write(header.wav_header.to_bytes())
        stream.write(_U32.pack(header.sample_count))

    stream.write(_U32.pack(header.n))
    stream.write(_U32.pack(header.height))
    stream.write(_U32.pack(header.width))


def write_vectors(stream, triplets: SVDTriplets, dtype):
    """Each triplet as weight, left vector, right vector."""
    rows = np.concatenate(
        [triplets.weights[:, None], triplets.left, triplets.right], axis=1
    )
    stream.write(rows.astype(dtype).tobytes())


def write_container(stream, header: SVDHeader, triplets: SVDTriplets):
    if header.n != len(triplets) or header.height != triplets.height \
            or header.width != triplets.width:
        raise ContainerError(
            f"Header ({header.n}, {header.height}, {header.width}) does not match "
            f"triplets ({len(triplets)}, {triplets.height}, {triplets.width})"
        )
    if header.content_type.use_f64 != triplets.use_f64:
        raise ContainerError("Header precision does not match the triplets")

    write_vectors_header(stream, header)
    write_vectors(stream, triplets, header.scalar_dtype)


def save_container(path, header: SVDHeader, triplets: SVDTriplets):
    # Serialize fully before touching the destination
    buffer = io.BytesIO()
    write_container(buffer, header, triplets)
    try:
        with open(path, 'wb') as f:
            f.write(buffer.getvalue())
    except OSError as e:
        raise MediaWriteError(f"Cannot write container {path}: {e}") from e
    logger.info("Wrote %d triplets (%dx%d) to %s, %d bytes",
                header.n, header.height, header.width, path, buffer.tell())


# =============================================================================
# Reading
# =============================================================================

def _read_exact(stream, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise UnexpectedEOFError(f"Expected {size} bytes, got {len(data)}")
    return data


def _read_u32(stream) -> int:
    return _U32.unpack(_read_exact(stream, 4))[0]


def read_vectors_header(stream) -> SVDHeader:
    content_type = ContentType.from_byte(_read_exact(stream, 1)[0])

    wav_header = None
    sample_count = 0
    if content_type.is_audio:
        wav_header = WavHeader.from_bytes(_read_exact(stream, WAV_HEADER_SIZE))
        sample_count = _read_u32(stream)

    n = _read_u32(stream)
    height = _read_u32(stream)
    width = _read_u32(stream)

    if n == 0:
        raise ContainerError("Container holds no triplets")
    if n > min(height, width):
        raise ContainerError(f"Container declares {n} triplets for a {height}x{width} matrix")

    return SVDHeader(content_type, n, height, width, wav_header, sample_count)


def read_vectors(stream, header: SVDHeader) -> SVDTriplets:
    dtype = header.scalar_dtype
    row = 1 + header.height + header.width
    data = _read_exact(stream, header.n * row * dtype.itemsize)

    rows = np.frombuffer(data, dtype=dtype).reshape(header.n, row)
    rows = rows.astype(dtype.newbyteorder('='))
    return SVDTriplets(
        weights=rows[:, 0].copy(),
        left=rows[:, 1:1 + header.height].copy(),
        right=rows[:, 1 + header.height:].copy(),
    )


def read_container(stream) -> Tuple[SVDHeader, SVDTriplets]:
    header = read_vectors_header(stream)
    return header, read_vectors(stream, header)


def load_container(path) -> Tuple[SVDHeader, SVDTriplets]:
    try:
        with open(path, 'rb') as f:
            return read_container(f)
    except OSError as e:
        raise MediaReadError(f"Cannot read container {path}: {e}") from e
