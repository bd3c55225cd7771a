"""
WAV collaborator built on the standard library ``wave`` module.

Samples are returned as one flat int32 array (channels interleaved):
8-bit data stays unsigned (0..255), 16- and 24-bit data is signed.
"""

import struct
import wave
from dataclasses import dataclass

import numpy as np

from svd_img.errors import AudioFormatError, MediaReadError, MediaWriteError

WAV_HEADER_SIZE = 16
SUPPORTED_BIT_DEPTHS = (8, 16, 24)

_FMT = struct.Struct('<HHIIHH')


@dataclass(frozen=True)
class WavHeader:
    """Body of a WAV ``fmt `` chunk."""
    audio_format: int
    channel_count: int
    sampling_rate: int
    bytes_per_second: int
    bytes_per_sample: int  # block align
    bits_per_sample: int

    @classmethod
    def pcm(cls, channel_count, sampling_rate, bits_per_sample):
        block_align = channel_count * bits_per_sample // 8
        return cls(1, channel_count, sampling_rate,
                   sampling_rate * block_align, block_align, bits_per_sample)

    def to_bytes(self) -> bytes:
        return _FMT.pack(self.audio_format, self.channel_count, self.sampling_rate,
                         self.bytes_per_second, self.bytes_per_sample,
                         self.bits_per_sample)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'WavHeader':
        if len(data) != WAV_HEADER_SIZE:
            raise ValueError(f"WAV header must be {WAV_HEADER_SIZE} bytes, got {len(data)}")
        return cls(*_FMT.unpack(data))


def _decode_frames(raw: bytes, bits: int) -> np.ndarray:
    if bits == 8:
        return np.frombuffer(raw, dtype=np.uint8).astype(np.int32)
    elif bits == 16:
        return np.frombuffer(raw, dtype='<i2').astype(np.int32)
    elif bits == 24:
        b = np.frombuffer(raw, dtype=np.uint8).reshape(-1, 3).astype(np.int32)
        values = b[:, 0] | (b[:, 1] << 8) | (b[:, 2] << 16)
        # sign-extend from 24 bits
        return np.where(values & 0x800000, values - (1 << 24), values).astype(np.int32)
    raise AudioFormatError(f"Unsupported bit depth: {bits}")


def _encode_frames(samples: np.ndarray, bits: int) -> bytes:
    if bits == 8:
        return samples.astype(np.uint8).tobytes()
    elif bits == 16:
        return samples.astype('<i2').tobytes()
    elif bits == 24:
        v = samples.astype(np.int32) & 0xFFFFFF
        out = np.empty((len(v), 3), dtype=np.uint8)
        out[:, 0] = v & 0xFF
        out[:, 1] = (v >> 8) & 0xFF
        out[:, 2] = (v >> 16) & 0xFF
        return out.tobytes()
    raise AudioFormatError(f"Unsupported bit depth: {bits}")


def read_wav(path):
    """
    Read a PCM WAV file.

    Returns:
        (WavHeader, int32 sample array)
    """
    try:
        with wave.open(str(path), 'rb') as wf:
            channels = wf.getnchannels()
            bits = wf.getsampwidth() * 8
            rate = wf.getframerate()
            raw = wf.readframes(wf.getnframes())
    except FileNotFoundError as e:
        raise MediaReadError(f"Cannot open WAV file {path}: {e}") from e
    except (wave.Error, EOFError) as e:
        raise AudioFormatError(f"Cannot decode WAV file {path}: {e}") from e
    except OSError as e:
        raise MediaReadError(f"Cannot read WAV file {path}: {e}") from e

    if bits not in SUPPORTED_BIT_DEPTHS:
        raise AudioFormatError(f"Unsupported bit depth {bits} in {path}")

    return WavHeader.pcm(channels, rate, bits), _decode_frames(raw, bits)


def write_wav(path, header: WavHeader, samples: np.ndarray):
    """Write samples (already quantized to ``header.bits_per_sample``)."""
    bits = header.bits_per_sample
    frames = _encode_frames(samples, bits) if bits in SUPPORTED_BIT_DEPTHS else b''
    try:
        with wave.open(str(path), 'wb') as wf:
            wf.setnchannels(header.channel_count)
            wf.setsampwidth(max(bits // 8, 1))
            wf.setframerate(header.sampling_rate)
            wf.writeframes(frames)
    except (wave.Error, OSError) as e:
        raise MediaWriteError(f"Cannot write WAV file {path}: {e}") from e
