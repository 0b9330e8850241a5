"""Transport decoding, WAV wrapping and PCM16 quantization."""
from __future__ import annotations

import base64
import binascii
import struct
from typing import Union

import numpy as np

from .errors import DecodeError
from .types import MIME_WAV, SPEECH_SAMPLE_RATE, EncodedAudio, PcmBuffer


WAV_HEADER_SIZE = 44

# RIFF/WAVE header for 16-bit PCM, little-endian throughout.
_WAV_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def decode_transport(text: Union[str, bytes]) -> bytes:
    """Decode standard base64 text into the raw bytes it carries.

    Trailing ``=`` padding is optional. Any character outside the base64
    alphabet, or a length that cannot be a base64 quantum, raises
    :class:`DecodeError`.
    """

    if isinstance(text, str):
        try:
            payload = text.strip().encode("ascii")
        except UnicodeEncodeError as exc:
            raise DecodeError("transport text contains non-ASCII characters") from exc
    else:
        payload = bytes(text).strip()

    body = payload.rstrip(b"=")
    padding = len(payload) - len(body)
    remainder = len(body) % 4
    if remainder == 1:
        raise DecodeError(f"invalid base64 length {len(payload)}")
    needed = (4 - remainder) % 4
    if padding not in (0, needed):
        raise DecodeError(f"invalid base64 padding: {padding} '=' where {needed} expected")
    payload = body + b"=" * needed

    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"malformed base64 input: {exc}") from exc


def wrap_wav(pcm: bytes, sample_rate: int = SPEECH_SAMPLE_RATE, channels: int = 1) -> bytes:
    """Prefix raw 16-bit PCM with a 44-byte WAV header."""

    data_length = len(pcm)
    header = _WAV_HEADER.pack(
        b"RIFF",
        36 + data_length,
        b"WAVE",
        b"fmt ",
        16,
        1,
        channels,
        sample_rate,
        sample_rate * channels * 2,
        channels * 2,
        16,
        b"data",
        data_length,
    )
    return header + bytes(pcm)


def encode_wav(pcm: PcmBuffer) -> EncodedAudio:
    return EncodedAudio(wrap_wav(pcm.to_bytes(), pcm.sample_rate, pcm.channel_count), MIME_WAV)


def quantize(frame: np.ndarray) -> np.ndarray:
    """Convert float samples to int16 with the asymmetric PCM16 scale.

    Negative values scale by 32768 and positive values by 32767 after
    clamping to [-1, 1]; the result is truncated toward zero.
    """

    values = np.nan_to_num(np.asarray(frame, dtype=np.float64), nan=0.0)
    values = np.clip(values, -1.0, 1.0)
    scaled = np.where(values < 0, values * 32768.0, values * 32767.0)
    return np.trunc(scaled).astype("<i2")


__all__ = ["WAV_HEADER_SIZE", "decode_transport", "encode_wav", "quantize", "wrap_wav"]
