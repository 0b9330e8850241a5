from __future__ import annotations

import struct
from typing import Dict, List

import numpy as np

from vox_audio import DecodeError, DecodedAudio


class WavHeaderDecoder:
    """Decodes the 44-byte-header WAVs produced by this package, nothing else."""

    def __init__(self) -> None:
        self.calls: List[bytes] = []

    def decode(self, data: bytes) -> DecodedAudio:
        self.calls.append(data)
        if data[:4] != b"RIFF" or len(data) < 44:
            raise DecodeError("not a WAV container")
        (sample_rate,) = struct.unpack_from("<I", data, 24)
        samples = np.frombuffer(data[44:], dtype="<i2").astype(np.float32) / 32768.0
        return DecodedAudio(samples, sample_rate)


class TableDecoder:
    """Returns pre-built float buffers keyed by the raw input bytes."""

    def __init__(self, table: Dict[bytes, DecodedAudio]) -> None:
        self.table = table

    def decode(self, data: bytes) -> DecodedAudio:
        try:
            return self.table[data]
        except KeyError:
            raise DecodeError(f"unknown payload {data[:8]!r}") from None


def header_fields(wav: bytes) -> tuple:
    return struct.unpack_from("<4sI4s4sIHHIIHH4sI", wav, 0)
