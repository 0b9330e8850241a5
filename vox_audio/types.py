"""Buffer types and constants shared across the audio core."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from .errors import DecodeError


SPEECH_SAMPLE_RATE = 24_000
MIX_SAMPLE_RATE = 24_000
SYNTH_SAMPLE_RATE = 44_100
SYNTH_DURATION_SECONDS = 10
MP3_BLOCK_SIZE = 1152
MP3_BITRATE_KBPS = 128
DEFAULT_MUSIC_GAIN = 0.2

MIME_WAV = "audio/wav"
MIME_MP3 = "audio/mp3"

_EXTENSIONS = {MIME_WAV: "wav", MIME_MP3: "mp3"}


class SynthPreset(str, Enum):
    """Backing tracks that can be rendered without asset files."""

    AMBIENT = "ambient"
    LOFI = "lofi"
    UPBEAT = "upbeat"


@dataclass(frozen=True)
class PcmBuffer:
    """Signed 16-bit PCM samples with their sample rate."""

    samples: np.ndarray
    sample_rate: int = SPEECH_SAMPLE_RATE
    channel_count: int = 1

    def __post_init__(self) -> None:
        samples = np.array(self.samples, dtype="<i2", copy=True).reshape(-1)
        if self.channel_count < 1:
            raise ValueError("channel_count must be positive")
        if samples.size % self.channel_count:
            raise ValueError(
                f"{samples.size} samples do not divide into {self.channel_count} channels"
            )
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    @classmethod
    def from_bytes(cls, raw: bytes, sample_rate: int = SPEECH_SAMPLE_RATE, channel_count: int = 1) -> "PcmBuffer":
        if len(raw) % 2:
            raise DecodeError(f"PCM16 payload has odd length {len(raw)}")
        return cls(np.frombuffer(raw, dtype="<i2"), sample_rate, channel_count)

    def to_bytes(self) -> bytes:
        return self.samples.tobytes()

    @property
    def frame_count(self) -> int:
        return self.samples.size // self.channel_count

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate


@dataclass(frozen=True)
class DecodedAudio:
    """Mono float samples in [-1.0, 1.0] at the source's native rate."""

    samples: np.ndarray
    sample_rate: int

    @property
    def duration_seconds(self) -> float:
        return len(self.samples) / self.sample_rate


@dataclass(frozen=True)
class EncodedAudio:
    """A finished, playable container and its MIME tag."""

    data: bytes
    mime_type: str = MIME_WAV

    @property
    def extension(self) -> str:
        return _EXTENSIONS.get(self.mime_type, "bin")

    def filename(self, stem: str) -> str:
        return f"{stem}.{self.extension}"

    def __len__(self) -> int:
        return len(self.data)


__all__ = [
    "DEFAULT_MUSIC_GAIN",
    "DecodedAudio",
    "EncodedAudio",
    "MIME_MP3",
    "MIME_WAV",
    "MIX_SAMPLE_RATE",
    "MP3_BITRATE_KBPS",
    "MP3_BLOCK_SIZE",
    "PcmBuffer",
    "SPEECH_SAMPLE_RATE",
    "SYNTH_DURATION_SECONDS",
    "SYNTH_SAMPLE_RATE",
    "SynthPreset",
]
