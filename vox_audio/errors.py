"""Exceptions raised by the audio core."""
from __future__ import annotations


class AudioCoreError(RuntimeError):
    """Base error for codec, mixing and synthesis failures."""


class DecodeError(AudioCoreError, ValueError):
    """Raised when transport text or an audio container cannot be decoded."""


class EncodeCapabilityUnavailable(AudioCoreError):
    """Raised when no MP3 encoder is available; callers fall back to WAV."""


class MixError(AudioCoreError):
    """Raised when speech and music cannot be mixed."""


class SynthesisError(AudioCoreError):
    """Raised when a backing track cannot be rendered."""


__all__ = [
    "AudioCoreError",
    "DecodeError",
    "EncodeCapabilityUnavailable",
    "MixError",
    "SynthesisError",
]
