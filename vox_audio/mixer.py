"""Offline mixing of speech over a looping background track."""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

import numpy as np
from pydub import AudioSegment

from .codec import quantize, wrap_wav
from .errors import DecodeError, MixError
from .types import MIME_WAV, MIX_SAMPLE_RATE, DecodedAudio, EncodedAudio

log = logging.getLogger(__name__)

AudioInput = Union[EncodedAudio, bytes]


class AudioDecoder(Protocol):
    """Decodes an arbitrary audio container into mono float samples."""

    def decode(self, data: bytes) -> DecodedAudio:
        """Return the samples and native rate or raise :class:`DecodeError`."""


class PydubAudioDecoder:
    """Concrete :class:`AudioDecoder` implementation powered by :mod:`pydub`."""

    def __init__(self, ffmpeg_path: Path | None = None) -> None:
        if ffmpeg_path and ffmpeg_path.exists():
            AudioSegment.converter = str(ffmpeg_path)

    def decode(self, data: bytes) -> DecodedAudio:
        # RIFF input is parsed in-process; everything else goes through ffmpeg.
        fmt = "wav" if data[:4] == b"RIFF" else None
        try:
            segment = AudioSegment.from_file(io.BytesIO(data), format=fmt)
        except Exception as exc:  # ffmpeg and pydub parse failures have no common base
            raise DecodeError(f"unsupported or corrupt audio container: {exc}") from exc

        full_scale = float(1 << (8 * segment.sample_width - 1))
        samples = np.array(segment.get_array_of_samples(), dtype=np.float32) / full_scale
        if segment.channels > 1:
            samples = samples.reshape(-1, segment.channels).mean(axis=1)
        return DecodedAudio(samples.astype(np.float32), segment.frame_rate)


def _payload(audio: AudioInput) -> bytes:
    if isinstance(audio, EncodedAudio):
        return audio.data
    return bytes(audio)


def _decode(decoder: AudioDecoder, audio: AudioInput, role: str) -> DecodedAudio:
    try:
        return decoder.decode(_payload(audio))
    except DecodeError as exc:
        raise MixError(f"could not decode {role} audio: {exc}") from exc


def render_mix(speech: DecodedAudio, music: DecodedAudio, music_gain: float) -> np.ndarray:
    """Sum speech once and music looped under it, at the fixed mix rate.

    The output lasts exactly as long as the speech. Sources are read
    sample-for-sample at :data:`MIX_SAMPLE_RATE` whatever their native rate.
    """

    if not 0.0 <= music_gain <= 1.0:
        raise MixError(f"music gain {music_gain} outside [0, 1]")
    if len(music.samples) == 0:
        raise MixError("music track contains no samples")
    for source in (speech, music):
        if source.sample_rate != MIX_SAMPLE_RATE:
            log.warning(
                "source rate differs from mix rate; samples are not resampled",
                extra={"source_rate": source.sample_rate, "mix_rate": MIX_SAMPLE_RATE},
            )

    length = int(round(MIX_SAMPLE_RATE * speech.duration_seconds))
    out = np.zeros(length, dtype=np.float32)

    voiced = min(length, len(speech.samples))
    out[:voiced] = speech.samples[:voiced]

    loop_index = np.arange(length) % len(music.samples)
    out += music.samples[loop_index] * np.float32(music_gain)
    return out


def mix(
    speech: AudioInput,
    music: AudioInput,
    music_gain: float,
    *,
    decoder: Optional[AudioDecoder] = None,
) -> EncodedAudio:
    """Mix speech with looping music and return a 24 kHz mono WAV.

    Raises :class:`MixError` when either input cannot be decoded or the mix
    cannot be rendered. Falling back to the unmixed speech is up to the caller.
    """

    decoder = decoder or PydubAudioDecoder()
    speech_audio = _decode(decoder, speech, "speech")
    music_audio = _decode(decoder, music, "music")

    try:
        rendered = render_mix(speech_audio, music_audio, music_gain)
    except MixError:
        raise
    except (ValueError, MemoryError) as exc:
        raise MixError(f"mix rendering failed: {exc}") from exc

    pcm = quantize(rendered)
    log.debug(
        "mixed speech with music",
        extra={"samples": pcm.size, "music_gain": music_gain, "speech_seconds": speech_audio.duration_seconds},
    )
    return EncodedAudio(wrap_wav(pcm.tobytes(), MIX_SAMPLE_RATE, 1), MIME_WAV)


__all__ = ["AudioDecoder", "PydubAudioDecoder", "mix", "render_mix"]
