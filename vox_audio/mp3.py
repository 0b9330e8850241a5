"""MP3 rendition of PCM with a WAV fallback when no encoder is installed."""
from __future__ import annotations

import io
import logging
from typing import List, Optional, Protocol, Union

import numpy as np
from pydub import AudioSegment
from pydub.exceptions import CouldntEncodeError
from pydub.utils import which

from .codec import wrap_wav
from .errors import EncodeCapabilityUnavailable
from .types import (
    MIME_MP3,
    MIME_WAV,
    MP3_BITRATE_KBPS,
    MP3_BLOCK_SIZE,
    SPEECH_SAMPLE_RATE,
    EncodedAudio,
    PcmBuffer,
)

log = logging.getLogger(__name__)


class Mp3FrameEncoder(Protocol):
    """Incremental MP3 encoder fed with int16 sample blocks."""

    def encode_block(self, samples: np.ndarray) -> bytes:
        ...

    def flush(self) -> bytes:
        ...


class Mp3EncoderFactory(Protocol):
    """Creates an encoder, or returns ``None`` when MP3 is not supported here."""

    def create(self, sample_rate: int, channels: int, bitrate_kbps: int) -> Optional[Mp3FrameEncoder]:
        ...


class PydubMp3Encoder:
    """:class:`Mp3FrameEncoder` backed by :mod:`pydub` and ffmpeg.

    ffmpeg has no per-frame entry point, so blocks are collected and the
    complete stream is produced by :meth:`flush`.
    """

    def __init__(self, sample_rate: int, channels: int, bitrate_kbps: int) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.bitrate = f"{bitrate_kbps}k"
        self._blocks: List[bytes] = []

    def encode_block(self, samples: np.ndarray) -> bytes:
        self._blocks.append(np.asarray(samples, dtype="<i2").tobytes())
        return b""

    def flush(self) -> bytes:
        segment = AudioSegment(
            data=b"".join(self._blocks),
            sample_width=2,
            frame_rate=self.sample_rate,
            channels=self.channels,
        )
        self._blocks = []
        target = io.BytesIO()
        try:
            segment.export(target, format="mp3", bitrate=self.bitrate)
        except (CouldntEncodeError, OSError) as exc:
            raise EncodeCapabilityUnavailable(f"ffmpeg could not encode MP3: {exc}") from exc
        return target.getvalue()


class PydubMp3EncoderFactory:
    """Default factory; MP3 is available only when ffmpeg can be found."""

    def create(self, sample_rate: int, channels: int, bitrate_kbps: int) -> Optional[Mp3FrameEncoder]:
        if not which(AudioSegment.converter):
            return None
        return PydubMp3Encoder(sample_rate, channels, bitrate_kbps)


def _as_samples(pcm: Union[bytes, PcmBuffer], sample_rate: int, channels: int) -> PcmBuffer:
    if isinstance(pcm, PcmBuffer):
        return pcm
    return PcmBuffer.from_bytes(bytes(pcm), sample_rate, channels)


def _run_encoder(encoder: Mp3FrameEncoder, samples: np.ndarray) -> bytes:
    chunks: List[bytes] = []
    for start in range(0, samples.size, MP3_BLOCK_SIZE):
        chunk = encoder.encode_block(samples[start : start + MP3_BLOCK_SIZE])
        if chunk:
            chunks.append(chunk)
    tail = encoder.flush()
    if tail:
        chunks.append(tail)
    return b"".join(chunks)


def encode_mp3(
    pcm: Union[bytes, PcmBuffer],
    sample_rate: int = SPEECH_SAMPLE_RATE,
    channels: int = 1,
    *,
    encoder_factory: Optional[Mp3EncoderFactory] = None,
    bitrate_kbps: int = MP3_BITRATE_KBPS,
) -> EncodedAudio:
    """Encode PCM16 as MP3, or return it as WAV when MP3 is unavailable.

    Samples go to the encoder in blocks of :data:`MP3_BLOCK_SIZE` followed by
    a final flush, and every non-empty chunk is concatenated in order. A
    missing encoder is never an error for the caller: the result is then the
    exact :func:`wrap_wav` container tagged ``audio/wav``.
    """

    buffer = _as_samples(pcm, sample_rate, channels)
    factory = encoder_factory or PydubMp3EncoderFactory()

    try:
        encoder = factory.create(buffer.sample_rate, buffer.channel_count, bitrate_kbps)
        if encoder is None:
            raise EncodeCapabilityUnavailable("no MP3 encoder available")
        data = _run_encoder(encoder, buffer.samples)
    except EncodeCapabilityUnavailable as exc:
        log.warning("MP3 encoding unavailable; returning WAV instead", extra={"reason": str(exc)})
        wav = wrap_wav(buffer.to_bytes(), buffer.sample_rate, buffer.channel_count)
        return EncodedAudio(wav, MIME_WAV)

    log.debug("encoded MP3", extra={"pcm_bytes": buffer.samples.nbytes, "mp3_bytes": len(data)})
    return EncodedAudio(data, MIME_MP3)


__all__ = [
    "Mp3EncoderFactory",
    "Mp3FrameEncoder",
    "PydubMp3Encoder",
    "PydubMp3EncoderFactory",
    "encode_mp3",
]
