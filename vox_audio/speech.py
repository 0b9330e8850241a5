"""Assemble playable speech clips from speech-service PCM."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .codec import decode_transport, wrap_wav
from .errors import DecodeError, MixError
from .mixer import AudioDecoder, AudioInput, mix
from .mp3 import Mp3EncoderFactory, encode_mp3
from .types import DEFAULT_MUSIC_GAIN, MIME_WAV, SPEECH_SAMPLE_RATE, EncodedAudio

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeechClipConfig:
    """Configuration options for :func:`render_speech_clip`."""

    pcm_base64: str
    music: Optional[AudioInput] = None
    music_gain: float = DEFAULT_MUSIC_GAIN
    sample_rate: int = SPEECH_SAMPLE_RATE
    channels: int = 1


@dataclass(frozen=True)
class SpeechClip:
    """A playable clip plus the raw PCM it came from, when still valid."""

    audio: EncodedAudio
    pcm: Optional[bytes]
    sample_rate: int = SPEECH_SAMPLE_RATE
    channels: int = 1
    mixed: bool = False

    def download(self, *, encoder_factory: Optional[Mp3EncoderFactory] = None) -> EncodedAudio:
        """MP3 rendition of the raw speech, or the playable audio once mixed."""

        if self.pcm is None:
            return self.audio
        return encode_mp3(self.pcm, self.sample_rate, self.channels, encoder_factory=encoder_factory)


def render_speech_clip(
    config: SpeechClipConfig,
    *,
    decoder: Optional[AudioDecoder] = None,
) -> SpeechClip:
    """Decode speech PCM, wrap it as WAV and lay music under it if configured.

    A failed mix is logged and the speech-only clip is returned instead.
    """

    if not (config.pcm_base64 or "").strip():
        raise DecodeError("speech payload is empty")

    pcm = decode_transport(config.pcm_base64)
    speech = EncodedAudio(wrap_wav(pcm, config.sample_rate, config.channels), MIME_WAV)
    clip = SpeechClip(audio=speech, pcm=pcm, sample_rate=config.sample_rate, channels=config.channels)

    if config.music is None:
        return clip

    try:
        mixed = mix(speech, config.music, config.music_gain, decoder=decoder)
    except MixError:
        log.warning("mixing failed, falling back to speech only", exc_info=True)
        return clip

    return SpeechClip(audio=mixed, pcm=None, sample_rate=config.sample_rate, channels=config.channels, mixed=True)


__all__ = ["SpeechClip", "SpeechClipConfig", "render_speech_clip"]
