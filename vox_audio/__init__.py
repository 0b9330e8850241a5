"""Audio codec and mixing core for generated speech."""
import logging

from .codec import decode_transport, encode_wav, quantize, wrap_wav
from .errors import (
    AudioCoreError,
    DecodeError,
    EncodeCapabilityUnavailable,
    MixError,
    SynthesisError,
)
from .mixer import AudioDecoder, PydubAudioDecoder, mix
from .mp3 import Mp3EncoderFactory, Mp3FrameEncoder, PydubMp3EncoderFactory, encode_mp3
from .speech import SpeechClip, SpeechClipConfig, render_speech_clip
from .synth import library_track, synthesize
from .types import DecodedAudio, EncodedAudio, PcmBuffer, SynthPreset

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"

__all__ = [
    "AudioCoreError",
    "AudioDecoder",
    "DecodeError",
    "DecodedAudio",
    "EncodeCapabilityUnavailable",
    "EncodedAudio",
    "MixError",
    "Mp3EncoderFactory",
    "Mp3FrameEncoder",
    "PcmBuffer",
    "PydubAudioDecoder",
    "PydubMp3EncoderFactory",
    "SpeechClip",
    "SpeechClipConfig",
    "SynthPreset",
    "SynthesisError",
    "decode_transport",
    "encode_mp3",
    "encode_wav",
    "library_track",
    "mix",
    "quantize",
    "render_speech_clip",
    "synthesize",
    "wrap_wav",
    "__version__",
]
