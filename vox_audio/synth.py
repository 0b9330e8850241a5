"""Procedural backing tracks rendered without bundled assets.

Every preset renders :data:`SYNTH_DURATION_SECONDS` of audio at
:data:`SYNTH_SAMPLE_RATE` into a two-channel float buffer. Only channel 0 is
kept for the WAV output, at the render rate.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Tuple, Union

import numpy as np
from scipy.signal import lfilter

from .codec import quantize, wrap_wav
from .errors import SynthesisError
from .types import MIME_WAV, SYNTH_DURATION_SECONDS, SYNTH_SAMPLE_RATE, EncodedAudio, SynthPreset

log = logging.getLogger(__name__)

TWOPI = 2.0 * np.pi
RENDER_CHANNELS = 2

AMBIENT_ROOT_HZ = 110.0
AMBIENT_FIFTH_HZ = 164.81
AMBIENT_GAIN = 0.1

LOFI_TONE_HZ = 261.6
LOFI_LFO_HZ = 2.0
LOFI_LFO_DEPTH_HZ = 5.0
LOFI_TONE_GAIN = 0.15
LOFI_NOISE_GAIN = 0.05
LOFI_NOISE_LEAK = 1.02
LOFI_NOISE_INPUT = 0.02

UPBEAT_NOTES_HZ = (440.0, 554.0, 659.0, 880.0)
UPBEAT_STEP_SECONDS = 0.25
UPBEAT_GAIN = 0.05


def _timeline(sample_rate: int, duration: float) -> np.ndarray:
    return np.arange(int(sample_rate * duration)) / sample_rate


def _phase(frequency: np.ndarray, sample_rate: int) -> np.ndarray:
    """Integrate an instantaneous frequency curve into phase, starting at 0."""
    steps = TWOPI * frequency / sample_rate
    return np.concatenate(([0.0], np.cumsum(steps[:-1])))


def _triangle(phase: np.ndarray) -> np.ndarray:
    return (2.0 / np.pi) * np.arcsin(np.sin(phase))


def _square(phase: np.ndarray) -> np.ndarray:
    return np.where(np.sin(phase) >= 0.0, 1.0, -1.0)


def _vinyl_hiss(white: np.ndarray) -> np.ndarray:
    # out[i] = (out[i-1] + 0.02 * white[i]) / 1.02, starting from rest each call
    b = [LOFI_NOISE_INPUT / LOFI_NOISE_LEAK]
    a = [1.0, -1.0 / LOFI_NOISE_LEAK]
    return lfilter(b, a, white)


def _render_ambient(t: np.ndarray, sample_rate: int, rng: np.random.Generator) -> np.ndarray:
    drone = np.sin(TWOPI * AMBIENT_ROOT_HZ * t) + _triangle(TWOPI * AMBIENT_FIFTH_HZ * t)
    return np.tile(drone * AMBIENT_GAIN, (RENDER_CHANNELS, 1))


def _render_lofi(t: np.ndarray, sample_rate: int, rng: np.random.Generator) -> np.ndarray:
    wobble = LOFI_TONE_HZ + LOFI_LFO_DEPTH_HZ * np.sin(TWOPI * LOFI_LFO_HZ * t)
    tone = np.sin(_phase(wobble, sample_rate)) * LOFI_TONE_GAIN
    out = np.tile(tone, (RENDER_CHANNELS, 1))

    white = rng.random(t.size) * 2.0 - 1.0
    out[0] += _vinyl_hiss(white) * LOFI_NOISE_GAIN
    return out


def _render_upbeat(t: np.ndarray, sample_rate: int, rng: np.random.Generator) -> np.ndarray:
    step = (t // UPBEAT_STEP_SECONDS).astype(np.int64) % len(UPBEAT_NOTES_HZ)
    frequency = np.asarray(UPBEAT_NOTES_HZ)[step]
    arp = _square(_phase(frequency, sample_rate)) * UPBEAT_GAIN
    return np.tile(arp, (RENDER_CHANNELS, 1))


_RENDERERS: Dict[SynthPreset, Callable[[np.ndarray, int, np.random.Generator], np.ndarray]] = {
    SynthPreset.AMBIENT: _render_ambient,
    SynthPreset.LOFI: _render_lofi,
    SynthPreset.UPBEAT: _render_upbeat,
}


def _resolve(preset: Union[SynthPreset, str]) -> SynthPreset:
    try:
        return SynthPreset(preset)
    except ValueError as exc:
        raise SynthesisError(f"unknown synth preset: {preset!r}") from exc


def render_preset(
    preset: Union[SynthPreset, str],
    *,
    rng: Optional[np.random.Generator] = None,
    sample_rate: int = SYNTH_SAMPLE_RATE,
    duration: float = SYNTH_DURATION_SECONDS,
) -> np.ndarray:
    """Render a preset to a ``(channels, samples)`` float32 array."""

    renderer = _RENDERERS[_resolve(preset)]
    t = _timeline(sample_rate, duration)
    try:
        rendered = renderer(t, sample_rate, rng or np.random.default_rng())
    except (ValueError, FloatingPointError, MemoryError) as exc:
        raise SynthesisError(f"rendering {preset} failed: {exc}") from exc
    return rendered.astype(np.float32)


def synthesize(
    preset: Union[SynthPreset, str],
    *,
    rng: Optional[np.random.Generator] = None,
) -> EncodedAudio:
    """Render a 10 second backing track and return it as a mono 44.1 kHz WAV."""

    rendered = render_preset(preset, rng=rng)
    pcm = quantize(rendered[0])
    log.debug("synthesized backing track", extra={"preset": str(preset), "samples": pcm.size})
    return EncodedAudio(wrap_wav(pcm.tobytes(), SYNTH_SAMPLE_RATE, 1), MIME_WAV)


def library_track(
    preset: Union[SynthPreset, str],
    *,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[str, EncodedAudio]:
    """Return ``(filename, audio)`` for a music-library selection."""

    resolved = _resolve(preset)
    audio = synthesize(resolved, rng=rng)
    return audio.filename(f"{resolved.value}-music"), audio


__all__ = ["library_track", "render_preset", "synthesize"]
