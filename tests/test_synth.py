from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from vox_audio import SynthesisError, SynthPreset, library_track, synthesize
from vox_audio.synth import render_preset
from audio_helpers import header_fields

EXPECTED_BYTES = 44 + 44100 * 10 * 2


def _samples(data: bytes) -> np.ndarray:
    return np.frombuffer(data[44:], dtype="<i2")


@pytest.mark.parametrize("preset", list(SynthPreset))
def test_every_preset_renders_ten_second_mono_wav(preset: SynthPreset) -> None:
    audio = synthesize(preset)

    fields = header_fields(audio.data)
    assert audio.mime_type == "audio/wav"
    assert len(audio.data) == EXPECTED_BYTES
    assert fields[6] == 1
    assert fields[7] == 44100
    assert fields[12] == 44100 * 10 * 2


def test_ambient_is_deterministic() -> None:
    assert synthesize(SynthPreset.AMBIENT).data == synthesize("ambient").data


def test_upbeat_is_deterministic_and_starts_high() -> None:
    first = synthesize(SynthPreset.UPBEAT)

    assert first.data == synthesize(SynthPreset.UPBEAT).data
    samples = _samples(first.data)
    assert samples[0] == 1638
    assert set(np.unique(samples).tolist()) == {-1638, 1638}


def test_ambient_stays_within_drone_level() -> None:
    samples = _samples(synthesize(SynthPreset.AMBIENT).data)

    assert samples[0] == 0
    assert np.abs(samples).max() <= 32767 * 0.2
    assert np.abs(samples).max() > 32767 * 0.1


def test_lofi_noise_differs_between_calls() -> None:
    first = synthesize(SynthPreset.LOFI)
    second = synthesize(SynthPreset.LOFI)

    assert len(first.data) == len(second.data) == EXPECTED_BYTES
    assert first.data[:44] == second.data[:44]
    assert first.data != second.data
    for audio in (first, second):
        assert np.abs(_samples(audio.data).astype(np.int32)).max() <= 32767 * 0.2


def test_lofi_with_seeded_generator_is_reproducible() -> None:
    first = synthesize(SynthPreset.LOFI, rng=np.random.default_rng(7))
    second = synthesize(SynthPreset.LOFI, rng=np.random.default_rng(7))

    assert first.data == second.data


def test_lofi_filter_state_does_not_leak_between_calls() -> None:
    rng = np.random.default_rng(11)
    render_preset(SynthPreset.LOFI, rng=rng)

    fresh = render_preset(SynthPreset.LOFI, rng=np.random.default_rng(11))
    repeat = render_preset(SynthPreset.LOFI, rng=np.random.default_rng(11))

    assert np.array_equal(fresh, repeat)


def test_lofi_noise_only_on_first_channel() -> None:
    rendered = render_preset(SynthPreset.LOFI, rng=np.random.default_rng(3))
    other = render_preset(SynthPreset.LOFI, rng=np.random.default_rng(4))

    assert rendered.shape == (2, 441000)
    assert rendered.dtype == np.float32
    assert np.array_equal(rendered[1], other[1])
    assert not np.array_equal(rendered[0], other[0])


def test_library_track_names_file_after_preset() -> None:
    name, audio = library_track("upbeat")

    assert name == "upbeat-music.wav"
    assert audio.data == synthesize(SynthPreset.UPBEAT).data


def test_unknown_preset_is_rejected() -> None:
    with pytest.raises(SynthesisError):
        synthesize("techno")
