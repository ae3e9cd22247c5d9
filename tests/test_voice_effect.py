"""Unit tests for the pitch-shift voice effect."""

import asyncio

import pytest
from pydub import AudioSegment

from news_shorts.adapters.voice import PitchShiftEffect
from news_shorts.application.audio import measure_wav
from news_shorts.domain.errors import EffectToolError


def test_raises_pitch_and_resamples(make_wav, temp_dir) -> None:
    source = make_wav("voice.wav", 1.0, frame_rate=16000)
    target = temp_dir / "voice-effect.wav"

    asyncio.run(PitchShiftEffect(pitch_rate=30000, output_rate=22050).apply(source, target))

    audio = AudioSegment.from_wav(str(target))
    assert audio.frame_rate == 22050
    # 16000 frames replayed at 30 kHz
    assert measure_wav(target) == pytest.approx(16000 / 30000, abs=0.01)
    assert source.exists()


def test_missing_source(temp_dir) -> None:
    with pytest.raises(EffectToolError):
        asyncio.run(PitchShiftEffect().apply(temp_dir / "missing.wav", temp_dir / "out.wav"))


def test_rejects_invalid_rates() -> None:
    with pytest.raises(ValueError):
        PitchShiftEffect(pitch_rate=-1)
