"""Unit tests for dubbing composition."""

import pytest
from pydub import AudioSegment

from news_shorts.application.audio import (
    compose_timeline,
    make_silence,
    measure_wav,
)
from news_shorts.domain.errors import AudioFormatError, SpeechError, SpeechFailure
from news_shorts.domain.models import SpeechSegment


def _segment(path, text="text"):
    return SpeechSegment(path=path, text=text, duration=measure_wav(path))


class TestComposeTimeline:

    def test_reports_speech_durations_without_silence(self, make_wav, temp_dir) -> None:
        segments = [
            _segment(make_wav("a.wav", 1.0), "a"),
            _segment(make_wav("b.wav", 1.5), "b"),
        ]
        dubbing = compose_timeline(segments, temp_dir / "dub.wav")

        assert [line.text for line in dubbing.lines] == ["a", "b"]
        assert [line.duration for line in dubbing.lines] == pytest.approx([1.0, 1.5])
        assert dubbing.duration == pytest.approx(2.5)

    def test_silence_follows_every_segment(self, make_wav, temp_dir) -> None:
        segments = [_segment(make_wav("a.wav", 1.0)), _segment(make_wav("b.wav", 1.5))]
        output = temp_dir / "dub.wav"
        compose_timeline(segments, output)

        assert measure_wav(output) == pytest.approx(3.1)

    def test_keeps_source_format(self, make_wav, temp_dir) -> None:
        segments = [_segment(make_wav("a.wav", 0.5, frame_rate=24000, channels=2))]
        output = temp_dir / "dub.wav"
        compose_timeline(segments, output)

        audio = AudioSegment.from_wav(str(output))
        assert audio.frame_rate == 24000
        assert audio.channels == 2

    def test_folded_segments_are_reported(self, make_wav, temp_dir) -> None:
        paths = [make_wav("a.wav", 0.2), make_wav("b.wav", 0.2)]
        folded = []
        compose_timeline([_segment(p) for p in paths], temp_dir / "dub.wav",
                         on_folded=folded.append)

        assert folded == paths

    def test_no_segments(self, temp_dir) -> None:
        with pytest.raises(SpeechError) as exc:
            compose_timeline([], temp_dir / "dub.wav")
        assert exc.value.kind is SpeechFailure.EMPTY_INPUT

    def test_mixed_sample_rates(self, make_wav, temp_dir) -> None:
        segments = [
            _segment(make_wav("a.wav", 0.5, frame_rate=16000)),
            _segment(make_wav("b.wav", 0.5, frame_rate=22050)),
        ]
        with pytest.raises(AudioFormatError):
            compose_timeline(segments, temp_dir / "dub.wav")

    def test_mixed_channels(self, make_wav, temp_dir) -> None:
        segments = [
            _segment(make_wav("a.wav", 0.5, channels=1)),
            _segment(make_wav("b.wav", 0.5, channels=2)),
        ]
        with pytest.raises(AudioFormatError):
            compose_timeline(segments, temp_dir / "dub.wav")

    def test_undecodable_segment(self, make_wav, temp_dir) -> None:
        broken = temp_dir / "broken.wav"
        broken.write_bytes(b"<html>not audio</html>")
        segments = [
            _segment(make_wav("a.wav", 0.5)),
            SpeechSegment(path=broken, text="broken", duration=1.0),
        ]
        with pytest.raises(AudioFormatError):
            compose_timeline(segments, temp_dir / "dub.wav")


def test_silence_matches_format(make_wav) -> None:
    like = AudioSegment.from_wav(str(make_wav("a.wav", 0.1, frame_rate=8000)))
    silence = make_silence(like, 0.3)

    assert silence.frame_rate == 8000
    assert silence.frame_count() == 2400
    assert set(silence.raw_data) == {0}


def test_eight_bit_silence_is_midpoint(make_wav) -> None:
    like = AudioSegment.from_wav(str(make_wav("a.wav", 0.1, sample_width=1)))
    assert set(make_silence(like, 0.1).raw_data) == {0x80}
