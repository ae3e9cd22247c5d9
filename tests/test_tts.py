"""Unit tests for the speech synthesizers (HTTP and edge-tts mocked)."""

import asyncio
from pathlib import Path
from unittest.mock import Mock, patch

import edge_tts
import pytest
import requests

from fakes import write_wav
from news_shorts.adapters.tts import DashScopeSynthesizer, EdgeSynthesizer
from news_shorts.application.workspace import Workspace
from news_shorts.domain.errors import SpeechError, SpeechFailure


def _api_response(status: int = 200, url: str = "https://oss.test/voice.wav") -> Mock:
    response = Mock(status_code=status, text="quota exceeded")
    response.json.return_value = {"output": {"audio": {"url": url}}}
    return response


class TestDashScopeSynthesizer:

    def test_one_segment_per_sentence(self, make_wav, temp_dir) -> None:
        wav_bytes = make_wav("voice.wav", 1.25).read_bytes()
        download = Mock(content=wav_bytes)
        download.raise_for_status = Mock()
        synthesizer = DashScopeSynthesizer(api_key="key", url="https://tts.test", voice="Serena")

        with Workspace(temp_dir / "work") as workspace, \
                patch("news_shorts.adapters.tts.requests.post", return_value=_api_response()) as post, \
                patch("news_shorts.adapters.tts.requests.get", return_value=download):
            segments = asyncio.run(synthesizer.synthesize(["第一句", "第二句"], workspace))

            assert [s.text for s in segments] == ["第一句", "第二句"]
            assert [s.duration for s in segments] == pytest.approx([1.25, 1.25])
            assert all(s.path.parent == workspace.path for s in segments)
            assert [s.path.name for s in segments] == [
                f"{workspace.run_id}001.wav",
                f"{workspace.run_id}002.wav",
            ]

        body = post.call_args.kwargs["json"]
        assert body == {"model": "qwen-tts", "input": {"text": "第二句", "voice": "Serena"}}
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer key"

    def test_rejected_request(self, temp_dir) -> None:
        synthesizer = DashScopeSynthesizer(api_key="key")
        with Workspace(temp_dir) as workspace, \
                patch("news_shorts.adapters.tts.requests.post", return_value=_api_response(status=429)):
            with pytest.raises(SpeechError) as exc:
                asyncio.run(synthesizer.synthesize(["a"], workspace))
        assert exc.value.kind is SpeechFailure.NETWORK
        assert "quota exceeded" in str(exc.value)

    def test_connection_failure(self, temp_dir) -> None:
        synthesizer = DashScopeSynthesizer(api_key="key")
        with Workspace(temp_dir) as workspace, patch(
            "news_shorts.adapters.tts.requests.post",
            side_effect=requests.ConnectionError("down"),
        ):
            with pytest.raises(SpeechError) as exc:
                asyncio.run(synthesizer.synthesize(["a"], workspace))
        assert exc.value.kind is SpeechFailure.NETWORK

    def test_missing_key(self, temp_dir) -> None:
        with Workspace(temp_dir) as workspace:
            with pytest.raises(SpeechError) as exc:
                asyncio.run(DashScopeSynthesizer(api_key="").synthesize(["a"], workspace))
        assert exc.value.kind is SpeechFailure.NO_PROVIDER

    @pytest.mark.parametrize("texts", [[], ["ok", "  "]])
    def test_empty_input(self, temp_dir, texts) -> None:
        with Workspace(temp_dir) as workspace:
            with pytest.raises(SpeechError) as exc:
                asyncio.run(DashScopeSynthesizer(api_key="key").synthesize(texts, workspace))
        assert exc.value.kind is SpeechFailure.EMPTY_INPUT


def _communicate_factory(failures: int = 0, error: Exception = None):
    """edge_tts.Communicate stand-in failing ``failures`` times before saving."""
    calls = []

    class _Communicate:
        def __init__(self, text, voice):
            self.text = text
            self.voice = voice

        async def save(self, path):
            calls.append((self.text, self.voice, path))
            if len(calls) <= failures:
                raise error or ConnectionResetError("reset")
            Path(path).write_bytes(b"ID3 fake mp3")

    return _Communicate, calls


def _fake_mp3_to_wav(source: Path, target: Path) -> None:
    write_wav(target, 0.5, 16000, 1, 2)


class TestEdgeSynthesizer:

    def _run(self, synthesizer, texts, workspace, communicate):
        with patch("news_shorts.adapters.tts.edge_tts.Communicate", communicate), \
                patch.object(synthesizer, "_mp3_to_wav", side_effect=_fake_mp3_to_wav):
            return asyncio.run(synthesizer.synthesize(texts, workspace))

    def test_one_segment_per_sentence(self, temp_dir) -> None:
        communicate, calls = _communicate_factory()
        synthesizer = EdgeSynthesizer(voice="zh-CN-XiaoxiaoNeural")

        with Workspace(temp_dir / "work") as workspace:
            segments = self._run(synthesizer, ["第一句", "第二句"], workspace, communicate)

            assert [s.text for s in segments] == ["第一句", "第二句"]
            assert [s.duration for s in segments] == pytest.approx([0.5, 0.5])
            assert all(s.path.exists() and s.path.suffix == ".wav" for s in segments)
            # the intermediate MP3 files are gone
            assert not any(Path(path).exists() for _, _, path in calls)

        assert [(text, voice) for text, voice, _ in calls] == [
            ("第一句", "zh-CN-XiaoxiaoNeural"),
            ("第二句", "zh-CN-XiaoxiaoNeural"),
        ]

    def test_retries_dropped_connection(self, temp_dir) -> None:
        communicate, calls = _communicate_factory(failures=1)

        with Workspace(temp_dir) as workspace:
            segments = self._run(EdgeSynthesizer(), ["a"], workspace, communicate)

        assert len(segments) == 1
        assert len(calls) == 2

    def test_gives_up_after_retries(self, temp_dir) -> None:
        communicate, calls = _communicate_factory(failures=10)

        with Workspace(temp_dir) as workspace:
            with pytest.raises(SpeechError) as exc:
                self._run(EdgeSynthesizer(), ["a"], workspace, communicate)

        assert exc.value.kind is SpeechFailure.NETWORK
        assert len(calls) == 3

    def test_service_error_is_not_retried(self, temp_dir) -> None:
        communicate, calls = _communicate_factory(
            failures=10, error=edge_tts.exceptions.NoAudioReceived("no audio"),
        )

        with Workspace(temp_dir) as workspace:
            with pytest.raises(SpeechError) as exc:
                self._run(EdgeSynthesizer(), ["a"], workspace, communicate)

        assert exc.value.kind is SpeechFailure.NETWORK
        assert len(calls) == 1

    def test_empty_input(self, temp_dir) -> None:
        with Workspace(temp_dir) as workspace:
            with pytest.raises(SpeechError) as exc:
                asyncio.run(EdgeSynthesizer().synthesize([], workspace))
        assert exc.value.kind is SpeechFailure.EMPTY_INPUT
