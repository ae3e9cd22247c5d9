"""
Speech synthesizers. One WAV per sentence, written into the run workspace
under the usual sequential names and measured after download.
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Sequence

import edge_tts
import requests
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from news_shorts import config
from news_shorts.application.audio import measure_wav
from news_shorts.application.retry import retry_async
from news_shorts.application.workspace import Workspace
from news_shorts.domain.errors import SpeechError, SpeechFailure
from news_shorts.domain.models import SpeechSegment
from news_shorts.logging_utils import get_logger
from news_shorts.ports.interfaces import ISpeechSynthesizer

log = get_logger(__name__)

_TRANSIENT = (requests.ConnectionError, requests.Timeout)


def _check_texts(texts: Sequence[str]) -> None:
    if not texts:
        raise SpeechError(SpeechFailure.EMPTY_INPUT, "no sentences to synthesize")
    for n, text in enumerate(texts, 1):
        if not text or not text.strip():
            raise SpeechError(SpeechFailure.EMPTY_INPUT, f"sentence {n} is blank")


def _segment_paths(workspace: Workspace, count: int) -> List[Path]:
    return [workspace.new_file("wav") for _ in range(count)]


class DashScopeSynthesizer(ISpeechSynthesizer):
    """Qwen TTS on DashScope: the API answers with a URL to a WAV file."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        url: Optional[str] = None,
        model: Optional[str] = None,
        voice: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else config.DASHSCOPE_API_KEY
        self.url = url or config.DASHSCOPE_TTS_URL
        self.model = model or config.DASHSCOPE_TTS_MODEL
        self.voice = voice or config.DASHSCOPE_TTS_VOICE
        self.timeout = timeout or config.HTTP_TIMEOUT

    def _request_audio_url(self, text: str) -> str:
        response = requests.post(
            self.url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={"model": self.model, "input": {"text": text, "voice": self.voice}},
            timeout=self.timeout,
        )
        if response.status_code != 200:
            raise SpeechError(
                SpeechFailure.NETWORK,
                f"request dashscope tts failed ({response.status_code}): {response.text[:200]}",
            )
        try:
            return response.json()["output"]["audio"]["url"]
        except (ValueError, KeyError, TypeError) as e:
            raise SpeechError(SpeechFailure.NETWORK, f"unexpected tts response: {e}") from e

    def _download(self, url: str, target: Path) -> None:
        response = requests.get(url, timeout=self.timeout)
        response.raise_for_status()
        target.write_bytes(response.content)

    async def _synthesize_one(self, text: str, target: Path) -> SpeechSegment:
        try:
            audio_url = await retry_async(
                lambda: asyncio.to_thread(self._request_audio_url, text),
                retry_on=_TRANSIENT,
                description="dashscope tts",
            )
            await retry_async(
                lambda: asyncio.to_thread(self._download, audio_url, target),
                retry_on=_TRANSIENT,
                description="tts audio download",
            )
        except requests.RequestException as e:
            raise SpeechError(SpeechFailure.NETWORK, str(e)) from e
        except OSError as e:
            raise SpeechError(SpeechFailure.IO, f"cannot write {target}: {e}") from e

        duration = await asyncio.to_thread(measure_wav, target)
        log.debug("sentence synthesized", path=str(target), duration=round(duration, 3))
        return SpeechSegment(path=target, text=text, duration=duration)

    async def synthesize(self, texts: Sequence[str], workspace: Workspace) -> List[SpeechSegment]:
        if not self.api_key:
            raise SpeechError(SpeechFailure.NO_PROVIDER, "DASHSCOPE_API_KEY is not set")
        _check_texts(texts)

        segments = []
        for text, target in zip(texts, _segment_paths(workspace, len(texts))):
            segments.append(await self._synthesize_one(text, target))
        log.info("speech synthesized", provider="dashscope", segments=len(segments))
        return segments


class EdgeSynthesizer(ISpeechSynthesizer):
    """Microsoft Edge TTS (free). Edge delivers MP3, converted to WAV with pydub."""

    def __init__(self, voice: Optional[str] = None):
        self.voice = voice or config.TTS_EDGE_VOICE

    @staticmethod
    def _mp3_to_wav(source: Path, target: Path) -> None:
        AudioSegment.from_mp3(str(source)).export(str(target), format="wav").close()

    async def _save(self, text: str, mp3: Path) -> None:
        await edge_tts.Communicate(text, self.voice).save(str(mp3))

    async def _synthesize_one(self, text: str, target: Path) -> SpeechSegment:
        mp3 = target.with_suffix(".mp3")
        try:
            await retry_async(
                lambda: self._save(text, mp3),
                retry_on=(OSError,),
                description="edge-tts",
            )
        except edge_tts.exceptions.EdgeTTSException as e:
            raise SpeechError(SpeechFailure.NETWORK, f"edge-tts failed: {e}") from e
        except OSError as e:
            raise SpeechError(SpeechFailure.NETWORK, f"edge-tts connection failed: {e}") from e

        try:
            await asyncio.to_thread(self._mp3_to_wav, mp3, target)
        except (CouldntDecodeError, OSError) as e:
            raise SpeechError(SpeechFailure.IO, f"cannot convert {mp3}: {e}") from e
        finally:
            mp3.unlink(missing_ok=True)

        duration = await asyncio.to_thread(measure_wav, target)
        return SpeechSegment(path=target, text=text, duration=duration)

    async def synthesize(self, texts: Sequence[str], workspace: Workspace) -> List[SpeechSegment]:
        _check_texts(texts)
        segments = []
        for text, target in zip(texts, _segment_paths(workspace, len(texts))):
            segments.append(await self._synthesize_one(text, target))
        log.info("speech synthesized", provider="edge", voice=self.voice, segments=len(segments))
        return segments


def default_synthesizer() -> ISpeechSynthesizer:
    if config.TTS_PROVIDER == "edge":
        return EdgeSynthesizer()
    return DashScopeSynthesizer()
