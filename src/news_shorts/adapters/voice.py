"""Cartoon voice: replay the samples faster, then resample."""

import asyncio
from pathlib import Path
from typing import Optional

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from news_shorts import config
from news_shorts.domain.errors import EffectToolError
from news_shorts.logging_utils import get_logger
from news_shorts.ports.interfaces import IVoiceEffectTool

log = get_logger(__name__)


def pitch_shift(audio: AudioSegment, pitch_rate: int, output_rate: int) -> AudioSegment:
    """Reinterpret ``audio`` at ``pitch_rate`` Hz and resample it to ``output_rate``.

    A pitch rate above the source rate raises the pitch and shortens the clip.
    """
    shifted = audio._spawn(audio.raw_data, overrides={"frame_rate": pitch_rate})
    return shifted.set_frame_rate(output_rate)


class PitchShiftEffect(IVoiceEffectTool):
    def __init__(self, pitch_rate: Optional[int] = None, output_rate: Optional[int] = None):
        self.pitch_rate = pitch_rate or config.VOICE_PITCH_RATE
        self.output_rate = output_rate or config.VOICE_OUTPUT_RATE
        if self.pitch_rate <= 0 or self.output_rate <= 0:
            raise ValueError("sample rates must be positive")

    def _process(self, source: Path, target: Path) -> None:
        audio = AudioSegment.from_wav(str(source))
        pitch_shift(audio, self.pitch_rate, self.output_rate).export(
            str(target), format="wav"
        ).close()

    async def apply(self, source: Path, target: Path) -> None:
        try:
            await asyncio.to_thread(self._process, source, target)
        except (CouldntDecodeError, OSError, ValueError) as e:
            raise EffectToolError(f"cannot process {source}: {e}") from e
        log.debug("voice effect applied", source=str(source), target=str(target),
                  pitch_rate=self.pitch_rate)
