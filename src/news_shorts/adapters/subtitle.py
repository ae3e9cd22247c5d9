"""SRT subtitle writer."""

import asyncio
from pathlib import Path
from typing import Sequence

from news_shorts.application.workspace import Workspace
from news_shorts.domain.errors import SubtitleError, SubtitleFailure
from news_shorts.domain.models import SubtitleLine
from news_shorts.domain.subtitles import DEFAULT_GAP, build_entries, render_srt
from news_shorts.logging_utils import get_logger
from news_shorts.ports.interfaces import ISubtitleWriter

log = get_logger(__name__)


class SrtSubtitleWriter(ISubtitleWriter):
    def __init__(self, gap: float = DEFAULT_GAP):
        self.gap = gap

    async def write(self, lines: Sequence[SubtitleLine], workspace: Workspace) -> Path:
        path = workspace.new_file("srt")
        document = render_srt(build_entries(lines, self.gap))
        try:
            await asyncio.to_thread(path.write_text, document, encoding="utf-8")
        except OSError as e:
            raise SubtitleError(SubtitleFailure.IO, f"cannot write {path}: {e}") from e
        log.debug("subtitles written", path=str(path), captions=len(lines))
        return path
