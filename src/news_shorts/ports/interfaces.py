"""
Port interfaces (Dependency Inversion).
Implement these in adapters; the Director depends only on these abstractions.
Every operation is a coroutine so network and tool stages never block the loop.
Stages that create files receive the run's Workspace and must create them there.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence

from news_shorts.domain.models import (
    ContentReference,
    ExtractedMaterial,
    SpeechSegment,
    SubtitleLine,
)

if TYPE_CHECKING:
    from news_shorts.application.workspace import Workspace


class ICrawler(ABC):
    """Lists the current top headlines of one content source."""

    @abstractmethod
    async def list_top_content(self) -> List[ContentReference]:
        """Return fresh headlines (possibly empty). Raise CrawlError on failure."""


class IExtractor(ABC):
    """Turns a headline into summary sentences plus pictures and videos."""

    @abstractmethod
    async def extract_material(self, reference: ContentReference) -> ExtractedMaterial:
        """Raise ExtractionError on failure."""


class ISpeechSynthesizer(ABC):
    """Text-to-speech, one WAV segment per sentence."""

    @abstractmethod
    async def synthesize(
        self,
        texts: Sequence[str],
        workspace: "Workspace",
    ) -> List[SpeechSegment]:
        """Return segments in input order. Raise SpeechError on failure."""


class IVoiceEffectTool(ABC):
    """Post-processes one narration file into another."""

    @abstractmethod
    async def apply(self, source: Path, target: Path) -> None:
        """Write the processed audio of ``source`` to ``target``. Raise EffectToolError."""


class ISubtitleWriter(ABC):
    """Writes a subtitle document from spoken sentence durations."""

    @abstractmethod
    async def write(self, lines: Sequence[SubtitleLine], workspace: "Workspace") -> Path:
        """Return the subtitle file path. Raise SubtitleError on failure."""


class IVisualComposer(ABC):
    """Builds a silent video of the requested length from the material."""

    @abstractmethod
    async def compose(
        self,
        material: ExtractedMaterial,
        duration: float,
        workspace: "Workspace",
    ) -> Path:
        """Return the video file path. Raise VisualError on failure."""


class IFinalMuxer(ABC):
    """Combines video, narration and optional subtitles into one file."""

    @abstractmethod
    async def mux(
        self,
        video: Path,
        audio: Path,
        subtitle: Optional[Path],
        output: Path,
    ) -> None:
        """Write the final artifact to ``output``. Raise MuxError on failure."""
