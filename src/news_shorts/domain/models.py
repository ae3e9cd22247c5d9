"""Domain models – immutable value objects passed between pipeline stages.

Durations are float seconds throughout.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class ContentReference:
    """A headline listed by a crawler; the input of one production run."""
    source: str
    title: str
    url: str
    images: Tuple[str, ...] = ()
    videos: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "title": self.title,
            "url": self.url,
            "images": list(self.images),
            "videos": list(self.videos),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentReference":
        return cls(
            source=data["source"],
            title=data["title"],
            url=data["url"],
            images=tuple(data.get("images") or ()),
            videos=tuple(data.get("videos") or ()),
        )


@dataclass(frozen=True)
class ExtractedMaterial:
    """Summary sentences and media extracted from one article."""
    title: str
    summary: Tuple[str, ...]
    images: Tuple[str, ...] = ()
    videos: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SpeechSegment:
    """One synthesized sentence: a WAV file in the run workspace."""
    path: Path
    text: str
    duration: float


@dataclass(frozen=True)
class SubtitleLine:
    """Text plus the duration it is spoken for."""
    text: str
    duration: float


@dataclass(frozen=True)
class Caption:
    """A rendered subtitle entry."""
    index: int
    start: float
    end: float
    text: str


@dataclass(frozen=True)
class DubbingArtifact:
    """Concatenated narration and the per-sentence timing that produced it.

    ``lines`` durations exclude the silence inserted between segments.
    """
    path: Path
    lines: Tuple[SubtitleLine, ...] = field(default_factory=tuple)

    @property
    def duration(self) -> float:
        return sum(line.duration for line in self.lines)


@dataclass(frozen=True)
class ProductionResult:
    """Final artifact of a run. The caller owns ``path``."""
    title: str
    path: Path
