"""Domain models, error taxonomy and pure timing algorithms."""

from news_shorts.domain.models import (
    Caption,
    ContentReference,
    DubbingArtifact,
    ExtractedMaterial,
    ProductionResult,
    SpeechSegment,
    SubtitleLine,
)

__all__ = [
    "Caption",
    "ContentReference",
    "DubbingArtifact",
    "ExtractedMaterial",
    "ProductionResult",
    "SpeechSegment",
    "SubtitleLine",
]
