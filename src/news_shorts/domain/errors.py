"""Error taxonomy. Every stage failure surfaces as a PipelineError subclass."""

from enum import Enum
from typing import Optional


class PipelineError(Exception):
    """Base error for a production run.

    ``stage`` names the pipeline stage that failed; the orchestrator fills it
    in when the error crosses a stage boundary.
    """

    default_stage = "pipeline"

    def __init__(self, message: str = "", *, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage

    def __str__(self) -> str:
        return f"[{self.stage}] {self.message}" if self.message else f"[{self.stage}]"


class SourceNotFoundError(PipelineError):
    """Raised when the requested content source is not registered."""

    default_stage = "source"


class CrawlError(PipelineError):
    """Raised by a crawler when its listing cannot be fetched or parsed."""

    default_stage = "crawl"


class ExtractionError(PipelineError):
    """Raised when material extraction fails."""

    default_stage = "extract"


class SpeechFailure(str, Enum):
    NO_PROVIDER = "no_provider"
    NETWORK = "network"
    EMPTY_INPUT = "empty_input"
    IO = "io"


class SpeechError(PipelineError):
    """Raised by speech synthesis or dubbing composition."""

    default_stage = "speech"

    def __init__(self, kind: SpeechFailure, message: str = "", *, stage: Optional[str] = None):
        super().__init__(message or kind.value, stage=stage)
        self.kind = kind


class SubtitleFailure(str, Enum):
    IO = "io"


class SubtitleError(PipelineError):
    """Raised when the subtitle document cannot be written."""

    default_stage = "subtitle"

    def __init__(self, kind: SubtitleFailure = SubtitleFailure.IO, message: str = "", *,
                 stage: Optional[str] = None):
        super().__init__(message or kind.value, stage=stage)
        self.kind = kind


class VisualFailure(str, Enum):
    NO_PROVIDER = "no_provider"
    NETWORK = "network"
    IMAGE = "image"
    IO = "io"
    DURATION = "duration_unavailable"


class VisualError(PipelineError):
    """Raised by visual composition."""

    default_stage = "visual"

    def __init__(self, kind: VisualFailure, message: str = "", *, stage: Optional[str] = None):
        super().__init__(message or kind.value, stage=stage)
        self.kind = kind


class EffectToolError(PipelineError):
    """Raised when the voice effect tool cannot process a segment."""

    default_stage = "voice_effect"


class MuxError(PipelineError):
    """Raised when the final mux fails or its preconditions are not met."""

    default_stage = "mux"


class AudioFormatError(PipelineError):
    """Raised for malformed or heterogeneous audio input."""

    default_stage = "audio"
