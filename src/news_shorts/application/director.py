"""
Director – orchestrates one production run:
extract → dub → subtitles → visuals → mux.
Depends only on port interfaces; every stage except extraction is optional
and configured through a closed StageSet.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import (
    Any, AsyncIterator, Callable, Dict, Iterable, List, Optional, Union,
)

from news_shorts import config
from news_shorts.application.audio import compose_timeline, measure_wav
from news_shorts.application.workspace import Workspace, new_id
from news_shorts.domain.errors import (
    CrawlError,
    EffectToolError,
    ExtractionError,
    MuxError,
    PipelineError,
    SourceNotFoundError,
    SpeechError,
    SpeechFailure,
    SubtitleError,
    SubtitleFailure,
    VisualError,
    VisualFailure,
)
from news_shorts.domain.models import (
    ContentReference,
    DubbingArtifact,
    ExtractedMaterial,
    ProductionResult,
)
from news_shorts.logging_utils import get_logger
from news_shorts.ports.interfaces import (
    ICrawler,
    IExtractor,
    IFinalMuxer,
    ISpeechSynthesizer,
    ISubtitleWriter,
    IVisualComposer,
    IVoiceEffectTool,
)

log = get_logger(__name__)


class RunState(str, Enum):
    START = "start"
    MATERIAL_READY = "material_ready"
    DUBBING_READY = "dubbing_ready"
    NO_SPEECH = "no_speech"
    SUBTITLE_READY = "subtitle_ready"
    NO_SUBTITLE = "no_subtitle"
    VISUAL_READY = "visual_ready"
    COMPOSED = "composed"
    FAILED = "failed"


ProgressCallback = Callable[[RunState, Dict[str, Any]], None]


@dataclass(frozen=True)
class ContentSource:
    """Where headlines come from and how their material is extracted."""
    name: str
    crawler: ICrawler
    extractor: IExtractor


@dataclass(frozen=True)
class StageSet:
    """The optional stages of a run, one slot per role."""
    speech: Optional[ISpeechSynthesizer] = None
    voice_effect: Optional[IVoiceEffectTool] = None
    subtitles: Optional[ISubtitleWriter] = None
    visual: Optional[IVisualComposer] = None
    muxer: Optional[IFinalMuxer] = None

    def problems(self, *, mux: bool = True) -> List[PipelineError]:
        """Configuration errors that would make a run fail.

        With ``mux=False`` only the stages a preview needs are checked.
        """
        found: List[PipelineError] = []
        if self.visual is None:
            found.append(VisualError(VisualFailure.NO_PROVIDER, "no visual composer configured"))
        if mux:
            if self.speech is None:
                found.append(MuxError("muxing requires dubbing but no speech synthesizer is configured"))
            if self.muxer is None:
                found.append(MuxError("no final muxer configured"))
        return found

    def warnings(self) -> List[str]:
        notes = []
        if self.subtitles is not None and self.speech is None:
            notes.append("subtitle writer configured without speech; subtitles will be skipped")
        if self.voice_effect is not None and self.speech is None:
            notes.append("voice effect configured without speech; it will never run")
        return notes


class _Run:
    """Bookkeeping for one run: id, current state and a bound logger."""

    def __init__(self, reference: ContentReference, callback: Optional[ProgressCallback]):
        self.id = new_id()
        self.state = RunState.START
        self.history: List[RunState] = [RunState.START]
        self.log = log.bind(run_id=self.id, source=reference.source)
        self._callback = callback
        self._emit({"title": reference.title})

    def advance(self, state: RunState, **detail: Any) -> None:
        self.state = state
        self.history.append(state)
        self._emit(detail)

    def _emit(self, detail: Dict[str, Any]) -> None:
        self.log.info("run state", state=self.state.value, **detail)
        if self._callback is not None:
            self._callback(self.state, detail)


class Director:
    """
    Sequences single production runs over injected stages.
    Holds no per-run state; concurrent runs are independent.
    """

    def __init__(
        self,
        sources: Iterable[ContentSource] = (),
        stages: Optional[StageSet] = None,
        *,
        output_dir: Union[str, Path, None] = None,
        temp_dir: Union[str, Path, None] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self._sources: Dict[str, ContentSource] = {s.name: s for s in sources}
        self._stages = stages or StageSet()
        self._output_dir = Path(output_dir if output_dir is not None else config.OUTPUT_DIR)
        self._temp_dir = Path(temp_dir if temp_dir is not None else config.TEMP_DIR)
        self._progress_callback = progress_callback

    # -- construction -------------------------------------------------------

    def _with(self, **changes: Any) -> "Director":
        return Director(
            self._sources.values(),
            replace(self._stages, **changes),
            output_dir=self._output_dir,
            temp_dir=self._temp_dir,
            progress_callback=self._progress_callback,
        )

    def with_speech(self, synthesizer: ISpeechSynthesizer) -> "Director":
        return self._with(speech=synthesizer)

    def with_voice_effect(self, tool: IVoiceEffectTool) -> "Director":
        return self._with(voice_effect=tool)

    def with_subtitles(self, writer: ISubtitleWriter) -> "Director":
        return self._with(subtitles=writer)

    def with_visual(self, composer: IVisualComposer) -> "Director":
        return self._with(visual=composer)

    def with_muxer(self, muxer: IFinalMuxer) -> "Director":
        return self._with(muxer=muxer)

    @property
    def stages(self) -> StageSet:
        return self._stages

    @property
    def source_names(self) -> List[str]:
        return list(self._sources)

    def validate(self, *, mux: bool = True) -> None:
        """Raise the first configuration problem before any stage runs."""
        for note in self._stages.warnings():
            log.warning("stage configuration", note=note)
        problems = self._stages.problems(mux=mux)
        if problems:
            raise problems[0]

    # -- public entry points ------------------------------------------------

    async def list_top_content(self, source_name: str) -> List[ContentReference]:
        """Headlines of ``source_name``; empty for unknown sources or crawl failures."""
        source = self._sources.get(source_name)
        if source is None:
            log.warning("unknown content source", source=source_name, known=self.source_names)
            return []
        try:
            return list(await source.crawler.list_top_content())
        except CrawlError as e:
            log.warning("crawl failed", source=source_name, error=str(e))
            return []
        except Exception as e:
            log.warning("crawl failed", source=source_name, error=f"{type(e).__name__}: {e}")
            return []

    async def produce(self, reference: ContentReference) -> ProductionResult:
        """Run the whole chain and return the muxed video."""
        source = self._source_for(reference)
        self.validate()
        run = _Run(reference, self._progress_callback)

        try:
            async with Workspace(self._temp_dir, run_id=run.id) as workspace:
                material = await self._extract(run, source, reference)
                dubbing = await self._dub(run, workspace, material)
                subtitle = await self._write_subtitles(run, workspace, dubbing)
                video = await self._compose_visual(run, workspace, material, dubbing)
                final = await self._mux(run, workspace, video, dubbing, subtitle)
        except PipelineError as e:
            run.advance(RunState.FAILED, stage=e.stage, error=str(e))
            raise

        run.advance(RunState.COMPOSED, output=str(final))
        return ProductionResult(title=material.title, path=final)

    async def preview(self, reference: ContentReference) -> ProductionResult:
        """Render only the silent slideshow, timed to the dubbing when speech is configured."""
        source = self._source_for(reference)
        self.validate(mux=False)
        run = _Run(reference, self._progress_callback)

        try:
            async with Workspace(self._temp_dir, run_id=run.id) as workspace:
                material = await self._extract(run, source, reference)
                dubbing = await self._dub(run, workspace, material)
                video = await self._compose_visual(run, workspace, material, dubbing)
                final = workspace.release(video, self._output_dir / f"{run.id}-preview{video.suffix}")
        except PipelineError as e:
            run.advance(RunState.FAILED, stage=e.stage, error=str(e))
            raise
        except OSError as e:
            error = VisualError(VisualFailure.IO, f"cannot move preview: {e}")
            run.advance(RunState.FAILED, stage=error.stage, error=str(error))
            raise error from e

        run.advance(RunState.COMPOSED, output=str(final))
        return ProductionResult(title=material.title, path=final)

    # -- stages ---------------------------------------------------------------

    def _source_for(self, reference: ContentReference) -> ContentSource:
        source = self._sources.get(reference.source)
        if source is None:
            raise SourceNotFoundError(f"Failed to find source: {reference.source}")
        return source

    @asynccontextmanager
    async def _stage(
        self,
        name: str,
        wrap: Callable[[str], PipelineError],
    ) -> AsyncIterator[None]:
        """Tag taxonomy errors with the stage name and wrap anything else."""
        try:
            yield
        except PipelineError as e:
            e.stage = name
            raise
        except Exception as e:
            error = wrap(f"{type(e).__name__}: {e}")
            error.stage = name
            raise error from e

    async def _extract(
        self,
        run: _Run,
        source: ContentSource,
        reference: ContentReference,
    ) -> ExtractedMaterial:
        async with self._stage("extract", ExtractionError):
            material = await source.extractor.extract_material(reference)
        run.advance(
            RunState.MATERIAL_READY,
            sentences=len(material.summary),
            images=len(material.images),
        )
        return material

    async def _dub(
        self,
        run: _Run,
        workspace: Workspace,
        material: ExtractedMaterial,
    ) -> Optional[DubbingArtifact]:
        synthesizer = self._stages.speech
        if synthesizer is None:
            run.advance(RunState.NO_SPEECH)
            return None

        async with self._stage("speech", lambda m: SpeechError(SpeechFailure.IO, m)):
            segments = await synthesizer.synthesize(list(material.summary), workspace)
            for segment in segments:
                workspace.track(segment.path)

        tool = self._stages.voice_effect
        if tool is not None:
            processed = []
            for segment in segments:
                target = workspace.new_file("wav")
                async with self._stage("voice_effect", EffectToolError):
                    await tool.apply(segment.path, target)
                    workspace.discard(segment.path)
                    duration = await asyncio.to_thread(measure_wav, target)
                processed.append(replace(segment, path=target, duration=duration))
            segments = processed

        output = workspace.new_file("wav")
        async with self._stage("speech", lambda m: SpeechError(SpeechFailure.IO, m)):
            dubbing = await asyncio.to_thread(
                compose_timeline, segments, output, on_folded=workspace.discard,
            )
        run.advance(
            RunState.DUBBING_READY,
            segments=len(dubbing.lines),
            duration=round(dubbing.duration, 3),
        )
        return dubbing

    async def _write_subtitles(
        self,
        run: _Run,
        workspace: Workspace,
        dubbing: Optional[DubbingArtifact],
    ) -> Optional[Path]:
        writer = self._stages.subtitles
        if writer is None or dubbing is None:
            run.advance(
                RunState.NO_SUBTITLE,
                reason="no subtitle writer" if writer is None else "no dubbing",
            )
            return None

        async with self._stage("subtitle", lambda m: SubtitleError(SubtitleFailure.IO, m)):
            path = workspace.track(await writer.write(dubbing.lines, workspace))
        run.advance(RunState.SUBTITLE_READY, subtitle=str(path))
        return path

    @staticmethod
    def target_duration(material: ExtractedMaterial, dubbing: Optional[DubbingArtifact]) -> float:
        """Dubbing length, or two seconds per picture when there is no narration."""
        if dubbing is not None:
            if dubbing.duration > 0:
                return dubbing.duration
            raise VisualError(VisualFailure.DURATION, "dubbing has zero length")
        if material.images:
            return config.SECONDS_PER_IMAGE * len(material.images)
        raise VisualError(VisualFailure.DURATION, "no dubbing and no pictures to time the video")

    async def _compose_visual(
        self,
        run: _Run,
        workspace: Workspace,
        material: ExtractedMaterial,
        dubbing: Optional[DubbingArtifact],
    ) -> Path:
        composer = self._stages.visual
        async with self._stage("visual", lambda m: VisualError(VisualFailure.IO, m)):
            if composer is None:
                raise VisualError(VisualFailure.NO_PROVIDER, "no visual composer configured")
            duration = self.target_duration(material, dubbing)
            video = workspace.track(await composer.compose(material, duration, workspace))
        run.advance(RunState.VISUAL_READY, video=str(video), duration=round(duration, 3))
        return video

    async def _mux(
        self,
        run: _Run,
        workspace: Workspace,
        video: Path,
        dubbing: Optional[DubbingArtifact],
        subtitle: Optional[Path],
    ) -> Path:
        muxer = self._stages.muxer
        if muxer is None:
            raise MuxError("no final muxer configured")
        if dubbing is None:
            raise MuxError("muxing requires a dubbing artifact")

        self._output_dir.mkdir(parents=True, exist_ok=True)
        output = self._output_dir / f"{run.id}-final.mp4"
        try:
            async with self._stage("mux", MuxError):
                await muxer.mux(video, dubbing.path, subtitle, output)
        except PipelineError:
            output.unlink(missing_ok=True)
            raise

        workspace.discard(video, dubbing.path, subtitle)
        return output
