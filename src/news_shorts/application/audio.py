"""
Audio timeline composition: narration segments -> one continuous WAV.

A fixed block of silence follows every segment in the rendered file, but the
durations reported for subtitles are the segments' own lengths.
"""

from pathlib import Path
from typing import Callable, List, Optional, Sequence

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from news_shorts.domain.errors import AudioFormatError, SpeechError, SpeechFailure
from news_shorts.domain.models import DubbingArtifact, SpeechSegment, SubtitleLine
from news_shorts.logging_utils import get_logger

log = get_logger(__name__)

SILENCE_SECONDS = 0.3


def load_wav(path: Path) -> AudioSegment:
    try:
        return AudioSegment.from_wav(str(path))
    except (CouldntDecodeError, OSError, ValueError) as e:
        raise AudioFormatError(f"cannot decode {path}: {e}") from e


def wav_duration(audio: AudioSegment) -> float:
    """Exact duration in seconds (pydub's len() rounds to milliseconds)."""
    return audio.frame_count() / audio.frame_rate


def measure_wav(path: Path) -> float:
    """Playback length of a WAV file in seconds."""
    return wav_duration(load_wav(path))


def make_silence(like: AudioSegment, seconds: float) -> AudioSegment:
    """Digital silence in the same sample format as ``like``."""
    frames = int(like.frame_rate * seconds)
    # 8-bit WAV is unsigned, its zero level is 0x80
    zero = b"\x80" if like.sample_width == 1 else b"\x00"
    return like._spawn(zero * (frames * like.frame_width))


def _same_format(a: AudioSegment, b: AudioSegment) -> bool:
    return (
        a.frame_rate == b.frame_rate
        and a.channels == b.channels
        and a.sample_width == b.sample_width
    )


def compose_timeline(
    segments: Sequence[SpeechSegment],
    output: Path,
    silence: float = SILENCE_SECONDS,
    on_folded: Optional[Callable[[Path], None]] = None,
) -> DubbingArtifact:
    """Concatenate segments in order into ``output`` with silence after each.

    ``on_folded`` is called with each segment's path once its samples are in
    the timeline, so the caller can delete it right away.
    """
    if not segments:
        raise SpeechError(SpeechFailure.EMPTY_INPUT, "no speech segments to compose")

    first: Optional[AudioSegment] = None
    gap: Optional[AudioSegment] = None
    chunks: List[bytes] = []
    lines: List[SubtitleLine] = []

    for segment in segments:
        audio = load_wav(segment.path)
        if first is None:
            first = audio
            gap = make_silence(first, silence)
        elif not _same_format(first, audio):
            raise AudioFormatError(
                f"{segment.path} is {audio.frame_rate} Hz/{audio.channels} ch/"
                f"{audio.sample_width * 8} bit, expected {first.frame_rate} Hz/"
                f"{first.channels} ch/{first.sample_width * 8} bit"
            )

        chunks.append(audio.raw_data)
        chunks.append(gap.raw_data)
        lines.append(SubtitleLine(text=segment.text, duration=wav_duration(audio)))
        if on_folded is not None:
            on_folded(segment.path)

    timeline = first._spawn(b"".join(chunks))
    try:
        timeline.export(str(output), format="wav").close()
    except OSError as e:
        raise SpeechError(SpeechFailure.IO, f"cannot write dubbing {output}: {e}") from e

    dubbing = DubbingArtifact(path=Path(output), lines=tuple(lines))
    log.info("dubbing composed", output=str(output), segments=len(lines),
             duration=round(dubbing.duration, 3))
    return dubbing
