"""SRT timing and rendering.

Captions follow one another in speech order, each lasting exactly as long as
its sentence was spoken, separated by a fixed gap. All arithmetic happens in
integer milliseconds, truncating anything below a millisecond, so identical
input always renders identical text.
"""

from typing import List, Sequence

from news_shorts.domain.models import Caption, SubtitleLine

DEFAULT_GAP = 0.2


def _to_ms(seconds: float) -> int:
    # whole microseconds first, then drop the sub-millisecond part
    return int(round(seconds * 1_000_000)) // 1000


def format_timestamp(seconds: float) -> str:
    """Format seconds as ``HH:MM:SS,mmm``."""
    total_ms = _to_ms(seconds)
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def build_entries(lines: Sequence[SubtitleLine], gap: float = DEFAULT_GAP) -> List[Caption]:
    cursor_ms = 0
    gap_ms = _to_ms(gap)
    captions: List[Caption] = []
    for i, line in enumerate(lines):
        start_ms = cursor_ms
        end_ms = start_ms + _to_ms(line.duration)
        captions.append(Caption(
            index=i + 1,
            start=start_ms / 1000,
            end=end_ms / 1000,
            text=line.text,
        ))
        cursor_ms = end_ms + gap_ms
    return captions


def render_srt(captions: Sequence[Caption]) -> str:
    parts = []
    for caption in captions:
        parts.append(
            f"{caption.index}\n"
            f"{format_timestamp(caption.start)} --> {format_timestamp(caption.end)}\n"
            f"{caption.text}\n\n"
        )
    return "".join(parts)
