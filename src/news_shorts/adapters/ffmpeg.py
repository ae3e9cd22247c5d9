"""Final muxer: burns subtitles into the slideshow and adds the narration with ffmpeg."""

import asyncio
from pathlib import Path
from typing import List, Optional

from news_shorts import config
from news_shorts.domain.errors import MuxError
from news_shorts.logging_utils import get_logger
from news_shorts.ports.interfaces import IFinalMuxer

log = get_logger(__name__)

STDERR_TAIL = 800


def subtitle_filter(path: Path) -> str:
    """``subtitles=`` filter argument with the path escaped for the filtergraph."""
    escaped = str(path).replace("\\", "/").replace(":", "\\:").replace("'", "\\'")
    return f"subtitles='{escaped}'"


def build_command(
    binary: str,
    video: Path,
    audio: Path,
    subtitle: Optional[Path],
    output: Path,
) -> List[str]:
    command = [binary, "-i", str(video), "-i", str(audio)]
    if subtitle is not None:
        command += ["-vf", subtitle_filter(subtitle)]
    command += [
        "-c:v", "libx264",
        "-c:a", "aac",
        "-b:a", "192k",
        "-shortest",
        "-y", str(output),
    ]
    return command


class FFmpegMuxer(IFinalMuxer):
    def __init__(self, binary: Optional[str] = None, timeout: Optional[float] = None):
        self.binary = binary or config.FFMPEG_BINARY
        self.timeout = timeout or config.FFMPEG_TIMEOUT

    async def mux(
        self,
        video: Path,
        audio: Path,
        subtitle: Optional[Path],
        output: Path,
    ) -> None:
        command = build_command(self.binary, video, audio, subtitle, output)
        log.debug("running ffmpeg", command=command)
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise MuxError(f"cannot start {self.binary}: {e}") from e

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise MuxError(f"ffmpeg timed out after {self.timeout:.0f}s")

        text = stderr.decode("utf-8", errors="replace") if stderr else ""
        for line in text.splitlines():
            log.debug("ffmpeg", line=line)
        if process.returncode != 0:
            raise MuxError(f"ffmpeg exited with {process.returncode}: {text[-STDERR_TAIL:].strip()}")
        log.info("final video muxed", output=str(output), subtitles=subtitle is not None)
