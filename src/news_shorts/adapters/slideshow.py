"""
Slideshow composer: picks enough pictures for the target duration, downloads
them, letterboxes each onto a vertical black frame and renders a silent H.264
video with a fixed time per picture.
"""

import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import requests
from moviepy import ImageClip, concatenate_videoclips
from PIL import Image, UnidentifiedImageError

from news_shorts import config
from news_shorts.application.retry import retry_async
from news_shorts.application.workspace import Workspace
from news_shorts.domain.errors import VisualError, VisualFailure
from news_shorts.domain.models import ExtractedMaterial
from news_shorts.domain.tiling import select_images
from news_shorts.logging_utils import get_logger
from news_shorts.ports.interfaces import IVisualComposer

log = get_logger(__name__)

_TRANSIENT = (requests.ConnectionError, requests.Timeout)


def image_format(content_type: Optional[str]) -> str:
    """File extension from a Content-Type header such as ``image/jpeg; charset=...``."""
    if not content_type or "/" not in content_type:
        raise VisualError(VisualFailure.NETWORK, f"missing image content type: {content_type!r}")
    subtype = content_type.split(";")[0].split("/")[1].strip().lower()
    return {"jpeg": "jpg", "svg+xml": "svg"}.get(subtype, subtype)


def letterbox(source: Path, target: Path, size: Tuple[int, int]) -> None:
    """Fit ``source`` inside ``size`` keeping its aspect ratio, centered on black."""
    with Image.open(source) as img:
        picture = img.convert("RGB")
    ratio = min(size[0] / picture.width, size[1] / picture.height)
    picture = picture.resize(
        (max(1, int(picture.width * ratio)), max(1, int(picture.height * ratio))),
        Image.Resampling.LANCZOS,
    )
    frame = Image.new("RGB", size, (0, 0, 0))
    frame.paste(picture, ((size[0] - picture.width) // 2, (size[1] - picture.height) // 2))
    frame.save(target)


class SlideshowComposer(IVisualComposer):
    def __init__(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        fps: Optional[int] = None,
        seconds_per_image: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        self.size = (width or config.VIDEO_WIDTH, height or config.VIDEO_HEIGHT)
        self.fps = fps or config.FPS
        self.seconds_per_image = seconds_per_image or config.SECONDS_PER_IMAGE
        self.timeout = timeout or config.HTTP_TIMEOUT

    def _fetch(self, url: str) -> Tuple[bytes, str]:
        response = requests.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content, image_format(response.headers.get("Content-Type"))

    async def _download(self, url: str, workspace: Workspace) -> Path:
        try:
            content, fmt = await retry_async(
                lambda: asyncio.to_thread(self._fetch, url),
                retry_on=_TRANSIENT,
                description="image download",
            )
        except requests.RequestException as e:
            raise VisualError(VisualFailure.NETWORK, f"cannot download {url}: {e}") from e

        path = workspace.new_file(fmt)
        try:
            await asyncio.to_thread(path.write_bytes, content)
        except OSError as e:
            raise VisualError(VisualFailure.IO, f"cannot save {url}: {e}") from e
        return path

    async def _frame(self, picture: Path, workspace: Workspace) -> Path:
        frame = workspace.new_file("png")
        try:
            await asyncio.to_thread(letterbox, picture, frame, self.size)
        except (UnidentifiedImageError, Image.DecompressionBombError) as e:
            raise VisualError(VisualFailure.IMAGE, f"cannot decode {picture}: {e}") from e
        except OSError as e:
            raise VisualError(VisualFailure.IMAGE, f"cannot convert {picture}: {e}") from e
        finally:
            workspace.discard(picture)
        return frame

    def _render(self, frames: Sequence[Path], output: Path) -> None:
        clips = [ImageClip(str(f)).with_duration(self.seconds_per_image) for f in frames]
        video = concatenate_videoclips(clips, method="compose")
        try:
            video.write_videofile(
                str(output),
                fps=self.fps,
                codec="libx264",
                audio=False,
                ffmpeg_params=["-pix_fmt", "yuv420p"],
                logger=None,
            )
        finally:
            video.close()
            for clip in clips:
                clip.close()

    async def compose(
        self,
        material: ExtractedMaterial,
        duration: float,
        workspace: Workspace,
    ) -> Path:
        if duration <= 0:
            raise VisualError(VisualFailure.DURATION, f"invalid target duration {duration}")
        selected = select_images(material.images, duration, self.seconds_per_image)

        # each distinct picture is downloaded and converted once
        frames: Dict[str, Path] = {}
        for url in selected:
            if url not in frames:
                picture = await self._download(url, workspace)
                frames[url] = await self._frame(picture, workspace)
        ordered: List[Path] = [frames[url] for url in selected]

        output = workspace.new_file("mp4")
        log.info("rendering slideshow", pictures=len(ordered), unique=len(frames),
                 duration=round(duration, 3), output=str(output))
        try:
            await asyncio.to_thread(self._render, ordered, output)
        except OSError as e:
            raise VisualError(VisualFailure.IO, f"cannot render slideshow: {e}") from e
        finally:
            workspace.discard(*frames.values())
        return output
