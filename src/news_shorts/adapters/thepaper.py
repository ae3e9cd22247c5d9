"""ThePaper (澎湃新闻) hot-news crawler and article extractor."""

import asyncio
from typing import Any, Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from news_shorts import config
from news_shorts.adapters.llm import Summarizer, default_summarizer
from news_shorts.application.retry import retry_async
from news_shorts.domain.errors import CrawlError, ExtractionError
from news_shorts.domain.models import ContentReference, ExtractedMaterial
from news_shorts.logging_utils import get_logger
from news_shorts.ports.interfaces import ICrawler, IExtractor

log = get_logger(__name__)

SOURCE_NAME = "thepaper"
HOT_NEWS_URL = "https://cache.thepaper.cn/contentapi/wwwIndex/rightSidebar"
ARTICLE_URL = "https://www.thepaper.cn/newsDetail_forward_{}"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)

_TRANSIENT = (requests.ConnectionError, requests.Timeout)


def _get(url: str, timeout: float) -> requests.Response:
    response = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
    response.raise_for_status()
    return response


def to_reference(item: Dict[str, Any]) -> ContentReference:
    """Map one ``hotNews`` entry; the cover comes first, then the video cover."""
    images = [item["pic"]] if item.get("pic") else []
    videos = []
    video = item.get("videos")
    if isinstance(video, dict):
        if video.get("url"):
            videos.append(video["url"])
        if video.get("coverUrlFirstFrame"):
            images.append(video["coverUrlFirstFrame"])
    return ContentReference(
        source=SOURCE_NAME,
        title=item["name"],
        url=ARTICLE_URL.format(item["contId"]),
        images=tuple(images),
        videos=tuple(videos),
    )


def body_inner_html(document: str) -> str:
    """Inner HTML of <body>; the whole document if there is none."""
    soup = BeautifulSoup(document, "html.parser")
    body = soup.body
    if body is None:
        return document
    return body.decode_contents()


class ThePaperCrawler(ICrawler):
    """Reads the hot-news sidebar. No caching: every call hits the API."""

    def __init__(self, url: str = HOT_NEWS_URL, timeout: Optional[float] = None):
        self.url = url
        self.timeout = timeout or config.HTTP_TIMEOUT

    async def list_top_content(self) -> List[ContentReference]:
        try:
            response = await retry_async(
                lambda: asyncio.to_thread(_get, self.url, self.timeout),
                retry_on=_TRANSIENT,
                description="thepaper hot news",
            )
            items = response.json()["data"]["hotNews"]
            references = [to_reference(item) for item in items]
        except requests.RequestException as e:
            raise CrawlError(f"cannot fetch hot news: {e}") from e
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise CrawlError(f"unexpected hot news payload: {e}") from e

        log.info("hot news listed", source=SOURCE_NAME, count=len(references))
        return references


class ThePaperExtractor(IExtractor):
    """Downloads the article page and lets a summarizer condense it."""

    def __init__(self, summarizer: Optional[Summarizer] = None, timeout: Optional[float] = None):
        self.summarizer = summarizer or default_summarizer()
        self.timeout = timeout or config.HTTP_TIMEOUT

    async def extract_material(self, reference: ContentReference) -> ExtractedMaterial:
        try:
            response = await retry_async(
                lambda: asyncio.to_thread(_get, reference.url, self.timeout),
                retry_on=_TRANSIENT,
                description="thepaper article",
            )
        except requests.RequestException as e:
            raise ExtractionError(f"cannot fetch {reference.url}: {e}") from e

        body = body_inner_html(response.text)
        digest = await self.summarizer.summarize(body)
        log.info("material extracted", url=reference.url,
                 sentences=len(digest.summary), images=len(digest.images))
        return ExtractedMaterial(
            title=reference.title,
            summary=digest.summary,
            images=reference.images + digest.images,
            videos=reference.videos,
        )
