"""
Article summarizers used by extractors.
Both providers receive the article HTML and must answer with
{"summary": [...], "images": [...]} JSON.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

import ollama
import requests

from news_shorts import config
from news_shorts.application.retry import retry_async
from news_shorts.domain.errors import ExtractionError
from news_shorts.logging_utils import get_logger

log = get_logger(__name__)

SUMMARY_PROMPT = """
你是一个爆款短视频的作者，我会给你一个 HTML 格式的新闻稿，你要根据要求总结里面的新闻，并提取正文的图片，具体要求为：
1. 将新闻内容浓缩为200字内的短视频风格摘要，使用吸引眼球的夸张俏皮语气，可以使用网络热词，但必须保持事实准确，
突出核心事件、关键人物和戏剧性细节。纯文字输出，禁止使用表情符号，注意中文标点符号使用规范。
正文根据逗号、句号分割，放在数组内。
2. 从新闻稿 HTML 中提取仅正文部分的图片链接（排除封面、视频缩略图、图标、广告等非正文内容），
并去除 URL 中 ? 及后面的参数；若无符合条件的图片则返回空数组。

按照如下 JSON 格式输出：

{
  "summary": ["句子1", "句子2"],
  "images": ["图片1", "图片2"]
}
"""


@dataclass(frozen=True)
class ArticleDigest:
    summary: Tuple[str, ...]
    images: Tuple[str, ...] = ()


def strip_code_fence(content: str) -> str:
    """Remove a ```json ... ``` wrapper around a model answer."""
    text = content.strip()
    for fence in ("```json", "```JSON", "```"):
        if text.startswith(fence):
            text = text[len(fence):]
            break
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_digest(content: str) -> ArticleDigest:
    """Parse the model answer into an ArticleDigest; raise ExtractionError if malformed."""
    try:
        data = json.loads(strip_code_fence(content))
    except json.JSONDecodeError as e:
        raise ExtractionError(f"summarizer returned invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ExtractionError("summarizer answer is not a JSON object")
    summary = data.get("summary")
    images = data.get("images") or []
    if not isinstance(summary, list) or not isinstance(images, list):
        raise ExtractionError("summarizer answer needs 'summary' and 'images' arrays")

    sentences = tuple(str(s).strip() for s in summary if str(s).strip())
    if not sentences:
        raise ExtractionError("summarizer returned an empty summary")
    return ArticleDigest(
        summary=sentences,
        images=tuple(str(i).strip() for i in images if str(i).strip()),
    )


class Summarizer(ABC):
    """Condenses an HTML article into narration sentences and body pictures."""

    @abstractmethod
    async def summarize(self, document: str) -> ArticleDigest:
        """Raise ExtractionError on failure."""


class ChatCompletionSummarizer(Summarizer):
    """OpenAI-compatible /chat/completions endpoint (DeepSeek by default)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else config.DEEPSEEK_API_KEY
        self.base_url = (base_url or config.DEEPSEEK_BASE_URL).rstrip("/")
        self.model = model or config.DEEPSEEK_MODEL
        self.timeout = timeout or config.HTTP_TIMEOUT * 4

    def _post(self, document: str) -> str:
        response = requests.post(
            f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": SUMMARY_PROMPT},
                    {"role": "user", "content": document},
                ],
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        choices = response.json().get("choices") or [{}]
        return choices[0].get("message", {}).get("content") or ""

    async def summarize(self, document: str) -> ArticleDigest:
        if not self.api_key:
            raise ExtractionError("DEEPSEEK_API_KEY is not set")
        log.debug("chat completion request", model=self.model, chars=len(document))
        try:
            content = await retry_async(
                lambda: asyncio.to_thread(self._post, document),
                retry_on=(requests.ConnectionError, requests.Timeout),
                description="chat completion",
            )
        except (requests.RequestException, ValueError) as e:
            raise ExtractionError(f"chat completion failed: {e}") from e
        return parse_digest(content)


class OllamaSummarizer(Summarizer):
    """Local model served by Ollama."""

    def __init__(self, base_url: Optional[str] = None, model: Optional[str] = None):
        self.base_url = base_url or config.OLLAMA_BASE_URL
        self.model = model or config.OLLAMA_MODEL

    def _generate(self, document: str) -> str:
        client = ollama.Client(host=self.base_url)
        response = client.generate(
            model=self.model,
            system=SUMMARY_PROMPT,
            prompt=document,
            format="json",
            options={"temperature": 0.7},
        )
        return response.get("response", "")

    async def summarize(self, document: str) -> ArticleDigest:
        log.debug("ollama request", model=self.model, chars=len(document))
        try:
            content = await retry_async(
                lambda: asyncio.to_thread(self._generate, document),
                retry_on=(ConnectionError,),
                description="ollama generate",
            )
        except (ollama.ResponseError, ConnectionError) as e:
            raise ExtractionError(f"ollama failed: {e}") from e
        return parse_digest(content)


def default_summarizer() -> Summarizer:
    if config.SUMMARY_PROVIDER == "ollama":
        return OllamaSummarizer()
    return ChatCompletionSummarizer()
