"""Unit tests for summarizer answer parsing and the LLM clients."""

import asyncio
import json
from unittest.mock import Mock, patch

import ollama
import pytest

from news_shorts.adapters.llm import (
    ChatCompletionSummarizer,
    OllamaSummarizer,
    parse_digest,
    strip_code_fence,
)
from news_shorts.domain.errors import ExtractionError

ANSWER = {"summary": ["第一句，", "第二句。"], "images": ["https://imgpai.cn/a.jpg"]}


def test_strip_code_fence() -> None:
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence('```JSON{"a": 1}```') == '{"a": 1}'
    assert strip_code_fence(' {"a": 1} ') == '{"a": 1}'


class TestParseDigest:

    def test_fenced_answer(self) -> None:
        digest = parse_digest("```json\n" + json.dumps(ANSWER, ensure_ascii=False) + "\n```")

        assert digest.summary == ("第一句，", "第二句。")
        assert digest.images == ("https://imgpai.cn/a.jpg",)

    def test_missing_images_means_none(self) -> None:
        assert parse_digest('{"summary": ["a"]}').images == ()

    @pytest.mark.parametrize("content", [
        "not json",
        "[1, 2]",
        '{"summary": "one string"}',
        '{"summary": ["", "  "], "images": []}',
    ])
    def test_malformed(self, content) -> None:
        with pytest.raises(ExtractionError):
            parse_digest(content)


class TestChatCompletionSummarizer:

    def test_posts_prompt_and_document(self) -> None:
        response = Mock()
        response.raise_for_status = Mock()
        response.json.return_value = {
            "choices": [{"message": {"content": json.dumps(ANSWER)}}]
        }
        summarizer = ChatCompletionSummarizer(api_key="key", base_url="https://llm.test/", model="m")
        with patch("news_shorts.adapters.llm.requests.post", return_value=response) as post:
            digest = asyncio.run(summarizer.summarize("<p>正文</p>"))

        assert digest.summary == ("第一句，", "第二句。")
        url = post.call_args.args[0]
        body = post.call_args.kwargs["json"]
        assert url == "https://llm.test/chat/completions"
        assert post.call_args.kwargs["headers"]["Authorization"] == "Bearer key"
        assert body["model"] == "m"
        assert [m["role"] for m in body["messages"]] == ["system", "user"]
        assert body["messages"][1]["content"] == "<p>正文</p>"

    def test_requires_api_key(self) -> None:
        with pytest.raises(ExtractionError):
            asyncio.run(ChatCompletionSummarizer(api_key="").summarize("<p/>"))


class TestOllamaSummarizer:

    def test_generates_json_answer(self) -> None:
        summarizer = OllamaSummarizer(base_url="http://ollama.test:11434", model="qwen2.5")
        with patch("news_shorts.adapters.llm.ollama.Client") as client_cls:
            client = client_cls.return_value
            client.generate.return_value = {"response": json.dumps(ANSWER)}
            digest = asyncio.run(summarizer.summarize("<p>正文</p>"))

        assert digest.summary == ("第一句，", "第二句。")
        assert digest.images == ("https://imgpai.cn/a.jpg",)
        client_cls.assert_called_with(host="http://ollama.test:11434")
        kwargs = client.generate.call_args.kwargs
        assert kwargs["model"] == "qwen2.5"
        assert kwargs["prompt"] == "<p>正文</p>"
        assert kwargs["format"] == "json"

    def test_server_unreachable(self) -> None:
        with patch("news_shorts.adapters.llm.ollama.Client") as client_cls:
            client = client_cls.return_value
            client.generate.side_effect = ConnectionError("connection refused")
            with pytest.raises(ExtractionError) as exc:
                asyncio.run(OllamaSummarizer().summarize("<p/>"))

        assert "connection refused" in str(exc.value)
        assert client.generate.call_count == 3

    def test_model_error_is_not_retried(self) -> None:
        with patch("news_shorts.adapters.llm.ollama.Client") as client_cls:
            client = client_cls.return_value
            client.generate.side_effect = ollama.ResponseError("model not found")
            with pytest.raises(ExtractionError):
                asyncio.run(OllamaSummarizer().summarize("<p/>"))

        assert client.generate.call_count == 1
