"""
Adapters – concrete implementations of ports.
default_sources() / default_stages() build the stock configuration from
config; pass overrides to swap a stage (or None to leave it out).
"""

from typing import List

from news_shorts import config
from news_shorts.adapters.ffmpeg import FFmpegMuxer
from news_shorts.adapters.llm import ChatCompletionSummarizer, OllamaSummarizer, default_summarizer
from news_shorts.adapters.slideshow import SlideshowComposer
from news_shorts.adapters.subtitle import SrtSubtitleWriter
from news_shorts.adapters.thepaper import SOURCE_NAME as THEPAPER, ThePaperCrawler, ThePaperExtractor
from news_shorts.adapters.tts import DashScopeSynthesizer, EdgeSynthesizer, default_synthesizer
from news_shorts.adapters.voice import PitchShiftEffect
from news_shorts.application.director import ContentSource, StageSet


def default_sources(**overrides) -> List[ContentSource]:
    """
    Registered content sources.
    Overrides: crawler=..., extractor=... for the ThePaper source (testing).
    """
    return [
        ContentSource(
            name=THEPAPER,
            crawler=overrides.get("crawler") or ThePaperCrawler(),
            extractor=overrides.get("extractor") or ThePaperExtractor(default_summarizer()),
        ),
    ]


def default_stages(**overrides) -> StageSet:
    """
    Build the default stage set (uses config).
    Overrides: speech=..., voice_effect=..., subtitles=..., visual=..., muxer=...
    """
    defaults = {
        "speech": default_synthesizer(),
        "voice_effect": PitchShiftEffect() if config.VOICE_EFFECT_ENABLED else None,
        "subtitles": SrtSubtitleWriter() if config.SUBTITLES_ENABLED else None,
        "visual": SlideshowComposer(),
        "muxer": FFmpegMuxer(),
    }
    defaults.update(overrides)
    return StageSet(**defaults)


__all__ = [
    "ChatCompletionSummarizer",
    "DashScopeSynthesizer",
    "EdgeSynthesizer",
    "FFmpegMuxer",
    "OllamaSummarizer",
    "PitchShiftEffect",
    "SlideshowComposer",
    "SrtSubtitleWriter",
    "ThePaperCrawler",
    "ThePaperExtractor",
    "default_sources",
    "default_stages",
]
