"""Ports (interfaces) – depend on these, implement in adapters."""

from news_shorts.ports.interfaces import (
    ICrawler,
    IExtractor,
    IFinalMuxer,
    ISpeechSynthesizer,
    ISubtitleWriter,
    IVisualComposer,
    IVoiceEffectTool,
)

__all__ = [
    "ICrawler",
    "IExtractor",
    "IFinalMuxer",
    "ISpeechSynthesizer",
    "ISubtitleWriter",
    "IVisualComposer",
    "IVoiceEffectTool",
]
