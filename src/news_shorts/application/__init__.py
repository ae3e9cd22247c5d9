"""Application layer – orchestration, audio timeline, run workspace."""

from news_shorts.application.director import ContentSource, Director, RunState, StageSet

__all__ = ["ContentSource", "Director", "RunState", "StageSet"]
