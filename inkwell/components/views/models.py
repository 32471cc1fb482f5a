from dataclasses import dataclass


@dataclass
class IncrementViewInput:
    article_id: int
    viewer_key: str | None = None


@dataclass
class IncrementViewOutput:
    views: int | None = None
    counted: bool = False
    success: bool = True
    error: str | None = None
