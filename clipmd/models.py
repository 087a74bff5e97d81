"""Data models used throughout the archiving pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class MediaItem:
    """Image or video referenced by the article body."""

    url: str
    type: str
    alt: Optional[str] = None
    local_path: Optional[str] = None


@dataclass
class ArticleMetadata:
    """Metadata describing the archived article."""

    title: str
    author: str
    author_url: str
    date: str
    url: str
    likes: Optional[int] = None
    reposts: Optional[int] = None


@dataclass
class Article:
    metadata: ArticleMetadata
    content: str
    media: List[MediaItem] = field(default_factory=list)
