"""HTML to Markdown conversion and media discovery for article bodies."""

from __future__ import annotations

import re
from typing import Any, List, Mapping

from bs4 import BeautifulSoup
from markdownify import ATX, markdownify

from .models import Article, ArticleMetadata, MediaItem
from .utils import utc_timestamp

# Applied in order; later rules expect the artifacts of earlier ones gone.
_CLEANUP_RULES = [
    # empty or whitespace-only links: [](/path), [\n](/path)
    (re.compile(r"\[\s*\]\([^)]+\)"), ""),
    # stray brackets left on their own line
    (re.compile(r"^\[\s*$", re.MULTILINE), ""),
    (re.compile(r"^\]\s*$", re.MULTILINE), ""),
    # orphaned link targets such as ](/someuser)
    (re.compile(r"^\]\([^)]+\)\s*$", re.MULTILINE), ""),
    # broken image syntax
    (re.compile(r"^!\s*$", re.MULTILINE), ""),
    # "##" on one line and the heading text two lines below
    (re.compile(r"^(#{1,6})\s*\n\n([A-Z])", re.MULTILINE), r"\1 \2"),
    (re.compile(r"\n{3,}"), "\n\n"),
    # engagement counters rendered as bare text: 146, 2.5K, 1M
    (re.compile(r"^\d+(\.\d+)?[KMB]?\s*$", re.MULTILINE), ""),
]


def clean_markdown(markdown: str) -> str:
    """Strip rendering artifacts left behind by X's article markup."""
    for pattern, replacement in _CLEANUP_RULES:
        markdown = pattern.sub(replacement, markdown)
    return markdown.strip()


def html_to_markdown(html: str) -> str:
    """Convert article HTML to cleaned-up Markdown."""
    markdown = markdownify(html, heading_style=ATX)
    return clean_markdown(markdown)


def extract_media_urls(html: str) -> List[MediaItem]:
    """Collect images, then videos, then video ``<source>`` fallbacks.

    Attribute values come back entity-decoded, so the URLs match what the
    Markdown renderer emits. A ``<source>`` URL already seen is skipped.
    """
    soup = BeautifulSoup(html, "html.parser")
    media: List[MediaItem] = []

    for img in soup.find_all("img"):
        src = img.get("src")
        if not src:
            continue
        media.append(MediaItem(url=src, type="image", alt=img.get("alt") or None))

    for video in soup.find_all("video"):
        src = video.get("src")
        if src:
            media.append(MediaItem(url=src, type="video"))

    for source in soup.find_all("source"):
        src = source.get("src")
        if not src or not source.get("type", "").lower().startswith("video/"):
            continue
        if any(item.url == src for item in media):
            continue
        media.append(MediaItem(url=src, type="video"))

    return media


def parse_article_page(html: str, url: str, metadata: Mapping[str, Any]) -> Article:
    """Build an :class:`Article` from the article body HTML and scraped metadata."""
    media = extract_media_urls(html)
    content = html_to_markdown(html)

    return Article(
        metadata=ArticleMetadata(
            title=metadata.get("title") or "Untitled",
            author=metadata.get("author") or "unknown",
            author_url=metadata.get("author_url") or "",
            date=metadata.get("date") or utc_timestamp(),
            url=url,
            likes=metadata.get("likes"),
            reposts=metadata.get("reposts"),
        ),
        content=content,
        media=media,
    )
