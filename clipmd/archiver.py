"""High-level orchestration for rendering an article and writing its bundle."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import ScrapeConfig
from .errors import OutputError
from .media import download_media
from .models import Article
from .scraper import BrowserSession, scrape_article
from .utils import slugify, unique_path
from .writer import generate_markdown

logger = logging.getLogger("clipmd")


@dataclass
class ArchiveResult:
    """Outcome of one archived article."""

    url: str
    output_path: Path
    article: Article
    total_seconds: float


def build_output_dir(config: ScrapeConfig, article: Article) -> Path:
    """Create a fresh output directory named after the article title."""
    base = config.output_root / slugify(article.metadata.title, fallback="article")[:80]
    output_dir = unique_path(base)
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def write_bundle(article: Article, config: ScrapeConfig) -> Path:
    """Download media if enabled and write ``index.md``; returns the file path."""
    try:
        output_dir = build_output_dir(config, article)
    except OSError as exc:
        raise OutputError(f"Could not create output directory: {exc}") from exc

    if config.download_media and article.media:
        logger.info("Downloading %d media files", len(article.media))
        article.media = download_media(article.media, output_dir)

    output_path = output_dir / "index.md"
    try:
        output_path.write_text(generate_markdown(article), encoding="utf-8")
    except OSError as exc:
        raise OutputError(f"Could not write {output_path}: {exc}") from exc
    logger.info("Saved Markdown to %s", output_path)
    return output_path


async def archive_article(
    url: str,
    config: ScrapeConfig,
    cookies: Optional[List[Dict[str, Any]]] = None,
) -> ArchiveResult:
    """Render ``url`` in a browser session and archive it under ``config.output_root``."""
    start = time.perf_counter()
    async with BrowserSession(config) as session:
        article = await scrape_article(session, url, cookies)

    logger.debug(
        "Title: %s | author: %s | media items: %d",
        article.metadata.title,
        article.metadata.author,
        len(article.media),
    )
    output_path = write_bundle(article, config)
    return ArchiveResult(
        url=url,
        output_path=output_path,
        article=article,
        total_seconds=time.perf_counter() - start,
    )
