"""Front matter and final Markdown assembly."""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable

import yaml

from .models import Article, ArticleMetadata, MediaItem
from .utils import utc_timestamp

FRONT_MATTER_DELIMITER = "---"


def generate_frontmatter(metadata: ArticleMetadata) -> str:
    """Render metadata as a YAML block wrapped in ``---`` lines.

    ``likes`` and ``reposts`` only appear when they were scraped.
    """
    data: Dict[str, Any] = {
        "title": metadata.title,
        "author": metadata.author,
        "author_url": metadata.author_url,
        "date": metadata.date,
        "url": metadata.url,
        "downloaded_at": utc_timestamp(),
    }
    if metadata.likes is not None:
        data["likes"] = metadata.likes
    if metadata.reposts is not None:
        data["reposts"] = metadata.reposts

    body = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return f"{FRONT_MATTER_DELIMITER}\n{body}{FRONT_MATTER_DELIMITER}"


def replace_media_links(markdown: str, media: Iterable[MediaItem]) -> str:
    """Swap remote media URLs with downloaded local paths.

    All media URLs are matched in one pass, longest first, so a URL that is a
    prefix of another media URL never rewrites part of the longer one. Items
    without a ``local_path`` keep their remote URL.
    """
    targets: Dict[str, str] = {}
    for item in media:
        if item.local_path or item.url not in targets:
            targets[item.url] = item.local_path or item.url
    if not any(url != path for url, path in targets.items()):
        return markdown
    pattern = re.compile(
        "|".join(re.escape(url) for url in sorted(targets, key=len, reverse=True))
    )
    return pattern.sub(lambda match: targets[match.group(0)], markdown)


def generate_markdown(article: Article) -> str:
    content = replace_media_links(article.content, article.media)
    return f"{generate_frontmatter(article.metadata)}\n\n{content}"
