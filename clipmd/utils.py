"""Utility helpers for string normalization and path handling."""

from __future__ import annotations

import datetime as dt
import re
from pathlib import Path
from urllib.parse import urlparse

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
ARTICLE_PATH_PATTERN = re.compile(r"^/[^/]+/(article|status)/\d+")
ARTICLE_HOSTS = {"x.com", "twitter.com", "www.x.com", "www.twitter.com"}


def slugify(value: str, fallback: str = "article") -> str:
    """Generate a filesystem-friendly slug using ASCII characters only."""
    normalized = value.encode("ascii", "ignore").decode("ascii")
    normalized = normalized.lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized or fallback


def is_valid_article_url(url: str) -> bool:
    """Accept X/Twitter ``/<user>/article/<id>`` and ``/<user>/status/<id>`` URLs."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or parsed.hostname not in ARTICLE_HOSTS:
        return False
    return bool(ARTICLE_PATH_PATTERN.match(parsed.path))


def unique_path(base_path: Path) -> Path:
    """Return ``base_path`` or the first free ``<base_path>-N`` sibling."""
    if not base_path.exists():
        return base_path
    counter = 1
    candidate = base_path.with_name(f"{base_path.name}-{counter}")
    while candidate.exists():
        counter += 1
        candidate = base_path.with_name(f"{base_path.name}-{counter}")
    return candidate


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with seconds precision and a ``Z`` suffix."""
    return (
        dt.datetime.now(dt.timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )
