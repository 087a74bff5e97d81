"""Media downloading utilities."""

from __future__ import annotations

import dataclasses
import logging
import re
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

import requests
from filetype import guess

from .models import MediaItem

logger = logging.getLogger("clipmd")

MEDIA_DIRNAME = "media"
DEFAULT_EXTENSION = "jpg"
KNOWN_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "mp4", "webm", "mov"}
_EXTENSION_PATTERN = re.compile(r"\.([a-zA-Z0-9]+)$")


def _url_extension(url: str) -> Optional[str]:
    match = _EXTENSION_PATTERN.search(urlparse(url).path)
    if match:
        ext = match.group(1).lower()
        if ext in KNOWN_EXTENSIONS:
            return ext
    return None


def get_media_extension(url: str) -> str:
    """Return the file extension implied by the URL path, defaulting to jpg."""
    return _url_extension(url) or DEFAULT_EXTENSION


def detect_media_extension(data: bytes) -> Optional[str]:
    """Detect an image or video type from the payload signature."""
    kind = guess(data)
    if kind and kind.extension.lower() in KNOWN_EXTENSIONS:
        return kind.extension.lower()
    return None


def get_media_filename(index: int, media_type: str, extension: str) -> str:
    num = index + 1
    if media_type == "video":
        return f"video-{num}.{extension}"
    return f"{num}.{extension}"


def download_media(
    media: List[MediaItem],
    output_dir: Path,
    session: Optional[requests.Session] = None,
) -> List[MediaItem]:
    """Download media sequentially and return items with ``local_path`` set.

    Items that fail to download are returned unchanged so their remote URL
    stays in the Markdown.
    """
    if not media:
        return []
    media_dir = output_dir / MEDIA_DIRNAME
    media_dir.mkdir(parents=True, exist_ok=True)

    session = session or requests.Session()
    results: List[MediaItem] = []

    for index, item in enumerate(media):
        logger.debug("Downloading %s", item.url)
        try:
            resp = session.get(item.url, timeout=30)
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Failed to download %s: %s", item.url, exc)
            results.append(item)
            continue

        data = resp.content
        extension = (
            _url_extension(item.url)
            or detect_media_extension(data)
            or DEFAULT_EXTENSION
        )
        filename = get_media_filename(index, item.type, extension)
        destination = media_dir / filename

        try:
            destination.write_bytes(data)
        except OSError as exc:
            logger.warning("Failed to write media %s: %s", destination, exc)
            results.append(item)
            continue

        results.append(
            dataclasses.replace(item, local_path=f"./{MEDIA_DIRNAME}/{filename}")
        )
    return results
