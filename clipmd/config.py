"""Configuration objects and constants for the article archiver."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("clipmd")

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
COOKIES_ENV_VAR = "X_AUTH_COOKIES"
CONFIG_DIR_ENV_VAR = "CLIPMD_CONFIG_DIR"


@dataclass
class ScrapeConfig:
    """Top-level settings that control rendering and output behaviour."""

    output_root: Path
    navigation_timeout: float = 60.0
    selector_timeout: float = 30.0
    download_media: bool = True
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT


def get_config_dir() -> Path:
    override = os.getenv(CONFIG_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".clipmd"


def get_cookies_path(config_dir: Optional[Path] = None) -> Path:
    return (config_dir or get_config_dir()) / "cookies.json"


def _parse_cookies(text: str) -> List[Dict[str, Any]]:
    """Decode a JSON array of cookie objects; raises ``ValueError`` otherwise."""
    cookies = json.loads(text)
    if not isinstance(cookies, list) or not all(isinstance(c, dict) for c in cookies):
        raise ValueError("expected a JSON array of cookie objects")
    return cookies


def load_cookies(path: Optional[Path] = None) -> Optional[List[Dict[str, Any]]]:
    """Load browser cookies from the environment or a JSON file.

    ``X_AUTH_COOKIES`` wins over files. Without an explicit ``path`` the
    default ``cookies.json`` in the config directory is used. Returns ``None``
    when no usable cookies were found.
    """
    env_cookies = os.getenv(COOKIES_ENV_VAR)
    if env_cookies:
        try:
            return _parse_cookies(env_cookies)
        except ValueError as exc:
            logger.warning("Ignoring %s: %s", COOKIES_ENV_VAR, exc)

    cookies_path = path or get_cookies_path()
    if not cookies_path.exists():
        return None
    try:
        return _parse_cookies(cookies_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not read cookies from %s: %s", cookies_path, exc)
        return None
