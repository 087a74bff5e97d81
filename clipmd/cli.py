"""Command-line entry point for the article archiver."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from playwright.async_api import Error as PlaywrightError

from .archiver import archive_article
from .config import ScrapeConfig, load_cookies
from .errors import ClipmdError, InvalidURLError
from .utils import is_valid_article_url

logger = logging.getLogger("clipmd.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="clipmd",
        description="Download an X article and save it as Markdown with local media.",
    )
    parser.add_argument("url", help="X article or status URL to download")
    parser.add_argument(
        "-o",
        "--output",
        default="articles",
        type=Path,
        help="Directory where the article folder should be written",
    )
    parser.add_argument(
        "--no-media",
        action="store_true",
        help="Skip downloading images and videos",
    )
    parser.add_argument(
        "--cookies",
        type=Path,
        default=None,
        help="JSON file with session cookies (default: ~/.clipmd/cookies.json)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=60.0,
        help="Navigation timeout in seconds",
    )
    parser.add_argument(
        "--no-headless",
        action="store_true",
        help="Show the browser window while loading the page",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ScrapeConfig:
    return ScrapeConfig(
        output_root=Path(args.output).resolve(),
        navigation_timeout=args.timeout,
        download_media=not args.no_media,
        headless=not args.no_headless,
    )


def _run(args: argparse.Namespace) -> None:
    if not is_valid_article_url(args.url):
        raise InvalidURLError(
            f"Not a valid X article URL: {args.url} "
            "(expected https://x.com/<user>/article/<id>)"
        )

    config = build_config(args)
    cookies = load_cookies(args.cookies)
    if not cookies:
        logger.warning("No saved cookies found; the article may require login")

    result = asyncio.run(archive_article(args.url, config, cookies))
    logger.info("Finished in %.2fs: %s", result.total_seconds, result.output_path)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logger.debug("Options: %s", vars(args))

    try:
        _run(args)
    except KeyboardInterrupt:
        logger.error("Interrupted")
        sys.exit(130)
    except ClipmdError as exc:
        logger.error("%s", exc)
        sys.exit(1)
    except (PlaywrightError, OSError) as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        logger.debug("Traceback", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
