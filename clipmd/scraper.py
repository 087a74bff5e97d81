"""Headless browser rendering and article page selection."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from bs4 import BeautifulSoup
from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import ScrapeConfig
from .errors import ScrapeError
from .models import Article
from .parser import parse_article_page
from .utils import utc_timestamp

logger = logging.getLogger("clipmd")

SITE_ROOT = "https://x.com"
_LIKES_PATTERN = re.compile(r"(\d+(?:,\d+)*)\s*(?:Likes?|likes?)")
_REPOSTS_PATTERN = re.compile(r"(\d+(?:,\d+)*)\s*(?:Reposts?|reposts?)")
_COOKIE_FIELDS = ("name", "value", "domain", "path", "expires", "httpOnly", "secure", "sameSite")

# Profile header, action bar and counters that surround a plain <article>.
_CHROME_SELECTORS = [
    '[data-testid="User-Name"]',
    '[data-testid="UserAvatar-Container"]',
    '[role="group"]',
    "time",
    '[data-testid="app-text-transition-container"]',
]


class BrowserSession:
    """Playwright driver plus one Chromium browser, owned by the caller.

    Use as ``async with BrowserSession(config) as session``; the browser is
    closed on every exit path, cancellation included.
    """

    def __init__(self, config: ScrapeConfig) -> None:
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    @property
    def browser(self) -> Browser:
        if self._browser is None:
            raise RuntimeError("BrowserSession is not open")
        return self._browser

    async def open(self) -> "BrowserSession":
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless
            )
        except PlaywrightError as exc:
            await self.close()
            raise ScrapeError(f"Could not launch Chromium: {exc}") from exc
        except BaseException:
            await self.close()
            raise
        logger.debug("Launched Chromium (headless=%s)", self.config.headless)
        return self

    async def close(self) -> None:
        if self._browser is not None:
            browser, self._browser = self._browser, None
            await browser.close()
        if self._playwright is not None:
            playwright, self._playwright = self._playwright, None
            await playwright.stop()

    async def __aenter__(self) -> "BrowserSession":
        return await self.open()

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


def _normalize_cookies(cookies: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep the fields Playwright accepts and default ``path`` to ``/``."""
    normalized = []
    for cookie in cookies:
        entry = {key: cookie[key] for key in _COOKIE_FIELDS if cookie.get(key) is not None}
        entry.setdefault("path", "/")
        normalized.append(entry)
    return normalized


def _parse_count(pattern: re.Pattern, text: str) -> Optional[int]:
    match = pattern.search(text)
    if not match:
        return None
    return int(match.group(1).replace(",", ""))


def extract_metadata(page_html: str) -> Dict[str, Any]:
    """Read title, author, date and engagement counts from a rendered page."""
    soup = BeautifulSoup(page_html, "html.parser")

    title = ""
    heading = soup.select_one("article h1")
    if heading:
        title = heading.get_text()
    if not title.strip():
        og_title = soup.find("meta", attrs={"property": "og:title"})
        if og_title and og_title.get("content"):
            title = og_title["content"]
    title = title.strip() or "Untitled"

    author_url = ""
    author = "unknown"
    author_link = soup.select_one('article a[href*="/"]')
    if author_link:
        href = author_link["href"]
        author = href.rstrip("/").split("/")[-1] or "unknown"
        author_url = href if href.startswith("http") else f"{SITE_ROOT}{href}"

    time_tag = soup.select_one("article time")
    date = time_tag.get("datetime") if time_tag else None
    if not date:
        date = utc_timestamp()

    stats_text = (soup.body or soup).get_text(" ")
    return {
        "title": title,
        "author": author,
        "author_url": author_url,
        "date": date,
        "likes": _parse_count(_LIKES_PATTERN, stats_text),
        "reposts": _parse_count(_REPOSTS_PATTERN, stats_text),
    }


def select_article_html(page_html: str) -> str:
    """Pick the HTML holding the article text.

    Prefers the long-form article body, then the post text blocks, then the
    first ``<article>`` with profile and engagement chrome stripped.
    """
    soup = BeautifulSoup(page_html, "html.parser")

    article_body = soup.select_one('[data-testid="article-body"]')
    if article_body:
        return article_body.decode_contents()

    tweet_texts = soup.select('[data-testid="tweetText"]')
    if tweet_texts:
        return "\n\n".join(block.decode_contents() for block in tweet_texts)

    article = soup.find("article")
    if not article:
        return ""
    for selector in _CHROME_SELECTORS:
        for tag in article.select(selector):
            tag.decompose()
    return article.decode_contents()


async def render_article_page(
    session: BrowserSession,
    url: str,
    cookies: Optional[Sequence[Dict[str, Any]]] = None,
) -> str:
    """Navigate to an article in a fresh browser context and return its HTML."""
    config = session.config
    try:
        context = await session.browser.new_context(user_agent=config.user_agent)
    except PlaywrightError as exc:
        raise ScrapeError(f"Could not open a browser context: {exc}") from exc
    try:
        if cookies:
            await context.add_cookies(_normalize_cookies(cookies))
        page = await context.new_page()
        page.set_default_navigation_timeout(config.navigation_timeout * 1000)
        logger.info("Loading %s", url)
        await page.goto(url, wait_until="domcontentloaded")
        await page.wait_for_selector("article", timeout=config.selector_timeout * 1000)
        return await page.content()
    except PlaywrightTimeoutError as exc:
        raise ScrapeError(f"Timed out waiting for article at {url}") from exc
    except PlaywrightError as exc:
        raise ScrapeError(f"Browser failed to load {url}: {exc}") from exc
    finally:
        await context.close()


async def scrape_article(
    session: BrowserSession,
    url: str,
    cookies: Optional[Sequence[Dict[str, Any]]] = None,
) -> Article:
    page_html = await render_article_page(session, url, cookies)
    logger.debug("Extracting article content")
    metadata = extract_metadata(page_html)
    article_html = select_article_html(page_html)
    return parse_article_page(article_html, url, metadata)
