"""Tests for argument parsing and CLI error handling."""

from pathlib import Path

import pytest
from playwright.async_api import Error as PlaywrightError

from clipmd import archiver, cli
from clipmd.errors import ScrapeError
from clipmd.models import Article, ArticleMetadata


def test_parse_args_defaults():
    args = cli.parse_args(["https://x.com/a/article/1"])
    assert args.url == "https://x.com/a/article/1"
    assert args.output == Path("articles")
    assert not args.no_media
    assert args.cookies is None
    assert args.timeout == 60.0


def test_build_config():
    args = cli.parse_args(
        ["https://x.com/a/article/1", "-o", "out", "--no-media", "--no-headless", "--timeout", "5"]
    )
    config = cli.build_config(args)
    assert config.output_root == Path("out").resolve()
    assert config.download_media is False
    assert config.headless is False
    assert config.navigation_timeout == 5.0


def test_invalid_url_exits(monkeypatch):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["https://example.com/not-x"])
    assert excinfo.value.code == 1


def test_scrape_error_exits(monkeypatch, tmp_path):
    async def failing_archive(url, config, cookies):
        raise ScrapeError("Timed out waiting for article")

    monkeypatch.delenv("X_AUTH_COOKIES", raising=False)
    monkeypatch.setenv("CLIPMD_CONFIG_DIR", str(tmp_path))
    monkeypatch.setattr(cli, "archive_article", failing_archive)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["https://x.com/a/article/1", "-o", str(tmp_path)])
    assert excinfo.value.code == 1


class MissingBrowserSession:
    def __init__(self, config):
        self.config = config

    async def __aenter__(self):
        raise PlaywrightError("Executable doesn't exist at /ms-playwright/chromium")

    async def __aexit__(self, *exc_info):
        pass


def test_browser_error_exits(monkeypatch, tmp_path):
    monkeypatch.delenv("X_AUTH_COOKIES", raising=False)
    monkeypatch.setenv("CLIPMD_CONFIG_DIR", str(tmp_path))
    monkeypatch.setattr(archiver, "BrowserSession", MissingBrowserSession)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["https://x.com/a/article/1", "-o", str(tmp_path)])
    assert excinfo.value.code == 1


def test_output_error_exits(monkeypatch, tmp_path):
    async def unwritable_archive(url, config, cookies):
        raise PermissionError(13, "Permission denied", str(tmp_path))

    monkeypatch.delenv("X_AUTH_COOKIES", raising=False)
    monkeypatch.setenv("CLIPMD_CONFIG_DIR", str(tmp_path))
    monkeypatch.setattr(cli, "archive_article", unwritable_archive)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["https://x.com/a/article/1", "-o", str(tmp_path)])
    assert excinfo.value.code == 1


def test_unwritable_output_root_exits(monkeypatch, tmp_path):
    async def fake_scrape(session, url, cookies):
        return Article(
            metadata=ArticleMetadata(
                title="Post", author="a", author_url="", date="2024-01-01", url=url
            ),
            content="Body",
        )

    class OpenSession:
        def __init__(self, config):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            pass

    blocker = tmp_path / "not-a-directory"
    blocker.write_text("", encoding="utf-8")
    monkeypatch.delenv("X_AUTH_COOKIES", raising=False)
    monkeypatch.setenv("CLIPMD_CONFIG_DIR", str(tmp_path))
    monkeypatch.setattr(archiver, "BrowserSession", OpenSession)
    monkeypatch.setattr(archiver, "scrape_article", fake_scrape)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["https://x.com/a/article/1", "-o", str(blocker), "--no-media"])
    assert excinfo.value.code == 1
