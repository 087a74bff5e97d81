"""Tests for output bundle layout and end-to-end orchestration."""

import asyncio

import pytest

from clipmd import archiver
from clipmd.config import ScrapeConfig
from clipmd.errors import OutputError
from clipmd.models import Article, ArticleMetadata, MediaItem

IMAGE_URL = "https://pbs.twimg.com/media/one.jpg"


def _article():
    return Article(
        metadata=ArticleMetadata(
            title="Building Agents",
            author="akoratana",
            author_url="https://x.com/akoratana",
            date="2024-05-01T12:00:00.000Z",
            url="https://x.com/akoratana/article/123",
        ),
        content=f"Intro\n\n![diagram]({IMAGE_URL})",
        media=[MediaItem(url=IMAGE_URL, type="image", alt="diagram")],
    )


def test_write_bundle_without_media(tmp_path):
    config = ScrapeConfig(output_root=tmp_path, download_media=False)

    first = archiver.write_bundle(_article(), config)
    second = archiver.write_bundle(_article(), config)

    assert first == tmp_path / "building-agents" / "index.md"
    assert second == tmp_path / "building-agents-1" / "index.md"
    text = first.read_text(encoding="utf-8")
    assert text.startswith("---\n")
    assert IMAGE_URL in text


def test_write_bundle_rewrites_downloaded_media(tmp_path, monkeypatch):
    def fake_download(media, output_dir):
        return [
            MediaItem(url=item.url, type=item.type, alt=item.alt, local_path="./media/1.jpg")
            for item in media
        ]

    monkeypatch.setattr(archiver, "download_media", fake_download)
    config = ScrapeConfig(output_root=tmp_path)

    output_path = archiver.write_bundle(_article(), config)

    text = output_path.read_text(encoding="utf-8")
    assert IMAGE_URL not in text
    assert "![diagram](./media/1.jpg)" in text


class FakeBrowserSession:
    instances = []

    def __init__(self, config):
        self.config = config
        self.closed = False
        FakeBrowserSession.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True


def test_archive_article(tmp_path, monkeypatch):
    async def fake_scrape(session, url, cookies):
        assert cookies == [{"name": "ct0", "value": "1"}]
        return _article()

    FakeBrowserSession.instances = []
    monkeypatch.setattr(archiver, "BrowserSession", FakeBrowserSession)
    monkeypatch.setattr(archiver, "scrape_article", fake_scrape)
    config = ScrapeConfig(output_root=tmp_path, download_media=False)

    result = asyncio.run(
        archiver.archive_article(
            "https://x.com/akoratana/article/123", config, [{"name": "ct0", "value": "1"}]
        )
    )

    assert result.output_path.exists()
    assert result.article.metadata.title == "Building Agents"
    assert FakeBrowserSession.instances[0].closed


def test_archive_article_closes_session_on_error(tmp_path, monkeypatch):
    async def failing_scrape(session, url, cookies):
        raise RuntimeError("boom")

    FakeBrowserSession.instances = []
    monkeypatch.setattr(archiver, "BrowserSession", FakeBrowserSession)
    monkeypatch.setattr(archiver, "scrape_article", failing_scrape)

    with pytest.raises(RuntimeError):
        asyncio.run(
            archiver.archive_article("https://x.com/a/article/1", ScrapeConfig(output_root=tmp_path))
        )
    assert FakeBrowserSession.instances[0].closed
    assert list(tmp_path.iterdir()) == []


def test_write_bundle_reports_unwritable_output(tmp_path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("", encoding="utf-8")
    config = ScrapeConfig(output_root=blocker, download_media=False)

    with pytest.raises(OutputError):
        archiver.write_bundle(_article(), config)
