"""Shared pytest fixtures for transcript extractor tests."""

from datetime import datetime, timezone
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def deepseek_html() -> str:
    return (FIXTURES / "deepseek_chat.html").read_text(encoding="utf-8")


@pytest.fixture
def deepseek_page(deepseek_html: str) -> BeautifulSoup:
    """Saved DeepSeek chat: two questions, two answers (one with thinking), one noise turn."""
    return BeautifulSoup(deepseek_html, "lxml")


@pytest.fixture
def plain_page() -> BeautifulSoup:
    """Chat page whose markup matches none of the structural selectors."""
    return BeautifulSoup((FIXTURES / "plain_chat.html").read_text(encoding="utf-8"), "lxml")


@pytest.fixture
def exported_at() -> datetime:
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
