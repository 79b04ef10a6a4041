"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def grants_page_html() -> str:
    return _read_fixture("grants_post.html")


@pytest.fixture
def grants_selection_html() -> str:
    return _read_fixture("grants_selection.html")


@pytest.fixture
def minimal_page_html() -> str:
    return _read_fixture("minimal_page.html")


@pytest.fixture
def options_path(tmp_path: Path) -> Path:
    return tmp_path / "tanaclip" / "options.yaml"
