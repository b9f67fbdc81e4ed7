"""Shared test fixtures."""

from pathlib import Path

import pytest

DATA_DIR = Path(__file__).parent / "data"


def xmltv(body: str) -> str:
    """Wrap channel/programme markup in a <tv> document."""
    return f'<?xml version="1.0" encoding="UTF-8"?><tv>{body}</tv>'


@pytest.fixture
def epg_path() -> Path:
    return DATA_DIR / "epg.xml"


@pytest.fixture
def epg_text(epg_path: Path) -> str:
    return epg_path.read_text(encoding="utf-8")


@pytest.fixture
def epg_bytes(epg_path: Path) -> bytes:
    return epg_path.read_bytes()


@pytest.fixture
def make_document():
    return xmltv
