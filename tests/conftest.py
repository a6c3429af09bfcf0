"""
Shared test fixtures.

Provides: text builders for paragraphs of known size, chunk builders, and
isolation from real model credentials and the on-disk project store.
"""

from typing import Callable, Optional, Tuple

import pytest

from bulkquery import config, project_store
from bulkquery.domain.chunking import make_chunk
from bulkquery.schemas import Chunk


@pytest.fixture(autouse=True)
def no_model(monkeypatch):
    """Keep tests offline: no API key, no configured oracle."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr(config, "CHUNK_ORACLE", "none")


@pytest.fixture(autouse=True)
def store_path(tmp_path, monkeypatch):
    path = tmp_path / "projects.json"
    monkeypatch.setattr(project_store, "PROJECT_STORE_PATH", str(path))
    return path


def _paragraph(words: int, lines: int = 1, tag: str = "w") -> str:
    tokens = [f"{tag}{i}" for i in range(1, words + 1)]
    per_line = -(-words // lines)
    rows = [" ".join(tokens[i:i + per_line]) for i in range(0, words, per_line)]
    assert len(rows) == lines, "choose a word count that fills every line"
    return "\n".join(rows)


@pytest.fixture
def paragraph() -> Callable[..., str]:
    """Build a paragraph of `words` distinct tokens spread over `lines` lines."""
    return _paragraph


@pytest.fixture
def chunk() -> Callable[..., Chunk]:
    def _chunk(text: str, lines: Tuple[int, int] = (1, 1), title: str = "Topic", ctx: Optional[str] = None) -> Chunk:
        return make_chunk(text, lines, title=title, ctx=ctx)

    return _chunk


@pytest.fixture
def three_paragraphs(paragraph) -> str:
    """60, 30 and 80 words over 3, 2 and 4 lines, separated by single blank lines."""
    return "\n\n".join([
        paragraph(60, 3, tag="a"),
        paragraph(30, 2, tag="b"),
        paragraph(80, 4, tag="c"),
    ])
