"""
Tests for the line-aware character chunker.
"""
import math

import pytest

from paper_digest.utils import chunk_text


SAMPLES = [
    "",
    "a",
    "short text",
    "line one\nline two\nline three\n" * 40,
    "no line breaks at all " * 200,
    "\n" * 50,
    "x" * 999 + "\n" + "y" * 1001,
    "Title - PMC\n\nAbstract\n" + ("Sentence number one. " * 30 + "\n") * 25,
]


@pytest.mark.parametrize("target", [1, 7, 64, 100, 1000])
def test_chunks_reassemble_to_original(target):
    for text in SAMPLES:
        chunks = chunk_text(text, target)
        assert "".join(chunks) == text
        assert all(chunks), "Every chunk must be non-empty"
        assert all(len(c) <= target for c in chunks)


@pytest.mark.parametrize("target", [5, 50, 333])
def test_chunk_count_bound(target):
    for text in SAMPLES:
        chunks = chunk_text(text, target)
        assert len(chunks) <= math.ceil(len(text) / (target * 0.6)) + 1


def test_empty_text_yields_no_chunks():
    assert chunk_text("", 100) == []


def test_short_text_is_single_chunk():
    assert chunk_text("hello\nworld", 100) == ["hello\nworld"]


def test_breaks_at_line_break_past_sixty_percent():
    text = "A" * 70 + "\n" + "B" * 60
    chunks = chunk_text(text, 100)

    assert chunks == ["A" * 70, "\n" + "B" * 60]


def test_line_break_at_window_edge_is_used():
    text = "A" * 100 + "\n" + "B" * 50
    chunks = chunk_text(text, 100)

    assert chunks[0] == "A" * 100
    assert chunks[1].startswith("\n")


def test_early_line_break_is_ignored():
    # The only line break sits before the 60% mark, so the window is hard-cut
    text = "A" * 30 + "\n" + "B" * 200
    chunks = chunk_text(text, 100)

    assert chunks[0] == text[:100]
    assert "".join(chunks) == text


def test_latest_qualifying_line_break_wins():
    text = "A" * 65 + "\n" + "B" * 20 + "\n" + "C" * 100
    chunks = chunk_text(text, 100)

    assert chunks[0] == "A" * 65 + "\n" + "B" * 20


def test_non_positive_target_rejected():
    with pytest.raises(ValueError):
        chunk_text("abc", 0)
