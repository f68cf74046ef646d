"""Unit tests for word tokenization."""

from mailbox_search.search import extract_words


def test_lowercases_and_strips_edge_punctuation() -> None:
    assert extract_words("Hello World, this is a test.") == [
        "hello",
        "world",
        "this",
        "is",
        "a",
        "test",
    ]


def test_keeps_inner_punctuation() -> None:
    assert extract_words("(bob@example.com) can't re-run") == ["bob@example.com", "can't", "re-run"]


def test_drops_empty_pieces_and_keeps_duplicates() -> None:
    assert extract_words("  --  ok\t\nok !!! ") == ["ok", "ok"]


def test_non_ascii_edges_are_stripped() -> None:
    assert extract_words("«café» über") == ["caf", "ber"]


def test_empty_text() -> None:
    assert extract_words("") == []
