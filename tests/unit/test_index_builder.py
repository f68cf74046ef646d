"""Unit tests for search index construction."""

from mailbox_search.search import (
    MAX_SEARCH_INDEX_LENGTH,
    DigestHasher,
    NormalizingHasher,
    build_search_index,
    extract_raw_words,
    pack_tokens,
)


class TestExtractRawWords:
    def test_sender_verbatim_then_subject_then_body(self) -> None:
        words = extract_raw_words(
            email_from="Alice@Example.com",
            subject="Re: Hello",
            body="hello again, Alice@Example.com",
        )

        assert words == ["Alice@Example.com", "re", "hello", "again", "alice@example.com"]

    def test_first_occurrence_order(self) -> None:
        assert extract_raw_words(subject="b a", body="c a b d") == ["b", "a", "c", "d"]

    def test_missing_fields(self) -> None:
        assert extract_raw_words() == []
        assert extract_raw_words(email_from="", subject=None, body="x") == ["x"]


class TestPackTokens:
    def test_joins_with_single_spaces(self) -> None:
        assert pack_tokens(["a", "bb", "ccc"]) == "a bb ccc"

    def test_exact_budget_fits(self) -> None:
        tokens = [f"{i:02d}" + "x" * 97 for i in range(50)]

        packed = pack_tokens(tokens, max_length=5000)

        assert packed.split(" ") == tokens
        assert len(packed) == 4999

    def test_stream_of_5001_drops_overflowing_token(self) -> None:
        tokens = [f"{i:02d}" + "x" * 97 for i in range(49)] + ["y" * 100]
        assert sum(len(t) + 1 for t in tokens) == 5001

        packed = pack_tokens(tokens, max_length=5000)

        assert len(packed) <= 5000
        assert packed.split(" ") == tokens[:-1]
        assert "y" not in packed

    def test_stops_at_first_overflow_even_if_later_tokens_fit(self) -> None:
        assert pack_tokens(["aaaa", "bbbbbbbb", "c"], max_length=8) == "aaaa"

    def test_empty(self) -> None:
        assert pack_tokens([]) == ""


class TestBuildSearchIndex:
    def test_hashed_tokens_precede_raw_tokens(self) -> None:
        index = build_search_index(
            NormalizingHasher(),
            email_from="alice@example.com",
            subject="Greetings",
            body="Hello World, this is a test.",
        )

        hashed = "a alice@example.com example.com greetings hello is test this world"
        raw = "alice@example.com greetings hello world this is a test"
        assert index == f"{hashed} {raw}"

    def test_display_name_sender_keeps_hashed_tokens_unique(self) -> None:
        hasher = NormalizingHasher()
        fields = {"email_from": "Alice <alice@x.com>", "subject": "Hi Alice", "body": "alice"}

        hashed = hasher.hash_email(**fields)
        segment = build_search_index(hasher, **fields).split(" ")[: len(hashed)]

        assert segment == hashed
        assert len(set(segment)) == len(segment)
        assert all(" " not in token for token in hashed)
        assert "x.com>" not in hashed

    def test_idempotent(self) -> None:
        kwargs = {"email_from": "bob@example.com", "subject": "Status", "body": "All good here"}

        first = build_search_index(NormalizingHasher(), **kwargs)
        second = build_search_index(NormalizingHasher(), **kwargs)

        assert first == second

    def test_digest_segment_then_raw_words(self) -> None:
        hasher = DigestHasher("secret")

        index = build_search_index(hasher, body="hello world")

        assert index.split(" ") == [*hasher.hash_email(body="hello world"), "hello", "world"]

    def test_long_input_is_bounded(self) -> None:
        body = " ".join(f"word{i:05d}" for i in range(2000))

        index = build_search_index(NormalizingHasher(), subject="Report", body=body)

        tokens = index.split(" ")
        assert len(index) <= MAX_SEARCH_INDEX_LENGTH
        assert tokens[:3] == ["report", "word00000", "word00001"]
        # the raw segment never made it into the budget
        assert tokens.count("report") == 1

    def test_custom_budget(self) -> None:
        index = build_search_index(NormalizingHasher(), body="alpha beta gamma", max_length=12)

        assert index == "alpha beta"
