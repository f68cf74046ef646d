"""Unit tests for message body cleanup."""

from mailbox_search.cleanup import clean_up_text, ensure_cleaned_up_text


def test_strips_html_and_entities() -> None:
    assert clean_up_text("<p>Hello&nbsp;<b>World</b> &amp; friends</p>") == "Hello World & friends"


def test_drops_invisible_elements_and_comments() -> None:
    body = "<html><head><title>x</title></head><style>p {color: red}</style><!-- hidden -->Body</html>"

    assert clean_up_text(body) == "Body"


def test_block_elements_become_line_breaks() -> None:
    assert clean_up_text("one<br>two<div>three</div>") == "one\ntwo\nthree"


def test_removes_quoted_reply() -> None:
    body = (
        "Thanks, that works!\r\n\r\n"
        "On Mon, Jan 1, 2024 at 10:00 AM Bob <bob@example.com> wrote:\r\n"
        "> Did you try restarting?\r\n"
        "> -- Bob\r\n"
    )

    assert clean_up_text(body) == "Thanks, that works!"


def test_removes_forwarding_separators() -> None:
    body = "See below\n---------- Forwarded Message ----------\nOriginal text"

    assert clean_up_text(body) == "See below\n\nOriginal text"


def test_empty_body() -> None:
    assert clean_up_text(None) == ""
    assert clean_up_text("") == ""
    assert clean_up_text("\ufeff   ") == ""


def test_ensure_cleaned_up_text_persists_once(repository, mailbox) -> None:
    conversation = repository.create_conversation(mailbox.id)
    message = repository.add_message(conversation.id, "<p>Hi  there</p>")

    assert ensure_cleaned_up_text(repository, message) == "Hi there"

    stored = repository.get_message(message.id)
    assert stored.cleaned_up_text == "Hi there"

    repository.set_cleaned_up_text(message.id, "edited")
    assert ensure_cleaned_up_text(repository, repository.get_message(message.id)) == "edited"
