"""Command-line interface for Mailbox Search.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import structlog

from mailbox_search import __version__
from mailbox_search.config import Settings, get_settings
from mailbox_search.exceptions import MailboxSearchError
from mailbox_search.jobs import INDEX_MESSAGE_JOB, JobRecord, build_job_runner
from mailbox_search.search import search_emails_by_keywords
from mailbox_search.store import MailStoreRepository

logger = structlog.get_logger()


def _add_db_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Path to the SQLite mail store (default: settings db_path)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mailbox-search", description="Mailbox Search")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create the mail store schema")
    _add_db_argument(init_parser)

    # Mailbox commands
    mailbox_parser = subparsers.add_parser("mailbox", help="Manage mailboxes")
    mailbox_sub = mailbox_parser.add_subparsers(dest="mailbox_command", required=True)
    create_parser = mailbox_sub.add_parser("create", help="Create a mailbox")
    create_parser.add_argument("name", help="Mailbox display name")
    create_parser.add_argument("--slug", default=None, help="Unique slug (default: from name)")
    _add_db_argument(create_parser)

    # Message commands
    message_parser = subparsers.add_parser("message", help="Store messages")
    message_sub = message_parser.add_subparsers(dest="message_command", required=True)
    add_parser = message_sub.add_parser("add", help="Store a message and index it")
    add_parser.add_argument("--mailbox", type=int, required=True, help="Mailbox ID")
    add_parser.add_argument(
        "--conversation",
        type=int,
        default=None,
        help="Existing conversation ID (default: start a new conversation)",
    )
    add_parser.add_argument("--from", dest="email_from", default=None, help="Sender address")
    add_parser.add_argument("--subject", default=None, help="Conversation subject")
    add_parser.add_argument("--body", default="", help="Message body")
    _add_db_argument(add_parser)

    # Index commands
    index_parser = subparsers.add_parser("index", help="Build message search indexes")
    index_sub = index_parser.add_subparsers(dest="index_command", required=True)
    index_message_parser = index_sub.add_parser("message", help="Index one message")
    index_message_parser.add_argument("message_id", type=int, help="Message ID")
    _add_db_argument(index_message_parser)
    index_mailbox_parser = index_sub.add_parser("mailbox", help="Re-index every message of a mailbox")
    index_mailbox_parser.add_argument("mailbox_id", type=int, help="Mailbox ID")
    _add_db_argument(index_mailbox_parser)

    search_parser = subparsers.add_parser("search", help="Search a mailbox by keywords")
    search_parser.add_argument("mailbox_id", type=int, help="Mailbox ID")
    search_parser.add_argument("keywords", help="Free-text keywords")
    search_parser.add_argument("--limit", type=int, default=25, help="Max results shown")
    _add_db_argument(search_parser)

    return parser


def _open_repository(args: argparse.Namespace, settings: Settings) -> MailStoreRepository:
    db_path: Path = args.db or settings.db_path
    repo = MailStoreRepository(db_path)
    repo.initialize()
    return repo


def _report_jobs(records: list[JobRecord]) -> int:
    failed = [r for r in records if r.state != "succeeded"]
    for record in failed:
        print(f"{record.state.upper()}\t{record.payload}\t{record.error}", file=sys.stderr)
    print(f"Indexed {len(records) - len(failed)} of {len(records)} messages")
    return 1 if failed else 0


def _cmd_init(args: argparse.Namespace, settings: Settings) -> int:
    repo = _open_repository(args, settings)
    print(f"Mail store ready at {repo.db_path}")
    return 0


def _cmd_mailbox_create(args: argparse.Namespace, settings: Settings) -> int:
    repo = _open_repository(args, settings)
    mailbox = repo.create_mailbox(args.name, slug=args.slug)
    print(f"{mailbox.id}\t{mailbox.slug}\t{mailbox.name}")
    return 0


def _cmd_message_add(args: argparse.Namespace, settings: Settings) -> int:
    repo = _open_repository(args, settings)

    if args.conversation is None:
        conversation = repo.create_conversation(
            args.mailbox, email_from=args.email_from, subject=args.subject
        )
    else:
        conversation = repo.get_conversation(args.conversation)
        if conversation is None or conversation.mailbox_id != args.mailbox:
            print(f"Conversation {args.conversation} not found in mailbox {args.mailbox}", file=sys.stderr)
            return 1

    message = repo.add_message(conversation.id, args.body)
    print(f"Stored message {message.id} in conversation {conversation.id}")

    runner = build_job_runner(repo, settings)
    runner.enqueue(INDEX_MESSAGE_JOB, message_id=message.id)
    return _report_jobs(runner.run_pending())


def _cmd_index_message(args: argparse.Namespace, settings: Settings) -> int:
    repo = _open_repository(args, settings)
    runner = build_job_runner(repo, settings)
    runner.enqueue(INDEX_MESSAGE_JOB, message_id=args.message_id)
    return _report_jobs(runner.run_pending())


def _cmd_index_mailbox(args: argparse.Namespace, settings: Settings) -> int:
    repo = _open_repository(args, settings)
    runner = build_job_runner(repo, settings)

    message_ids = repo.list_message_ids(mailbox_id=args.mailbox_id)
    logger.info("reindex_mailbox_started", mailbox_id=args.mailbox_id, message_count=len(message_ids))
    for message_id in message_ids:
        runner.enqueue(INDEX_MESSAGE_JOB, message_id=message_id)
    return _report_jobs(runner.run_pending())


def _cmd_search(args: argparse.Namespace, settings: Settings) -> int:
    repo = _open_repository(args, settings)

    results = search_emails_by_keywords(
        repo,
        args.keywords,
        args.mailbox_id,
        settings=settings,
    )
    for r in results[: args.limit]:
        snippet = " ".join((r.cleaned_up_text or "").split())[:80]
        print(f"{r.conversation_id}\t{r.id}\t{snippet}")

    if not results:
        print("No matching messages")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Mailbox Search CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()

    # Configure logging
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        ),
    )

    logger.debug("mailbox_search_started", version=__version__, debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    handlers = {
        ("init", None): _cmd_init,
        ("mailbox", "create"): _cmd_mailbox_create,
        ("message", "add"): _cmd_message_add,
        ("index", "message"): _cmd_index_message,
        ("index", "mailbox"): _cmd_index_mailbox,
        ("search", None): _cmd_search,
    }
    subcommand = (
        getattr(parsed, "mailbox_command", None)
        or getattr(parsed, "message_command", None)
        or getattr(parsed, "index_command", None)
    )
    handler = handlers.get((parsed.command, subcommand))
    if handler is None:
        logger.error("unknown_command", command=parsed.command)
        return 2

    try:
        return handler(parsed, settings)
    except MailboxSearchError as exc:
        logger.error("command_failed", command=parsed.command, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
