"""Utility script to run notification events through the queue consumer."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import anyio

from notifier.application.use_cases.notifications import process_notification_batch
from notifier.config import get_settings
from notifier.infrastructure.channels import build_channel_provider
from notifier.infrastructure.database import SessionLocal, initialize_database
from notifier.infrastructure.notifications import notification_publisher
from notifier.infrastructure.queue import QueuedMessage
from notifier.logging_config import configure_logging


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for batch processing."""

    parser = argparse.ArgumentParser(
        description="Process notification events from a JSON file.",
    )
    parser.add_argument(
        "path",
        type=Path,
        help="JSON file holding one notification event or a list of events",
    )
    parser.add_argument(
        "--no-email",
        action="store_true",
        help="Skip the email channel regardless of configuration.",
    )
    parser.add_argument(
        "--no-push",
        action="store_true",
        help="Skip the push channel regardless of configuration.",
    )
    return parser.parse_args()


def load_messages(path: Path) -> list[QueuedMessage]:
    document = json.loads(path.read_text(encoding="utf-8"))
    events = document if isinstance(document, list) else [document]
    return [QueuedMessage(body=event) for event in events]


async def run(args: argparse.Namespace) -> None:
    settings = get_settings()
    updates = {}
    if args.no_email:
        updates["enable_email_notifications"] = False
    if args.no_push:
        updates["enable_push_notifications"] = False
    if updates:
        settings = settings.model_copy(update=updates)

    messages = load_messages(args.path)
    channels = build_channel_provider(settings)
    try:
        report = await process_notification_batch(
            messages,
            session_factory=SessionLocal,
            publisher=notification_publisher,
            channels=channels,
            settings=settings,
        )
    finally:
        await channels.aclose()

    print(
        "Batch processed:\n"
        f"  Messages: {report.messages}\n"
        f"  Created: {report.created}\n"
        f"  Duplicates: {report.duplicates}\n"
        f"  Filtered: {report.filtered}\n"
        f"  Malformed: {report.malformed}\n"
        f"  Partially failed: {', '.join(report.failed_event_ids) or '-'}"
    )


def main() -> None:
    """Process the events stored in the provided file."""

    args = parse_args()
    if not args.path.is_file():
        raise SystemExit(f"File not found: {args.path}")

    configure_logging(get_settings().log_level.upper())
    initialize_database()
    try:
        anyio.run(run, args)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON in {args.path}: {exc}") from exc


if __name__ == "__main__":
    main()
