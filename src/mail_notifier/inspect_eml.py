from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from mail_notifier.config import get_settings
from mail_notifier.services.email_parser import EmailParseError, parse_raw_email
from mail_notifier.services.forward_parser import extract_forward_headers
from mail_notifier.services.logging_config import configure_logging
from mail_notifier.services.telegram_client import TelegramClient
from mail_notifier.services.transaction_parser import extract_transaction_fields
from mail_notifier.webhooks.email_handler import handle_inbound_email


def inspect(raw: bytes) -> dict[str, Any]:
    email = parse_raw_email(raw)
    return {
        "forwarded": extract_forward_headers(email.body).as_dict(),
        "transaction": asdict(extract_transaction_fields(email.body)),
    }


async def _send(raw: bytes) -> dict[str, Any]:
    settings = get_settings()
    # stdout carries the JSON result.
    configure_logging(settings.log_level, stream=sys.stderr)
    client = TelegramClient(
        settings.telegram_bot_token,
        api_base=settings.telegram_api_base,
        retry_max_attempts=settings.api_retry_max_attempts,
        retry_base_delay_seconds=settings.api_retry_base_delay_seconds,
        retry_max_delay_seconds=settings.api_retry_max_delay_seconds,
    )
    return await handle_inbound_email(raw, settings, client)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Extract transaction details from a saved .eml file.")
    parser.add_argument("path", type=Path, help="Path to the .eml file.")
    parser.add_argument("--send", action="store_true", help="Also deliver the notification to Telegram.")
    args = parser.parse_args(argv)

    if not args.path.is_file():
        print(f"Error: could not find email file at {args.path}", file=sys.stderr)
        return 1

    raw = args.path.read_bytes()
    try:
        payload = inspect(raw)
    except EmailParseError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.send:
        payload["delivery"] = asyncio.run(_send(raw))
    print(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))

    if payload.get("delivery", {}).get("status") == "failed":
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
