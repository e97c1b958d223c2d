import hmac
import logging
from typing import TYPE_CHECKING, Any

import httpx

from mail_notifier.services.email_parser import EmailParseError, parse_raw_email
from mail_notifier.services.forward_parser import extract_forward_headers
from mail_notifier.services.message_formatter import (
    build_notification_message,
    resolve_sender,
    resolve_subject,
)
from mail_notifier.services.transaction_parser import extract_transaction_fields

if TYPE_CHECKING:
    from mail_notifier.config import Settings
    from mail_notifier.services.telegram_client import TelegramClient

logger = logging.getLogger(__name__)


def _response_text(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.text
    return ""


async def handle_inbound_email(
    raw: bytes,
    settings: "Settings",
    telegram_client: "TelegramClient",
) -> dict[str, Any]:
    if not (settings.telegram_bot_token and settings.telegram_chat_id):
        logger.error("Missing Telegram configuration", extra={"event": "telegram_not_configured"})
        return {"status": "skipped", "reason": "telegram_not_configured"}

    try:
        email = parse_raw_email(raw)
    except EmailParseError as exc:
        logger.error(
            "Failed to parse inbound email",
            extra={"event": "email_parse_failed", "error": repr(exc)},
        )
        return {"status": "failed", "reason": "email_parse_error"}

    body = email.body
    forwarded = extract_forward_headers(body)
    fields = extract_transaction_fields(body)

    date = forwarded.date if settings.notify_include_forward_date else None
    message = build_notification_message(
        resolve_sender(forwarded, email),
        resolve_subject(forwarded, email),
        fields,
        date=date,
    )

    try:
        await telegram_client.send_message(
            settings.telegram_chat_id,
            message,
            parse_mode=settings.telegram_parse_mode,
        )
    except Exception as exc:
        logger.error(
            "Failed to deliver Telegram notification",
            extra={
                "event": "telegram_delivery_failed",
                "error": repr(exc),
                "response_text": _response_text(exc),
            },
        )
        return {"status": "failed", "reason": "telegram_delivery_error"}

    result = {
        "status": "ok",
        "fields_found": fields.found_count(),
        "forwarded": forwarded.found,
    }
    logger.info("Processed inbound email", extra={"event": "inbound_email_processed", **result})
    return result


def verify_inbound_request(settings: "Settings", token_header: str) -> bool:
    # In dev, allow unauthenticated posts when no secret is configured.
    if not settings.inbound_webhook_secret:
        return settings.app_env == "dev"
    if not token_header:
        return False
    return hmac.compare_digest(settings.inbound_webhook_secret.encode("utf-8"), token_header.encode("utf-8"))
