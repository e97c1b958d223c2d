import re
from typing import Optional

from mail_notifier.services.email_parser import InboundEmail
from mail_notifier.services.forward_parser import ForwardHeaders
from mail_notifier.services.transaction_parser import TRANSACTION_LABELS, TransactionFields

UNKNOWN_SENDER = "(Unknown Sender)"
NO_SUBJECT = "(No Subject)"

# Telegram legacy Markdown only treats these as formatting characters.
_MARKDOWN_SPECIAL_RE = re.compile(r"([_*`\[])")


def escape_markdown(text: str) -> str:
    return _MARKDOWN_SPECIAL_RE.sub(r"\\\1", text or "")


def resolve_sender(forwarded: ForwardHeaders, email: InboundEmail) -> str:
    if forwarded.from_:
        return forwarded.from_
    if email.from_address:
        return f"{email.from_name or ''} <{email.from_address}>".strip()
    return UNKNOWN_SENDER


def resolve_subject(forwarded: ForwardHeaders, email: InboundEmail) -> str:
    return forwarded.subject or email.subject or NO_SUBJECT


def build_notification_message(
    sender: str,
    subject: str,
    fields: TransactionFields,
    *,
    date: Optional[str] = None,
) -> str:
    lines = [
        f"📧 *{escape_markdown(sender)}*",
        "",
        f"*Subject:* {escape_markdown(subject)}",
    ]
    if date:
        lines.append(f"*Date:* {escape_markdown(date)}")
    lines.extend(["", "*Detail Transaksi:*"])
    for label, field_name in TRANSACTION_LABELS:
        lines.append(f"*{label}:* {escape_markdown(getattr(fields, field_name))}")
    return "\n".join(lines)
