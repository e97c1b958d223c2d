from dataclasses import dataclass
from email import message_from_bytes, policy
from email.headerregistry import Address
from email.message import EmailMessage
from typing import Optional


class EmailParseError(Exception):
    """Raised when raw message bytes cannot be turned into an InboundEmail."""


@dataclass(frozen=True)
class InboundEmail:
    subject: Optional[str] = None
    from_name: Optional[str] = None
    from_address: Optional[str] = None
    text: Optional[str] = None
    html: Optional[str] = None

    @property
    def body(self) -> str:
        # Both extractors read the HTML body when there is one.
        return self.html or self.text or ""


def _first_address(message: EmailMessage) -> Optional[Address]:
    header = message.get("From")
    for address in getattr(header, "addresses", None) or ():
        # An empty group such as "From: ;" renders as "<>".
        if address.addr_spec not in ("", "<>"):
            return address
    return None


def _first_body(message: EmailMessage, content_type: str) -> Optional[str]:
    for part in message.walk():
        if part.is_multipart():
            continue
        if part.get_content_disposition() == "attachment":
            continue
        if part.get_content_type() != content_type:
            continue
        try:
            content = part.get_content()
        except LookupError:
            # Unknown charset; decode the raw payload rather than drop the body.
            payload = part.get_payload(decode=True) or b""
            content = payload.decode("utf-8", errors="replace")
        if isinstance(content, bytes):
            charset = part.get_content_charset() or "utf-8"
            content = content.decode(charset, errors="replace")
        if content:
            return content
    return None


def parse_raw_email(raw: bytes) -> InboundEmail:
    if not raw:
        raise EmailParseError("empty message")

    try:
        message = message_from_bytes(raw, policy=policy.default)
        sender = _first_address(message)
        subject = message.get("Subject")
        subject = str(subject) if subject else None
        text = _first_body(message, "text/plain")
        html = _first_body(message, "text/html")
    except Exception as exc:
        # Malformed headers surface as arbitrary errors from the stdlib parser.
        raise EmailParseError(f"unable to parse message: {exc!r}") from exc

    return InboundEmail(
        subject=subject,
        from_name=sender.display_name if sender else None,
        from_address=sender.addr_spec if sender else None,
        text=text,
        html=html,
    )
