import re
from dataclasses import dataclass
from typing import Optional

from mail_notifier.services.markup import decode_basic_entities, strip_inline_tags

# A header value ends at a line break, a <br>, a closing </div> or the end of input.
_VALUE_END = r"(?:\r?\n|<br\s*/?>|</div>|\Z)"


def _header_pattern(*names: str) -> re.Pattern[str]:
    return re.compile(
        rf"(?<![\w-])(?:{'|'.join(names)}):[ \t]*(?P<value>.*?){_VALUE_END}",
        re.IGNORECASE,
    )


FROM_RE = _header_pattern("Dari", "From")
DATE_RE = _header_pattern("Date", "Tanggal", "Sent")
SUBJECT_RE = _header_pattern("Subject")


@dataclass(frozen=True)
class ForwardHeaders:
    from_: Optional[str] = None
    subject: Optional[str] = None
    date: Optional[str] = None

    @property
    def found(self) -> bool:
        return any(value is not None for value in (self.from_, self.subject, self.date))

    def as_dict(self) -> dict[str, str]:
        values = {"from": self.from_, "subject": self.subject, "date": self.date}
        return {key: value for key, value in values.items() if value is not None}


def _extract_header(content: str, pattern: re.Pattern[str]) -> Optional[str]:
    match = pattern.search(content)
    if not match:
        return None

    value = strip_inline_tags(match.group("value").strip())
    value = decode_basic_entities(value).strip()
    return value or None


def extract_forward_headers(content: str | None) -> ForwardHeaders:
    """Recover From/Date/Subject of the original message from a forwarded body.

    Works on either the plain-text or the HTML body. Only the well-known
    inline tags are removed from a value, so an address such as
    ``<jane@example.com>`` is kept.
    """
    if not content:
        return ForwardHeaders()

    return ForwardHeaders(
        from_=_extract_header(content, FROM_RE),
        subject=_extract_header(content, SUBJECT_RE),
        date=_extract_header(content, DATE_RE),
    )
