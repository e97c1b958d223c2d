import re
from dataclasses import dataclass, fields

from mail_notifier.services.markup import strip_all_tags

NOT_FOUND = "N/A"

# Order matters: the notification lists fields in this order.
TRANSACTION_LABELS = (
    ("Nomor Customer", "nomor_customer"),
    ("Nomor Kartu", "nomor_kartu"),
    ("Merchant / ATM", "merchant"),
    ("Jenis Transaksi", "jenis_transaksi"),
    ("Otentikasi", "otentikasi"),
    ("Pada Tanggal", "pada_tanggal"),
    ("Sejumlah", "sejumlah"),
)


@dataclass(frozen=True)
class TransactionFields:
    nomor_customer: str = NOT_FOUND
    nomor_kartu: str = NOT_FOUND
    merchant: str = NOT_FOUND
    jenis_transaksi: str = NOT_FOUND
    otentikasi: str = NOT_FOUND
    pada_tanggal: str = NOT_FOUND
    sejumlah: str = NOT_FOUND

    def found_count(self) -> int:
        return sum(1 for item in fields(self) if getattr(self, item.name) != NOT_FOUND)


def _label_pattern(label: str) -> re.Pattern[str]:
    # <td>Label</td> ... <td>:</td> ... <td><span>Value</span></td>
    return re.compile(
        rf"{re.escape(label)}\s*</td>.*?<td[^>]*>.*?</td>.*?<td[^>]*>"
        r"(?:<span>)?(?P<value>.*?)(?:</span>)?(?:</td>|\Z)",
        re.IGNORECASE | re.DOTALL,
    )


_LABEL_PATTERNS = tuple((field_name, _label_pattern(label)) for label, field_name in TRANSACTION_LABELS)


def _extract_value(html: str, pattern: re.Pattern[str]) -> str:
    match = pattern.search(html)
    if not match:
        return NOT_FOUND
    return strip_all_tags(match.group("value")) or NOT_FOUND


def extract_transaction_fields(html: str | None) -> TransactionFields:
    """Pull the labelled values out of a bank notification's HTML table.

    Each label is searched from the start of the document, so the leftmost
    occurrence wins and a missing label never shifts the others. Fields that
    cannot be found keep the ``"N/A"`` sentinel.
    """
    if not html:
        return TransactionFields()

    values = {field_name: _extract_value(html, pattern) for field_name, pattern in _LABEL_PATTERNS}
    return TransactionFields(**values)
