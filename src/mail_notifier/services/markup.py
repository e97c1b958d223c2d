import re

_ANY_TAG_RE = re.compile(r"<[^>]*>")
# Only well-known inline/structural tags; bracketed addresses like <user@example.com> survive.
_INLINE_TAG_RE = re.compile(
    r"</?(?:br|div|span|p|a|b|i|u|strong|em)(?:\s[^>]*)?/?>",
    re.IGNORECASE,
)

_BASIC_ENTITIES = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&nbsp;", " "),
)


def strip_all_tags(markup: str) -> str:
    return _ANY_TAG_RE.sub("", markup or "").strip()


def strip_inline_tags(markup: str) -> str:
    return _INLINE_TAG_RE.sub("", markup or "").strip()


def decode_basic_entities(text: str) -> str:
    for entity, replacement in _BASIC_ENTITIES:
        text = text.replace(entity, replacement)
    return text
