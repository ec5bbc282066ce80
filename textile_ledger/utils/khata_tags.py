"""
Helpers for the ``khata:<id>`` tag convention.

Entries are associated with a khata (account book) by embedding the token
``khata:<id>`` in their free-text ``reference`` and/or ``notes``. A token only
counts when it is not followed by another digit, so ``khata:1`` never matches
``khata:10``.
"""
import re
from typing import Optional, Set

KHATA_TAG_PREFIX = "khata:"

_KHATA_TAG_RE = re.compile(r"khata:(\d+)")


def format_khata_tag(khata_id: int) -> str:
    return f"{KHATA_TAG_PREFIX}{int(khata_id)}"


def khata_tag_pattern(khata_id: int) -> str:
    """
    Regular expression matching the exact tag for ``khata_id``.

    Kept to the POSIX ERE subset so the same pattern works with SQLite
    (Python ``re``), MySQL 8 ``REGEXP`` and PostgreSQL ``~``.
    """
    return f"{format_khata_tag(khata_id)}([^0-9]|$)"


def has_khata_tag(text: Optional[str], khata_id: int) -> bool:
    if not text:
        return False
    return re.search(khata_tag_pattern(khata_id), text) is not None


def has_any_khata_tag(text: Optional[str]) -> bool:
    return bool(text) and KHATA_TAG_PREFIX in text


def parse_khata_id(text: Optional[str]) -> Optional[int]:
    """Return the id of the first khata tag in ``text``, if any."""
    match = _KHATA_TAG_RE.search(text or "")
    return int(match.group(1)) if match else None


def khata_tag_ids(text: Optional[str]) -> Set[int]:
    return {int(found) for found in _KHATA_TAG_RE.findall(text or "")}


def append_khata_tag(
    text: Optional[str],
    khata_id: int,
    separator: str = "\n",
    max_length: Optional[int] = None
) -> str:
    """
    Append the tag for ``khata_id`` to ``text``.

    With ``max_length`` the text is cut short so the tag always fits.
    """
    tag = format_khata_tag(khata_id)
    text = (text or "").strip()
    if text and max_length is not None:
        text = text[:max(0, max_length - len(separator) - len(tag))].rstrip()
    if not text:
        return tag
    return f"{text}{separator}{tag}"


def clip_text(text: Optional[str], max_length: int) -> Optional[str]:
    if text is None or len(text) <= max_length:
        return text
    return text[:max_length].rstrip()


def extract_party_name(text: Optional[str], prefix: str) -> Optional[str]:
    """
    Pull a party name out of text like ``"Vendor: Ali Traders - thread"`` or
    ``"Customer: Noor Fabrics\\nkhata:1"``.
    """
    if not text:
        return None
    match = re.search(rf"{re.escape(prefix)}:\s*([^\n-]+)", text)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return None
