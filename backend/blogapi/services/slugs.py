"""Slug derivation for post titles."""

import re
import unicodedata

MAX_SLUG_LENGTH = 255

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def slugify(value: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """
    Convert a title into a lower-case, ASCII, hyphen-separated slug.

    Diacritics are stripped ("Café" → "cafe"), every run of characters that
    are not letters or digits becomes a single hyphen, and leading/trailing
    hyphens are removed. Returns an empty string when nothing usable is left.

    Examples:
        >>> slugify("Hello, World!")
        'hello-world'
        >>> slugify("  Ünïcode   Títle ")
        'unicode-title'
    """
    normalized = unicodedata.normalize("NFKD", value or "")
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    slug = _NON_ALPHANUMERIC.sub("-", ascii_text).strip("-")
    return slug[:max_length].rstrip("-")
