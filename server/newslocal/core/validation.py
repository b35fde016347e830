"""Input validation and sanitization for search text."""

import re
import unicodedata

# Control characters to remove (except newline, tab)
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# Multiple whitespace pattern
MULTI_WHITESPACE_PATTERN = re.compile(r"\s+")

# Comma-separated id lists from query strings (categories=tech,science)
ID_LIST_SEPARATOR = ","


def normalize_text(text: str | None) -> str | None:
    """
    Normalize free text by:
    - Normalizing Unicode to NFC form
    - Removing control characters
    - Stripping and collapsing whitespace

    Returns None if input is None.
    """
    if text is None:
        return None

    # Normalize Unicode to NFC (canonical composition)
    text = unicodedata.normalize("NFC", text)

    # Remove control characters (except newline, tab)
    text = CONTROL_CHAR_PATTERN.sub("", text)

    # Strip leading/trailing whitespace
    text = text.strip()

    # Collapse multiple whitespace to single space
    return MULTI_WHITESPACE_PATTERN.sub(" ", text)


def normalize_single_line(text: str | None) -> str | None:
    """
    Normalize text for single-line fields such as search queries.
    """
    if text is None:
        return None

    # Remove all newlines
    text = text.replace("\n", " ").replace("\r", " ")

    return normalize_text(text)


def parse_id_list(raw: str | None) -> list[str] | None:
    """Split a comma-separated id list, dropping blanks.

    Returns None when nothing usable was supplied so callers can tell
    "no filter" apart from a filter value.
    """
    if raw is None:
        return None
    ids = [part.strip() for part in raw.split(ID_LIST_SEPARATOR)]
    # "tech,," and " , " leave empty entries behind
    ids = [i for i in ids if i]
    return ids or None
