"""
Text normalization for titles and artist names taken from filenames.

Only ASCII letters, ASCII digits, Hangul syllables, apostrophes and single
spaces survive. Everything else becomes a space, runs of spaces collapse and
the result is trimmed.
"""

import re

_DISALLOWED = re.compile(r"[^A-Za-z0-9가-힣' ]")
_SPACES = re.compile(r" +")


def normalize_text(text: str) -> str:
    """
    Normalize a title or artist segment.

    Total and idempotent: normalize_text(normalize_text(x)) == normalize_text(x).

    Examples:
        >>> normalize_text("My_Song")
        'My Song'
        >>> normalize_text("  (Live)  ver.2 ")
        'Live ver 2'
    """
    text = text.replace("_", " ")
    text = _DISALLOWED.sub(" ", text)
    text = _SPACES.sub(" ", text)
    return text.strip(" ")
