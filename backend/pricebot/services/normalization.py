"""
Text normalization for recognized receipts.
"""

import re

WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """
    Collapse every run of whitespace (newlines included) into one space and trim.

    normalize_text(normalize_text(x)) == normalize_text(x)
    """
    if not text:
        return ""
    return WHITESPACE_RE.sub(" ", text).strip()
