"""
Text Utilities

Input cleanup applied to everything a user types before it is classified
or sent to the search provider.
"""

import html
import re

_TAG_PATTERN = re.compile(r"<[^>]*>")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def strip_html(text: str) -> str:
    """Remove HTML tags and decode entities."""
    return html.unescape(_TAG_PATTERN.sub(" ", text or ""))


def sanitize_input(text: str) -> str:
    """Strip markup and collapse whitespace."""
    return _WHITESPACE_PATTERN.sub(" ", strip_html(text)).strip()


def has_content(text: str) -> bool:
    """True when the text holds at least one letter or digit."""
    return any(ch.isalnum() for ch in text or "")
