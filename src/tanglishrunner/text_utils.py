"""Text helpers shared by the Typist and the Classifier."""

import re

# Tamil Unicode block
TAMIL_RANGE = re.compile(r'[\u0B80-\u0BFF]')

_WHITESPACE_RUN = re.compile(r'\s+')


def normalize(text) -> str:
    """
    Collapse every whitespace run to a single space and trim the ends.

    None and empty input normalize to ''. Idempotent.
    """
    return _WHITESPACE_RUN.sub(' ', text or '').strip()


def contains_tamil_script(text: str) -> bool:
    """True if text contains at least one character from the Tamil block."""
    return bool(TAMIL_RANGE.search(text or ''))


def tamil_char_count(text: str) -> int:
    return len(TAMIL_RANGE.findall(text or ''))


def split_words(text: str) -> list:
    """Split on any whitespace (spaces, tabs, newlines), dropping empties."""
    return (text or '').split()
