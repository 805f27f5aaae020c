"""Utility functions for marginalia."""

import re
import unicodedata


def slugify(text: str) -> str:
    """
    Convert a heading title to a slug usable in node ids.

    - Lowercase
    - Unicode normalize (NFKD), drop combining marks
    - Remove punctuation except spaces and hyphens
    - Collapse whitespace and hyphen runs to a single `-`

    Examples:
        >>> slugify("Parallel transport")
        'parallel-transport'
        >>> slugify("Notes for page 3")
        'notes-for-page-3'
    """
    text = text.lower()
    text = text.replace('–', '-').replace('—', '-').replace('−', '-')

    text = unicodedata.normalize('NFKD', text)
    text = ''.join(c for c in text if not unicodedata.combining(c))

    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'\s+', '-', text)
    text = re.sub(r'-+', '-', text)
    return text.strip('-')


def char_offset_to_line(text: str, offset: int) -> int:
    """
    Convert a character offset to a 1-based line number.
    """
    return text.count("\n", 0, max(0, min(offset, len(text)))) + 1


def line_to_offset(text: str, line: int) -> int:
    """
    Convert a 1-based line number to the offset where that line starts.

    Lines past the end clamp to the start of the last line.
    """
    offset = 0
    for _ in range(line - 1):
        nl = text.find("\n", offset)
        if nl == -1 or nl + 1 == len(text):
            break
        offset = nl + 1
    return offset
