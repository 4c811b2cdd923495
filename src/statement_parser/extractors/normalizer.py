"""
OCR text normalization.
"""

import re

# Anything outside word characters, whitespace and common statement
# punctuation is OCR noise
_DISALLOWED_CHARS = re.compile(r"[^\w\s.,\-$()\[\]/\\:;@]")
_HORIZONTAL_SPACE = re.compile(r"[^\S\n]+")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(raw_text: str) -> list[str]:
    """Split text on any line ending, keeping column spacing intact."""
    return _LINE_BREAK.split(raw_text)


def normalize_text(raw_text: str) -> str:
    """
    Clean raw OCR text.

    - Line endings become ``\\n``
    - Disallowed characters become spaces
    - Horizontal whitespace collapses to a single space per line
    - Blank lines are dropped, surrounding whitespace trimmed

    Line structure is preserved so that transactions can be scanned line by
    line.
    """
    lines = []
    for line in split_lines(raw_text):
        line = _DISALLOWED_CHARS.sub(" ", line)
        line = _HORIZONTAL_SPACE.sub(" ", line).strip()
        if line:
            lines.append(line)
    return "\n".join(lines)
