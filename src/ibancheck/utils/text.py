from __future__ import annotations

import re

_WS_RE = re.compile(r"\s+")


def strip_whitespace(s: str) -> str:
    """Remove every whitespace character, including interior ones."""
    return _WS_RE.sub("", s or "")


def normalize_iban_text(s: str) -> str:
    """Normalize IBAN-like string: remove whitespace, upper-case."""
    return strip_whitespace(s).upper()


def group_blocks(s: str, size: int = 4, sep: str = " ") -> str:
    if size <= 0:
        raise ValueError("block size must be positive")
    return sep.join(s[i:i + size] for i in range(0, len(s), size))


def is_ascii_alpha(ch: str) -> bool:
    return "A" <= ch <= "Z" or "a" <= ch <= "z"


def is_ascii_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def is_ascii_alnum(ch: str) -> bool:
    return is_ascii_alpha(ch) or is_ascii_digit(ch)
