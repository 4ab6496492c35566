from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ibancheck.utils.text import (
    is_ascii_alnum,
    is_ascii_alpha,
    is_ascii_digit,
    normalize_iban_text,
    strip_whitespace,
)

from .errors import ParseError, ParseFailure
from .iban import IBAN
from .registry import MAX_IBAN_LENGTH, MIN_IBAN_LENGTH

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseResult:
    """Outcome of `parse()`: exactly one of `iban` / `error` is set."""

    iban: Optional[IBAN] = None
    error: Optional[ParseFailure] = None

    def __post_init__(self) -> None:
        if (self.iban is None) == (self.error is None):
            raise ValueError("ParseResult needs exactly one of iban or error")

    @property
    def ok(self) -> bool:
        return self.iban is not None

    def unwrap(self) -> IBAN:
        if self.error is not None:
            raise ParseError(self.error)
        assert self.iban is not None
        return self.iban


def normalize(raw: str) -> str:
    """Remove all whitespace and upper-case the rest."""
    return normalize_iban_text(raw)


def _reject(raw: str, reason: str) -> ParseResult:
    log.debug("IBAN rejected: %s | input=%r", reason, raw)
    return ParseResult(error=ParseFailure(original_input=raw, reason=reason))


def parse(raw: str) -> ParseResult:
    """
    Decompose `raw` into country code, check digits and BBAN.

    Only structure is checked here; length per country and the MOD 97-10
    checksum are left to `validate()`.
    """
    if not isinstance(raw, str):
        raise TypeError(f"IBAN input must be str, not {type(raw).__name__}")

    compact = strip_whitespace(raw)
    # str.upper() would map some non-ASCII letters onto ASCII ones (e.g. 'ß' -> 'SS')
    if not compact.isascii():
        return _reject(raw, "contains non-ASCII characters")
    s = compact.upper()

    if len(s) < MIN_IBAN_LENGTH:
        return _reject(raw, f"too short ({len(s)} < {MIN_IBAN_LENGTH} characters)")
    if len(s) > MAX_IBAN_LENGTH:
        return _reject(raw, f"too long ({len(s)} > {MAX_IBAN_LENGTH} characters)")

    country_code = s[:2]
    if not all(is_ascii_alpha(ch) for ch in country_code):
        return _reject(raw, f"country code {country_code!r} is not two letters")

    check = s[2:4]
    if not all(is_ascii_digit(ch) for ch in check):
        return _reject(raw, f"check digits {check!r} are not two digits")

    bban = s[4:]
    for pos, ch in enumerate(bban, start=4):
        if not is_ascii_alnum(ch):
            return _reject(raw, f"invalid character {ch!r} at position {pos}")

    return ParseResult(iban=IBAN(country_code=country_code, checksum=int(check), bban=bban))


def parse_iban(raw: str) -> IBAN:
    """Like `parse()` but raises ParseError instead of returning a failure."""
    return parse(raw).unwrap()
