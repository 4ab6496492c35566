from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ibancheck.utils.text import is_ascii_alpha, is_ascii_digit

from .iban import IBAN
from .registry import CountryRegistry

log = logging.getLogger(__name__)

REASON_OK = "ok"
REASON_UNKNOWN_COUNTRY = "unknown-country"
REASON_WRONG_LENGTH = "wrong-length"
REASON_CHECKSUM = "checksum-mismatch"


@dataclass(frozen=True)
class ValidationReport:
    valid: bool
    reason: str
    actual_length: int
    expected_length: Optional[int] = None
    remainder: Optional[int] = None


def expand_letters(text: str) -> str:
    """Replace letters by two digits (A=10 .. Z=35), keep digits."""
    out = []
    for ch in text:
        if is_ascii_digit(ch):
            out.append(ch)
        elif is_ascii_alpha(ch):
            out.append(str(ord(ch.upper()) - 55))
        else:
            raise ValueError(f"Cannot expand non-alphanumeric character {ch!r}")
    return "".join(out)


def mod97(numeral: str) -> int:
    """
    ISO 7064 MOD 97-10 remainder of a decimal numeral of any length.

    Runs digit by digit with a running remainder, so no big integer is built.
    """
    rem = 0
    for ch in numeral:
        if not is_ascii_digit(ch):
            raise ValueError(f"Not a decimal digit: {ch!r}")
        rem = (rem * 10 + (ord(ch) - 48)) % 97
    return rem


def checksum_remainder(iban: IBAN) -> int:
    # move country code and check digits to the end
    rearranged = iban.bban + iban.country_code + iban.check_digits
    return mod97(expand_letters(rearranged))


def check_length(iban: IBAN, registry: CountryRegistry | None = None) -> bool:
    registry = registry if registry is not None else CountryRegistry.default()
    expected = registry.lookup(iban.country_code)
    return expected is not None and len(iban.to_machine_form()) == expected


def explain(iban: IBAN, registry: CountryRegistry | None = None) -> ValidationReport:
    """Validate `iban` and say which rule failed."""
    registry = registry if registry is not None else CountryRegistry.default()
    actual = len(iban.to_machine_form())
    expected = registry.lookup(iban.country_code)
    if expected is None:
        report = ValidationReport(False, REASON_UNKNOWN_COUNTRY, actual)
    elif actual != expected:
        report = ValidationReport(False, REASON_WRONG_LENGTH, actual, expected)
    else:
        rem = checksum_remainder(iban)
        reason = REASON_OK if rem == 1 else REASON_CHECKSUM
        report = ValidationReport(rem == 1, reason, actual, expected, rem)
    if not report.valid:
        log.debug(
            "IBAN invalid: reason=%s country=%s length=%s expected=%s",
            report.reason,
            iban.country_code,
            actual,
            expected,
        )
    return report


def validate(iban: IBAN, registry: CountryRegistry | None = None) -> bool:
    """True iff the country is known, the length matches and MOD 97-10 gives 1."""
    return explain(iban, registry).valid


def compute_check_digits(country_code: str, bban: str) -> str:
    """Check digits that make `country_code + digits + bban` pass MOD 97-10."""
    cc = (country_code or "").upper()
    if len(cc) != 2 or not cc.isascii() or not cc.isalpha():
        raise ValueError(f"Invalid country code {country_code!r}")
    rem = mod97(expand_letters(bban + cc + "00"))
    return f"{98 - rem:02d}"
