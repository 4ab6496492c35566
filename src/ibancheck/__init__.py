"""Parse and validate International Bank Account Numbers (ISO 13616)."""

from .core import (
    IBAN,
    CountryRegistry,
    ParseError,
    ParseFailure,
    ParseResult,
    ValidationReport,
    compute_check_digits,
    explain,
    load_registry,
    normalize,
    parse,
    parse_iban,
    validate,
)

__version__ = "1.0.0"

__all__ = [
    "IBAN",
    "CountryRegistry",
    "ParseError",
    "ParseFailure",
    "ParseResult",
    "ValidationReport",
    "compute_check_digits",
    "explain",
    "load_registry",
    "normalize",
    "parse",
    "parse_iban",
    "validate",
]
