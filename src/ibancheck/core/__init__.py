from .errors import ParseError, ParseFailure
from .registry import CountryRegistry, load_registry
from .iban import IBAN
from .parser import ParseResult, normalize, parse, parse_iban
from .checksum import ValidationReport, compute_check_digits, explain, mod97, validate

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
    "mod97",
    "normalize",
    "parse",
    "parse_iban",
    "validate",
]
