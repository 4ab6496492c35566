from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ibancheck.utils.text import group_blocks

if TYPE_CHECKING:
    from .registry import CountryRegistry

_COUNTRY_RE = re.compile(r"[A-Z]{2}\Z")
_BBAN_RE = re.compile(r"[A-Z0-9]{1,30}\Z")


@dataclass(frozen=True)
class IBAN:
    """
    Parsed IBAN: country code, check digits and BBAN.

    Instances come from `parse()` / `IBAN.from_string()`; direct construction
    rejects fields the parser could never produce. Equality is purely
    structural; a value that fails `validate()` is still a usable value.
    """

    country_code: str
    checksum: int
    bban: str

    def __post_init__(self) -> None:
        if not isinstance(self.country_code, str) or not _COUNTRY_RE.match(self.country_code):
            raise ValueError(f"country_code must be two uppercase letters, got {self.country_code!r}")
        if not isinstance(self.checksum, int) or isinstance(self.checksum, bool):
            raise TypeError(f"checksum must be int, not {type(self.checksum).__name__}")
        if not 0 <= self.checksum <= 99:
            raise ValueError(f"checksum must be between 0 and 99, got {self.checksum}")
        if not isinstance(self.bban, str) or not _BBAN_RE.match(self.bban):
            raise ValueError(f"bban must be 1-30 uppercase letters or digits, got {self.bban!r}")

    @classmethod
    def from_string(cls, raw: str) -> "IBAN":
        """Parse `raw`, raising ParseError when it cannot be an IBAN."""
        from .parser import parse_iban

        return parse_iban(raw)

    @property
    def check_digits(self) -> str:
        return f"{self.checksum:02d}"

    def to_machine_form(self) -> str:
        return f"{self.country_code}{self.check_digits}{self.bban}"

    def to_human_readable(self) -> str:
        return group_blocks(self.to_machine_form(), 4)

    def validate(self, registry: Optional["CountryRegistry"] = None) -> bool:
        from .checksum import validate

        return validate(self, registry)

    def country_name(self, registry: Optional["CountryRegistry"] = None) -> Optional[str]:
        from .registry import CountryRegistry

        registry = registry if registry is not None else CountryRegistry.default()
        return registry.country_name(self.country_code)

    def __len__(self) -> int:
        return 4 + len(self.bban)

    def __str__(self) -> str:
        return self.to_machine_form()

    def __repr__(self) -> str:
        return f"IBAN({self.to_machine_form()!r})"
