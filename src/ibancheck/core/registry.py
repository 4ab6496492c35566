from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Optional

from ibancheck.utils.config import load_yaml

log = logging.getLogger(__name__)

MIN_IBAN_LENGTH = 5
MAX_IBAN_LENGTH = 34

_CODE_RE = re.compile(r"^[A-Z]{2}$")

# SWIFT IBAN registry (ISO 13616), total length incl. country code and check digits.
_DEFAULT_COUNTRIES: Dict[str, tuple[int, str]] = {
    "AD": (24, "Andorra"),
    "AE": (23, "United Arab Emirates"),
    "AL": (28, "Albania"),
    "AT": (20, "Austria"),
    "AZ": (28, "Azerbaijan"),
    "BA": (20, "Bosnia and Herzegovina"),
    "BE": (16, "Belgium"),
    "BG": (22, "Bulgaria"),
    "BH": (22, "Bahrain"),
    "BI": (27, "Burundi"),
    "BR": (29, "Brazil"),
    "BY": (28, "Belarus"),
    "CH": (21, "Switzerland"),
    "CR": (22, "Costa Rica"),
    "CY": (28, "Cyprus"),
    "CZ": (24, "Czechia"),
    "DE": (22, "Germany"),
    "DJ": (27, "Djibouti"),
    "DK": (18, "Denmark"),
    "DO": (28, "Dominican Republic"),
    "EE": (20, "Estonia"),
    "EG": (29, "Egypt"),
    "ES": (24, "Spain"),
    "FI": (18, "Finland"),
    "FK": (18, "Falkland Islands"),
    "FO": (18, "Faroe Islands"),
    "FR": (27, "France"),
    "GB": (22, "United Kingdom"),
    "GE": (22, "Georgia"),
    "GI": (23, "Gibraltar"),
    "GL": (18, "Greenland"),
    "GR": (27, "Greece"),
    "GT": (28, "Guatemala"),
    "HN": (28, "Honduras"),
    "HR": (21, "Croatia"),
    "HU": (28, "Hungary"),
    "IE": (22, "Ireland"),
    "IL": (23, "Israel"),
    "IQ": (23, "Iraq"),
    "IS": (26, "Iceland"),
    "IT": (27, "Italy"),
    "JO": (30, "Jordan"),
    "KW": (30, "Kuwait"),
    "KZ": (20, "Kazakhstan"),
    "LB": (28, "Lebanon"),
    "LC": (32, "Saint Lucia"),
    "LI": (21, "Liechtenstein"),
    "LT": (20, "Lithuania"),
    "LU": (20, "Luxembourg"),
    "LV": (21, "Latvia"),
    "LY": (25, "Libya"),
    "MC": (27, "Monaco"),
    "MD": (24, "Moldova"),
    "ME": (22, "Montenegro"),
    "MK": (19, "North Macedonia"),
    "MN": (20, "Mongolia"),
    "MR": (27, "Mauritania"),
    "MT": (31, "Malta"),
    "MU": (30, "Mauritius"),
    "NI": (28, "Nicaragua"),
    "NL": (18, "Netherlands"),
    "NO": (15, "Norway"),
    "OM": (23, "Oman"),
    "PK": (24, "Pakistan"),
    "PL": (28, "Poland"),
    "PS": (29, "Palestine"),
    "PT": (25, "Portugal"),
    "QA": (29, "Qatar"),
    "RO": (24, "Romania"),
    "RS": (22, "Serbia"),
    "RU": (33, "Russia"),
    "SA": (24, "Saudi Arabia"),
    "SC": (31, "Seychelles"),
    "SD": (18, "Sudan"),
    "SE": (24, "Sweden"),
    "SI": (19, "Slovenia"),
    "SK": (24, "Slovakia"),
    "SM": (27, "San Marino"),
    "SO": (23, "Somalia"),
    "ST": (25, "Sao Tome and Principe"),
    "SV": (28, "El Salvador"),
    "TL": (23, "Timor-Leste"),
    "TN": (24, "Tunisia"),
    "TR": (26, "Turkey"),
    "UA": (29, "Ukraine"),
    "VA": (22, "Vatican City State"),
    "VG": (24, "British Virgin Islands"),
    "XK": (20, "Kosovo"),
    "YE": (30, "Yemen"),
}


def _normalize_code(code: Any) -> str:
    cc = str(code or "").strip().upper()
    if not _CODE_RE.match(cc):
        raise ValueError(f"Invalid country code {code!r}: expected two letters")
    return cc


def _normalize_length(code: str, length: Any) -> int:
    is_int = isinstance(length, int) and not isinstance(length, bool)
    if not (is_int or (isinstance(length, str) and length.strip().isdigit())):
        raise ValueError(f"Invalid IBAN length for {code}: {length!r}")
    n = int(length)
    if not MIN_IBAN_LENGTH <= n <= MAX_IBAN_LENGTH:
        raise ValueError(
            f"IBAN length for {code} must be between {MIN_IBAN_LENGTH} and {MAX_IBAN_LENGTH}, got {n}"
        )
    return n


class CountryRegistry(Mapping):
    """
    Immutable mapping country code -> expected total IBAN length.

    Registries are built once and never modified; `with_overrides` returns a
    new instance. Use `CountryRegistry.default()` for the full ISO 13616 table.
    """

    __slots__ = ("_lengths", "_names")

    def __init__(self, entries: Mapping[str, Any] | None = None):
        lengths: Dict[str, int] = {}
        names: Dict[str, str] = {}
        for code, value in (entries or {}).items():
            cc = _normalize_code(code)
            name = None
            if isinstance(value, Mapping):
                name = value.get("name")
                value = value.get("length")
            elif isinstance(value, tuple):
                value, name = value
            lengths[cc] = _normalize_length(cc, value)
            if name:
                names[cc] = str(name)
        self._lengths = MappingProxyType(lengths)
        self._names = MappingProxyType(names)

    @classmethod
    def default(cls) -> "CountryRegistry":
        return _DEFAULT_REGISTRY

    @classmethod
    def from_mapping(cls, entries: Mapping[str, Any]) -> "CountryRegistry":
        return cls(entries)

    def with_overrides(self, entries: Mapping[str, Any]) -> "CountryRegistry":
        merged: Dict[str, Any] = {
            cc: (length, self._names[cc]) if cc in self._names else length
            for cc, length in self._lengths.items()
        }
        for code, value in entries.items():
            cc = _normalize_code(code)
            # a bare length keeps the known country name
            if cc in self._names and not isinstance(value, (Mapping, tuple)):
                value = (value, self._names[cc])
            merged[cc] = value
        return CountryRegistry(merged)

    def subset(self, country_codes: Iterable[str]) -> "CountryRegistry":
        """New registry restricted to `country_codes` (unknown codes are ignored)."""
        wanted = {_normalize_code(c) for c in country_codes}
        return CountryRegistry(
            {
                cc: (length, self._names[cc]) if cc in self._names else length
                for cc, length in self._lengths.items()
                if cc in wanted
            }
        )

    def lookup(self, country_code: str) -> Optional[int]:
        return self._lengths.get((country_code or "").upper())

    def country_name(self, country_code: str) -> Optional[str]:
        return self._names.get((country_code or "").upper())

    def __getitem__(self, country_code: str) -> int:
        key = country_code.upper() if isinstance(country_code, str) else country_code
        return self._lengths[key]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._lengths))

    def __len__(self) -> int:
        return len(self._lengths)

    def __repr__(self) -> str:
        return f"CountryRegistry({len(self)} countries)"


_DEFAULT_REGISTRY = CountryRegistry(_DEFAULT_COUNTRIES)


def load_registry(path: Path, *, base: CountryRegistry | None = None) -> CountryRegistry:
    """
    Load a registry from YAML:

        countries:
          XX: 20
          YY: {length: 22, name: "Test country"}
        replace: false

    Entries are merged over `base` (default table) unless `replace` is true.
    """
    data = load_yaml(Path(path))
    section = data.get("registry", data)
    return registry_from_section(section, base=base)


def registry_from_section(section: Any, *, base: CountryRegistry | None = None) -> CountryRegistry:
    base = base if base is not None else CountryRegistry.default()
    if not section:
        return base
    if not isinstance(section, Mapping):
        raise ValueError("Registry configuration must be a mapping")
    countries = section.get("countries") or {}
    if not isinstance(countries, Mapping):
        raise ValueError("registry.countries must be a mapping of country code to length")
    registry = base.with_overrides(countries)
    if section.get("replace"):
        registry = registry.subset(countries)
    log.debug("Country registry loaded: countries=%s replace=%s", len(registry), bool(section.get("replace")))
    return registry
