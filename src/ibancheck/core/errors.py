from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ParseFailure:
    """Why a raw string could not be read as an IBAN."""

    original_input: str
    reason: str

    def message(self) -> str:
        return f"Cannot parse IBAN {self.original_input}: {self.reason}"


class ParseError(ValueError):
    """Raised by the raising parse API when input cannot possibly be an IBAN."""

    def __init__(self, failure: ParseFailure):
        super().__init__(failure.message())
        self.failure = failure

    @property
    def original_input(self) -> str:
        return self.failure.original_input

    @property
    def reason(self) -> str:
        return self.failure.reason
