from __future__ import annotations

import logging

import pytest

from ibancheck import IBAN, ParseError, ParseResult, normalize, parse, parse_iban
from ibancheck.utils.text import normalize_iban_text


def test_parse_splits_fields_and_strips_spaces() -> None:
    result = parse("DE68 2105 0170 0012 3456 78")
    assert result.ok is True
    iban = result.unwrap()
    assert iban.country_code == "DE"
    assert iban.check_digits == "68"
    assert iban.checksum == 68
    assert iban.bban == "210501700012345678"


def test_parse_same_value_with_and_without_spaces() -> None:
    spaced = parse_iban("DE68 2105 0170 0012 3456 78")
    compact = parse_iban("DE68210501700012345678")
    assert spaced == compact


def test_parse_removes_leading_and_interior_whitespace() -> None:
    iban = parse_iban(" GB82 WEST 1234\t5698\n7654 32 ")
    assert iban.to_machine_form() == "GB82WEST12345698765432"


def test_parse_uppercases_letters() -> None:
    iban = parse_iban("AD43oh8445353ADF")
    assert iban.country_code == "AD"
    assert iban.checksum == 43
    assert iban.bban == "OH8445353ADF"


def test_parse_keeps_leading_zero_of_check_digits() -> None:
    iban = parse_iban("GB04 ABCD 1234")
    assert iban.checksum == 4
    assert iban.check_digits == "04"
    assert iban.to_machine_form() == "GB04ABCD1234"


@pytest.mark.parametrize(
    "raw, reason_part",
    [
        ("BLA", "too short"),
        ("", "too short"),
        ("   \t ", "too short"),
        ("DE68", "too short"),
        ("DE68" + "1" * 31, "too long"),
        ("B1af935395", "country code"),
        ("1234567890", "country code"),
        ("DEAB21050170", "check digits"),
        ("DE6X21050170", "check digits"),
        ("DE682105017000/2345678", "'/' at position 14"),
        ("DE68-2105-0170", "invalid character"),
        ("DE68 2105 0170 ß", "non-ASCII"),
        ("ÄE68210501700012345678", "non-ASCII"),
    ],
)
def test_parse_rejects_structurally_broken_input(raw: str, reason_part: str) -> None:
    result = parse(raw)
    assert result.ok is False
    assert result.iban is None
    assert result.error is not None
    assert result.error.original_input == raw
    assert reason_part in result.error.reason


def test_parse_accepts_maximum_length() -> None:
    raw = "MT" + "84" + "A" * 30
    assert len(raw) == 34
    assert parse(raw).ok is True


def test_parse_accepts_minimum_length() -> None:
    iban = parse_iban("NO931")
    assert iban.bban == "1"


def test_unwrap_raises_parse_error_with_original_input() -> None:
    with pytest.raises(ParseError) as ei:
        parse(" bla ").unwrap()
    assert ei.value.original_input == " bla "
    assert "too short" in ei.value.reason
    assert str(ei.value).startswith("Cannot parse IBAN  bla :")


def test_parse_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        parse_iban("DE682105017000/2345678")


def test_from_string_uses_parser() -> None:
    assert IBAN.from_string("DE68 2105 0170 0012 3456 78") == parse_iban("DE68210501700012345678")
    with pytest.raises(ParseError):
        IBAN.from_string("BLA")


def test_parse_rejects_non_string() -> None:
    with pytest.raises(TypeError):
        parse(None)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        parse(b"DE68210501700012345678")  # type: ignore[arg-type]


def test_parse_result_needs_exactly_one_side() -> None:
    with pytest.raises(ValueError):
        ParseResult()


def test_parse_logs_rejection_reason(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="ibancheck.core.parser")
    parse("BLA")
    assert "too short" in caplog.text


def test_normalize_strips_all_whitespace_and_uppercases() -> None:
    assert normalize(" de68 2105\t0170\n0012 ") == "DE68210501700012"


def test_normalize_matches_text_helper() -> None:
    for raw in (" gb82 west 1234 ", "de68\u00a02105\u20030170", "", "NO93 8601 1117 947"):
        assert normalize(raw) == normalize_iban_text(raw)


def test_normalization_is_idempotent_for_parse(random_string) -> None:
    for _ in range(200):
        raw = "gb" + "07" + random_string(18)
        spaced = " ".join(raw[i:i + 3] for i in range(0, len(raw), 3))
        first = parse(spaced)
        second = parse(normalize(spaced))
        assert first.ok and second.ok
        assert first.unwrap() == second.unwrap()


def test_machine_form_round_trip(random_string) -> None:
    for length in range(1, 31):
        x = parse_iban("FR" + "76" + random_string(length))
        assert parse_iban(x.to_machine_form()) == x
