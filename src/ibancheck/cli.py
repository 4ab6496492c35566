from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, TextIO

from ibancheck.core.checksum import compute_check_digits, explain
from ibancheck.core.parser import normalize, parse
from ibancheck.core.registry import CountryRegistry, registry_from_section
from ibancheck.utils.config import deep_get, load_yaml, resolve_config_path
from ibancheck.utils.log_context import log_scope, new_batch_id
from ibancheck.utils.logging_setup import log_event, setup_logging

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2

_COMMANDS = {"check", "format", "countries", "generate"}
_GLOBAL_OPTS_WITH_VALUE = {"--config", "--log-dir"}
_GLOBAL_FLAGS = {"-v", "--verbose", "-h", "--help"}


def _with_default_command(args: List[str]) -> List[str]:
    """
    Move global options in front and insert `check` when no command is given.

    `ibancheck --json DE68...` and `ibancheck DE68... -v` both become
    `ibancheck [globals] check ...`.
    """
    globals_: List[str] = []
    rest: List[str] = []
    i = 0
    while i < len(args):
        a = args[i]
        if a == "--":
            rest.extend(args[i:])
            break
        if a in _GLOBAL_OPTS_WITH_VALUE:
            globals_.extend(args[i:i + 2])
            i += 2
            continue
        if a in _GLOBAL_FLAGS or a.split("=", 1)[0] in _GLOBAL_OPTS_WITH_VALUE:
            globals_.append(a)
        else:
            rest.append(a)
        i += 1

    if not rest:
        return globals_
    first = next((a for a in rest if a == "-" or not a.startswith("-")), None)
    if first in _COMMANDS:
        return globals_ + rest
    return globals_ + ["check"] + rest


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="ibancheck", description="Parse and validate IBANs.")
    ap.add_argument("--config", default=None, help="YAML config (default: ./ibancheck.yaml)")
    ap.add_argument("--log-dir", default=None, help="write JSON-lines log into this directory")
    ap.add_argument("-v", "--verbose", action="store_true", help="log at DEBUG level")
    sub = ap.add_subparsers(dest="command")

    ap_check = sub.add_parser("check", help="validate IBANs (arguments or stdin lines)")
    ap_check.add_argument("ibans", nargs="*")
    ap_check.add_argument("--json", action="store_true", help="one JSON object per input")

    ap_format = sub.add_parser("format", help="print IBANs in machine or human form")
    ap_format.add_argument("ibans", nargs="*")
    ap_format.add_argument("--human", action="store_true", help="blocks of 4 characters")

    sub.add_parser("countries", help="list the country registry")

    ap_gen = sub.add_parser("generate", help="compute check digits for a country and BBAN")
    ap_gen.add_argument("country")
    ap_gen.add_argument("bban")
    return ap


def _iter_inputs(values: List[str], stdin: TextIO) -> Iterator[str]:
    if not values or values == ["-"]:
        for line in stdin:
            if line.strip():
                yield line.rstrip("\r\n")
        return
    yield from values


def _check(inputs: Iterable[str], registry: CountryRegistry, as_json: bool, out: TextIO, log: logging.Logger) -> int:
    rc = EXIT_OK
    total = valid_count = 0
    for raw in inputs:
        total += 1
        result = parse(raw)
        if not result.ok:
            assert result.error is not None
            rc = EXIT_INVALID
            if as_json:
                row = {"input": raw, "parsed": False, "valid": False, "reason": result.error.reason}
                out.write(json.dumps(row, ensure_ascii=False) + "\n")
            else:
                out.write(f"{raw}\tunparseable ({result.error.reason})\n")
            continue

        iban = result.unwrap()
        report = explain(iban, registry)
        if report.valid:
            valid_count += 1
        else:
            rc = EXIT_INVALID
        if as_json:
            row = {
                "input": raw,
                "parsed": True,
                "valid": report.valid,
                "reason": report.reason,
                "iban": iban.to_machine_form(),
                "country_code": iban.country_code,
                "check_digits": iban.check_digits,
                "bban": iban.bban,
                "country": registry.country_name(iban.country_code),
                "expected_length": report.expected_length,
            }
            out.write(json.dumps(row, ensure_ascii=False) + "\n")
        elif report.valid:
            out.write(f"{iban.to_human_readable()}\tvalid\n")
        else:
            out.write(f"{iban.to_human_readable()}\tinvalid ({report.reason})\n")

    log_event(log, "check.done", "IBAN check finished", total=total, valid=valid_count)
    return rc


def _format(inputs: Iterable[str], human: bool, out: TextIO, err: TextIO) -> int:
    rc = EXIT_OK
    for raw in inputs:
        result = parse(raw)
        if not result.ok:
            assert result.error is not None
            err.write(result.error.message() + "\n")
            rc = EXIT_INVALID
            continue
        iban = result.unwrap()
        out.write((iban.to_human_readable() if human else iban.to_machine_form()) + "\n")
    return rc


def _countries(registry: CountryRegistry, out: TextIO) -> int:
    for code in registry:
        name = registry.country_name(code) or ""
        out.write(f"{code}\t{registry[code]}\t{name}\n")
    return EXIT_OK


def _generate(country: str, bban: str, registry: CountryRegistry, out: TextIO, err: TextIO) -> int:
    cc = country.strip().upper()
    account = normalize(bban)
    try:
        digits = compute_check_digits(cc, account)
    except ValueError as exc:
        err.write(f"{exc}\n")
        return EXIT_USAGE
    result = parse(f"{cc}{digits}{account}")
    if not result.ok:
        assert result.error is not None
        err.write(result.error.message() + "\n")
        return EXIT_USAGE
    iban = result.unwrap()
    report = explain(iban, registry)
    out.write(iban.to_human_readable() + "\n")
    if not report.valid:
        err.write(f"warning: {iban.to_machine_form()} is {report.reason}\n")
        return EXIT_INVALID
    return EXIT_OK


def main(
    argv: Optional[List[str]] = None,
    *,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    args_list = _with_default_command(list(sys.argv[1:] if argv is None else argv))
    ap = _build_parser()
    args = ap.parse_args(args_list)
    if not getattr(args, "command", None):
        args.command = "check"
        args.ibans = []
        args.json = False

    try:
        cfg = load_yaml(resolve_config_path(args.config))
    except (OSError, ValueError) as exc:
        stderr.write(f"ibancheck: cannot read config: {exc}\n")
        return EXIT_USAGE

    log_dir = args.log_dir or deep_get(cfg, ["logging", "log_dir"])
    level = "DEBUG" if args.verbose else deep_get(cfg, ["logging", "level"])
    log = setup_logging(Path(log_dir) if log_dir else None, name="ibancheck.cli", level=level)

    try:
        registry = registry_from_section(cfg.get("registry"))
    except ValueError as exc:
        stderr.write(f"ibancheck: bad registry configuration: {exc}\n")
        return EXIT_USAGE

    source = "argv" if getattr(args, "ibans", None) and args.ibans != ["-"] else "stdin"
    with log_scope(batch_id=new_batch_id(), source=source):
        log_event(log, "cli.start", "ibancheck command", command=args.command, countries=len(registry))
        if args.command == "check":
            return _check(_iter_inputs(args.ibans, stdin), registry, args.json, stdout, log)
        if args.command == "format":
            return _format(_iter_inputs(args.ibans, stdin), args.human, stdout, stderr)
        if args.command == "countries":
            return _countries(registry, stdout)
        if args.command == "generate":
            return _generate(args.country, args.bban, registry, stdout, stderr)
    return EXIT_USAGE
