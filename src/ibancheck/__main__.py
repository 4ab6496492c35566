"""Entry point for `python -m ibancheck`."""

from __future__ import annotations

from ibancheck.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
