#!/usr/bin/env python3
"""
Preview a salary computation from a YAML input file.

Reads the profile, period, employment dates, attendance, earnings,
deductions and loan/advance installments from INPUT.yaml, runs the
salary engine and prints the itemized result as JSON.  Nothing is
recorded.

Usage:
    python3 scripts/preview_salary.py scripts/examples/preview_salary.yaml
    python3 scripts/preview_salary.py INPUT.yaml --log-level DEBUG

Exit codes: 0 on success, 2 on a payroll error (invalid input, zero
working days).
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from payroll_config import get_active_settings  # noqa: E402
from payroll_engines.salary import preview_salary  # noqa: E402
from payroll_kernel.exceptions import PayrollError  # noqa: E402
from payroll_kernel.logging_config import configure_logging  # noqa: E402
from payroll_modules.salary.inputs import load_salary_input, result_to_dict  # noqa: E402

EXIT_PAYROLL_ERROR = 2


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Preview a salary computation from a YAML input file.",
    )
    parser.add_argument("input", type=Path, help="YAML input document")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Structured log level written to stderr (default: settings log_level)",
    )
    args = parser.parse_args(argv)
    settings = get_active_settings()

    configure_logging(level=args.log_level or settings.log_level, stream=sys.stderr)

    try:
        document = load_salary_input(args.input, default_currency=settings.default_currency)
        result = preview_salary(**document.as_kwargs(), rounding=settings.rounding)
    except PayrollError as exc:
        print(
            json.dumps({"error": exc.code, "message": str(exc)}, indent=2),
            file=sys.stderr,
        )
        return EXIT_PAYROLL_ERROR

    print(json.dumps(result_to_dict(result), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
