"""
Derive a NeuPrint report from a raw-feature payload file.

How to run:
    From project root (optionally with .env configured):

        python -m backend_neuprint.tools.derive_report payload.json

    or read the payload from stdin and keep diagnostics:

        cat payload.json | python -m backend_neuprint.tools.derive_report - --diagnostics

Options file (JSON) may use snake_case or camelCase keys:
    cohort_fri_list / cohortFriList, rc_logistic_model / rcLogisticModel,
    active_signal_ids / activeSignalIds, role_configs / roleConfigs,
    strict_min_filter, t2_mode, conservative_lock.
Values in the options file override the environment settings.

Optional env vars:
    - LOG_LEVEL / LOG_FORMAT as used by backend_neuprint.neuprint_logging
    - NEUPRINT_* as documented in backend_neuprint.config.env

Exit codes: 0 ok, 1 derivation error (configuration / report contract), 2 unreadable input.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from backend_neuprint.analytics.analytics_pipeline import derive_with_diagnostics
from backend_neuprint.analytics.options import DeriveOptions
from backend_neuprint.config.settings import get_settings
from backend_neuprint.core.exceptions import NeuPrintError
from backend_neuprint.neuprint_logging import configure_structlog, get_logger

logger = get_logger(__name__)


def _read_json(source: str) -> Any:
    if source == "-":
        return json.load(sys.stdin)
    with open(Path(source), encoding="utf-8") as f:
        return json.load(f)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Derive the four-section NeuPrint report (rsl / cff / rc / rfs) from a payload JSON file.",
    )
    parser.add_argument("payload", help="Payload JSON file, or - for stdin")
    parser.add_argument(
        "--options",
        default=None,
        help="Derive options JSON file (overrides environment settings)",
    )
    parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the result here instead of stdout",
    )
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Emit {report, diagnostics, derivation_id} instead of the bare report",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indent (default: 2)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
        configure_structlog(settings.log_level, settings.log_format)
        payload = _read_json(args.payload)
        overrides = _read_json(args.options) if args.options else {}
    except (OSError, json.JSONDecodeError) as e:
        logger.error("derive_report_input_failed", error=str(e), error_type=type(e).__name__)
        print("ERROR:", e, file=sys.stderr)
        return 2
    except NeuPrintError as e:
        logger.error("derive_report_settings_failed", error=str(e))
        print("ERROR:", e, file=sys.stderr)
        return 1

    try:
        if not isinstance(overrides, dict):
            raise NeuPrintError("options file must contain a JSON object")
        options = DeriveOptions.from_settings(settings, **overrides)
        result = derive_with_diagnostics(payload, options)
    except NeuPrintError as e:
        logger.error("derive_report_failed", error=str(e), error_type=type(e).__name__)
        print("ERROR:", e, file=sys.stderr)
        return 1

    if args.diagnostics:
        out: Any = {
            "report": result.report,
            "diagnostics": result.diagnostics,
            "derivation_id": result.derivation_id,
        }
    else:
        out = result.report
    text = json.dumps(out, indent=args.indent, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        logger.info("derive_report_saved", path=args.output, derivation_id=result.derivation_id)
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
