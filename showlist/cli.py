#!/usr/bin/env python3
"""Command-line interface for the showlist ETL.

Commands:
  - showlist run       : Process data/events.txt + data/venues.txt into JSON artifacts
  - showlist validate  : Parse and normalize listing files, print diagnostics, write nothing

Typical usage:
  showlist run --data-dir data --output-dir public/data --reference-date 2025-08-01
  showlist validate --events data/events.txt --venues data/venues.txt

Exit codes: 0 success, 1 failure, 2 diagnostics errors with --strict.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_STRICT = 2


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="showlist", description="Live-music listings ETL")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    sub = p.add_subparsers(dest="cmd")

    # run
    pr = sub.add_parser("run", help="Run the ETL and write artifacts")
    pr.add_argument("--data-dir", default=None, help="Directory holding events.txt and venues.txt")
    pr.add_argument("--output-dir", "-o", default=None, help="Artifacts output directory")
    pr.add_argument(
        "--reference-date",
        type=date.fromisoformat,
        default=None,
        help="YYYY-MM-DD anchor for inferring event years (default: today)",
    )
    pr.add_argument("--json-logs", action="store_true", help="Emit JSON logs")
    pr.add_argument("--log-file", action="store_true", help="Also log to <output>/logs/run_<id>.log")
    pr.add_argument("--dry-run", action="store_true", help="Process but do not write files")
    pr.add_argument("--strict", action="store_true", help="Exit 2 when any parse error was recorded")
    pr.add_argument(
        "--run-id",
        default=None,
        help="Override run_id (useful for tests/reproducibility)",
    )

    # validate
    pv = sub.add_parser("validate", help="Check listing files without writing output")
    pv.add_argument("--events", required=True, help="Path to the events listing")
    pv.add_argument("--venues", default=None, help="Path to the venue directory")
    pv.add_argument(
        "--reference-date",
        type=date.fromisoformat,
        default=None,
        help="YYYY-MM-DD anchor for inferring event years (default: today)",
    )
    pv.add_argument("--strict", action="store_true", help="Exit 2 when any parse error was recorded")
    pv.add_argument("--verbose", "-v", action="store_true", help="Print warnings as well as errors")

    return p.parse_args(argv)


def _settings_for(args: argparse.Namespace):
    from showlist.configs.settings import get_settings

    overrides: dict[str, Any] = {}
    if getattr(args, "data_dir", None):
        overrides["DATA_DIR"] = Path(args.data_dir)
    if getattr(args, "output_dir", None):
        overrides["OUTPUT_DIR"] = Path(args.output_dir)
    if getattr(args, "reference_date", None):
        overrides["REFERENCE_DATE"] = args.reference_date
    if getattr(args, "json_logs", False):
        overrides["JSON_LOGS"] = True
    return get_settings().model_copy(update=overrides)


def main(argv: list[str] | None = None) -> int:
    """Run the CLI with the given arguments."""
    try:
        return _main_impl(argv)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED


def _main_impl(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.version:
        from showlist import __version__

        print(f"showlist version {__version__}")
        return EXIT_OK

    if not args.cmd:
        print("Error: Command required. Use --help for usage info.", file=sys.stderr)
        return EXIT_FAILED

    if args.cmd == "run":
        return _run(args)

    if args.cmd == "validate":
        return _validate(args)

    print(f"Error: Unknown command {args.cmd}", file=sys.stderr)
    return EXIT_FAILED


def _run(args: argparse.Namespace) -> int:
    from showlist.ingestion.orchestrator import ETLOrchestrator, PipelineStatus
    from showlist.monitoring.logging import LoggingOptions, setup_run_logger

    settings = _settings_for(args)
    orchestrator = ETLOrchestrator(settings=settings, run_id=args.run_id)
    setup_run_logger(
        orchestrator.layout,
        run_id=orchestrator.run_id,
        options=LoggingOptions(
            level=settings.LOG_LEVEL,
            json_logs=settings.JSON_LOGS,
            enable_file=bool(args.log_file) and not args.dry_run,
        ),
    )

    outcome = orchestrator.process_data(dry_run=args.dry_run)
    if outcome.status == PipelineStatus.FAILED:
        print(f"Error: {outcome.failure}", file=sys.stderr)
        return EXIT_FAILED

    stats = outcome.result.stats
    print(json.dumps(stats.to_json_dict(), indent=2, ensure_ascii=False))
    if args.strict and outcome.result.errors:
        print(f"{len(outcome.result.errors)} parse errors (strict mode)", file=sys.stderr)
        return EXIT_STRICT
    return EXIT_OK


def _validate(args: argparse.Namespace) -> int:
    from showlist.ingestion.orchestrator import ETLOrchestrator
    from showlist.storage.writers import diagnostics_frame, summarize_diagnostics

    orchestrator = ETLOrchestrator(settings=_settings_for(args))
    events = orchestrator.read_source(Path(args.events))
    venues = orchestrator.read_source(Path(args.venues)) if args.venues else None

    result = orchestrator.run(events.text, venues.text if venues else None)

    shown = result.diagnostics if args.verbose else result.errors
    frame = diagnostics_frame(shown)
    if not frame.empty:
        print(frame[["severity", "type", "source_file", "line", "message"]].to_string(index=False))

    summary = {
        "events": result.stats.parsed_events,
        "artists": result.stats.parsed_artists,
        "venues": result.stats.parsed_venues,
        "errors": len(result.errors),
        "warnings": len(result.warnings),
        "by_type": summarize_diagnostics(result.diagnostics),
    }
    print(json.dumps(summary, indent=2, ensure_ascii=False))

    if args.strict and result.errors:
        return EXIT_STRICT
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
