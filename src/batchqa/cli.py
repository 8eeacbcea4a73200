"""Command line entry point: ``batchqa <batch-directory>``.

Exit statuses: 0 when every check passed, 1 when any failure was recorded,
2 on usage or setup errors (the pipeline never starts in that case).
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
import traceback
from typing import TYPE_CHECKING, NoReturn

from batchqa._logging import configure_logging
from batchqa._version import __version__
from batchqa.batch import identify
from batchqa.config import resolve_config
from batchqa.errors import UsageError
from batchqa.runner import PipelineRunner
from batchqa.verdict import ExitCode, render_verdict

if TYPE_CHECKING:
    from collections.abc import Sequence

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batchqa",
        description="Run the quality-assurance checks against one batch directory.",
    )
    parser.add_argument(
        "batch_dir", metavar="batch-directory", help="path of the batch to check"
    )
    parser.add_argument(
        "--json", action="store_true", help="write the report as JSON"
    )
    parser.add_argument(
        "--traces",
        action="store_true",
        help="include diagnostic traces in the text report",
    )
    parser.add_argument(
        "--profile", default=None, help="configuration profile from the TOML files"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="log progress to stderr (-vv for debug output)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Check one batch and return the process exit status."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse has already written usage and the error to stderr
        return int(e.code) if isinstance(e.code, int) else ExitCode.USAGE

    configure_logging(args.verbose)
    log.info("batchqa %s starting", __version__)

    sys.stdout.write(f"Looking at: {Path(args.batch_dir).absolute()}\n")
    try:
        batch = identify(args.batch_dir)
        config = resolve_config(args.batch_dir, profile=args.profile)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        sys.stderr.write(f"{parser.prog}: error: {e}\n")
        return ExitCode.USAGE
    except Exception:
        parser.print_usage(sys.stderr)
        traceback.print_exc(file=sys.stderr)
        return ExitCode.USAGE

    runner = PipelineRunner(config)
    result = runner.run(batch)
    verdict = render_verdict(result, as_json=args.json, include_traces=args.traces)
    sys.stdout.write(verdict.report + "\n")

    for reporter in runner.telemetry.reporters:
        get_report = getattr(reporter, "get_report", None)
        if callable(get_report):
            sys.stderr.write(get_report() + "\n")

    return verdict.exit_code


def run() -> NoReturn:
    """Console script entry point."""
    try:
        code = main()
    except Exception:
        traceback.print_exc(file=sys.stderr)
        code = ExitCode.FAILURES
    sys.exit(int(code))
