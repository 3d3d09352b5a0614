"""Command-line entry point for the askalono scanner integration."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List

from .config import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV, ScannerConfig
from .errors import ScannerError
from .parser import parse_results
from .result import Provenance, ScanResult, format_summary_table
from .scanner import AskalonoScanner
from .utils import write_json_text

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="askalono-scanner",
        description="Bootstrap askalono, scan source trees and parse its reports.",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Logging verbosity (defaults to $ASKALONO_SCANNER_LOG_LEVEL or INFO).",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    boot = sub.add_parser("bootstrap", help="Download the pinned askalono executable.")
    boot.add_argument("--dir", dest="scratch_root", default=None, help="Create the scanner directory below this path.")

    version = sub.add_parser("version", help="Print the version of an installed askalono executable.")
    version.add_argument("--dir", dest="scanner_dir", default=None, help="Directory containing the executable.")

    scan = sub.add_parser("scan", help="Scan a source tree with askalono.")
    scan.add_argument("path", help="Directory to scan.")
    scan.add_argument("--results-file", default=None, help="Where to keep askalono's raw report.")
    scan.add_argument(
        "--out",
        "--output",
        dest="output_path",
        default=None,
        help="Path to write the structured JSON report.",
    )
    scan.add_argument("--scanner-dir", default=None, help="Reuse the executable in this directory if it matches.")
    scan.add_argument("--source-url", default="", help="Provenance: where the source tree came from.")
    scan.add_argument("--revision", default="", help="Provenance: revision of the source tree.")

    parse = sub.add_parser("parse", help="Parse an existing askalono report.")
    parse.add_argument("results_file", help="Raw askalono report to parse.")
    parse.add_argument("--out", "--output", dest="output_path", default=None, help="Path to write the JSON result.")

    return parser


def write_output(payload: dict, output_path: str | None) -> None:
    text = json.dumps(payload, indent=2)
    if output_path:
        write_json_text(Path(output_path), text)
        print(f"\nReport written to {output_path}")
    else:
        print("\nJSON Report")
        print(text)


def _cmd_bootstrap(config: ScannerConfig, args: argparse.Namespace) -> int:
    scanner = AskalonoScanner(config.identity, http_cache_dir=config.http_cache_dir)
    scratch_root = Path(args.scratch_root) if args.scratch_root else None
    artifact = scanner.bootstrap(scratch_root=scratch_root)
    print(artifact.directory)
    return 0


def _cmd_version(config: ScannerConfig, args: argparse.Namespace) -> int:
    directory = Path(args.scanner_dir) if args.scanner_dir else config.scanner_dir
    if directory is None:
        raise SystemExit("No scanner directory given, use --dir or set $ASKALONO_SCANNER_DIR.")
    print(AskalonoScanner(config.identity).get_version(directory))
    return 0


def _cmd_scan(config: ScannerConfig, args: argparse.Namespace) -> int:
    scanner = AskalonoScanner(config.identity, http_cache_dir=config.http_cache_dir)
    existing = Path(args.scanner_dir) if args.scanner_dir else config.scanner_dir
    results_file = Path(args.results_file) if args.results_file else Path.cwd() / scanner.results_file_name
    provenance = Provenance(source_url=args.source_url, revision=args.revision)

    scanner.prepare(existing)
    try:
        scan_result: ScanResult = scanner.scan_path(Path(args.path), results_file, provenance, scanner.details())
    finally:
        scanner.release()

    print(format_summary_table(scan_result))
    write_output(scan_result.to_dict(), args.output_path)
    return 0


def _cmd_parse(args: argparse.Namespace) -> int:
    result = parse_results(Path(args.results_file))
    print(format_summary_table(result))
    write_output(
        {
            "file_count": result.file_count,
            "licenses": sorted(result.licenses),
            "errors": sorted(result.errors),
            "raw_result": result.raw_result,
        },
        args.output_path,
    )
    return 0


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level or os.environ.get(LOG_LEVEL_ENV, "").upper() or DEFAULT_LOG_LEVEL)

    try:
        if args.cmd == "parse":
            return _cmd_parse(args)

        config = ScannerConfig.from_env()
        if args.cmd == "bootstrap":
            return _cmd_bootstrap(config, args)
        if args.cmd == "version":
            return _cmd_version(config, args)
        return _cmd_scan(config, args)
    except ScannerError as exc:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
