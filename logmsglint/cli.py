"""Command line interface for logmsglint.

Usage:
    # Report problems in a tree
    logmsglint src/

    # Extra sensitive-data patterns, JSON output
    logmsglint --sensitive-pattern 'session[_-]?id' --format json app.py

    # Rewrite files in place where a fix is available
    logmsglint --fix src/

Exit status is 0 when nothing was reported, 1 when diagnostics were found and
2 on a configuration or usage error.
"""

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from logmsglint.config import LintConfig, get_settings
from logmsglint.errors import LogMsgLintError
from logmsglint.services.lint_service import LintResult, LintService

EXIT_CLEAN = 0
EXIT_DIAGNOSTICS = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logmsglint",
        description="Check log messages passed to logging and structlog",
    )
    parser.add_argument("paths", nargs="+", metavar="PATH", help="Files or directories to check")
    parser.add_argument("--fix", action="store_true", help="Rewrite files with suggested fixes")
    parser.add_argument(
        "--sensitive-pattern",
        dest="sensitive_patterns",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Extra sensitive-data regex (repeatable)",
    )
    parser.add_argument("--format", choices=("text", "json"), default="text", help="Output format")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def _write_text(result: LintResult) -> None:
    for d in result.diagnostics:
        sys.stdout.write(f"{d.file_path}:{d.start.line}:{d.start.column + 1}: {d.code} {d.message}\n")
    for error in result.errors:
        sys.stderr.write(f"{error}\n")
    if result.fixes_applied:
        sys.stderr.write(f"Applied {result.fixes_applied} fixes\n")


def _write_json(result: LintResult) -> None:
    output = {
        "files_checked": result.files_checked,
        "diagnostics": [d.to_dict() for d in result.diagnostics],
        "errors": result.errors,
        "fixes_applied": result.fixes_applied,
    }
    json.dump(output, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        sys.stderr.write(f"logmsglint: invalid settings: {e}\n")
        return EXIT_USAGE

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        service = LintService(
            config=LintConfig(
                sensitive_patterns=[*settings.sensitive_patterns, *args.sensitive_patterns]
            )
        )
    except LogMsgLintError as e:
        sys.stderr.write(f"logmsglint: {e}\n")
        return EXIT_USAGE

    result = service.lint_paths(args.paths, fix=args.fix)

    if args.format == "json":
        _write_json(result)
    else:
        _write_text(result)

    return EXIT_DIAGNOSTICS if result.diagnostics else EXIT_CLEAN


if __name__ == "__main__":
    sys.exit(main())
