"""CLI entrypoint for validgen."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .collector import SourceReadError
from .config import ConfigError, load_config
from .extractor import SourceParseError
from .logging import configure_logging, get_logger
from .pipeline import GenerationReport, Generator


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="validgen",
        description="Generate required-field validators for annotated Python classes.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Source file or directory to scan (defaults to current directory).",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        default=None,
        help="Descend into subdirectories when scanning a directory.",
    )
    parser.add_argument(
        "--dst",
        type=Path,
        default=None,
        help="Write generated modules under this directory instead of next to the sources.",
    )
    parser.add_argument(
        "--mod",
        default=None,
        help="Dotted import path of the scanned sources; required with --dst.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings file to use instead of .validgen.yml next to the sources.",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Glob of source paths to skip, relative to the scanned directory (repeatable).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report which files would be generated without writing them.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=False,
        help="Only log warnings and errors.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for validgen."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file)
    logger = get_logger("cli")

    try:
        config = load_config(
            Path(args.path),
            config_path=args.config,
            recursive=args.recursive,
            destination=args.dst,
            module_prefix=args.mod,
            exclude_paths=args.exclude,
            dry_run=bool(args.dry_run),
        )
        generator = Generator(config)
    except ConfigError as exc:
        parser.print_usage(sys.stderr)
        parser.exit(2, f"validgen: configuration error: {exc}\n")

    try:
        report = generator.run()
    except (OSError, SourceReadError, SourceParseError) as exc:
        logger.error("%s", exc)
        parser.exit(1, f"validgen failed: {exc}\n")

    _print_report(report)


def _print_report(report: GenerationReport) -> None:
    if report.dry_run:
        print(f"Would generate {len(report.artifacts)} validator file(s) (dry-run):")
        for path in report.paths:
            print(f"  {_relativize(path)}")
        return
    print(f"Generated {len(report.artifacts)} validator file(s)")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
