"""CLI entrypoints for autodocs commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import PROVIDERS, AutoDocsConfig, ConfigError, load_config
from .errors import AutoDocsError
from .logging import configure_logging, event_logger, get_logger
from .orchestrator import Orchestrator, RunReport
from .output import write_artifacts
from .prompting.builder import STYLES
from .prose import provider_from_config
from .scanner import SourceScanner

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autodocs",
        description="Generate documentation for JavaScript, TypeScript, Python and Go sources.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser(
        "generate",
        help="Generate documentation for a source file or directory.",
    )
    _add_verbose_option(generate, suppress_default=True)
    generate.add_argument("source", help="Source directory or file to document.")
    generate.add_argument("-o", "--output", help="Output directory (default: ./docs).")
    generate.add_argument(
        "-f",
        "--format",
        help="Output format: markdown, html, json, a comma-separated list or 'all'.",
    )
    generate.add_argument("-c", "--config", help="Path to a .autodocs.yml file.")
    generate.add_argument("--style", choices=STYLES, help="Documentation style.")
    generate.add_argument("--ai", choices=PROVIDERS, help="Prose provider.")
    generate.add_argument("--template", help="Custom HTML template file.")
    generate.add_argument("--workers", type=int, help="Number of files processed in parallel.")
    generate.add_argument(
        "--no-examples",
        dest="include_examples",
        action="store_false",
        default=None,
        help="Do not ask the prose service for usage examples.",
    )
    generate.add_argument("--log-file", help="Also write logs to this file.")

    serve = subparsers.add_parser("serve", help="Run the HTTP documentation service.")
    _add_verbose_option(serve, suppress_default=True)
    serve.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve.add_argument("--port", type=int, default=8000, help="Port to listen on.")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for autodocs commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if getattr(args, "log_file", None) else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    if args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
        return EXIT_OK
    return _generate(args)


def _generate(args: argparse.Namespace) -> int:
    logger = get_logger("cli")
    overrides = {
        "format": args.format,
        "style": args.style,
        "output": args.output,
        "ai_provider": args.ai,
        "template": args.template,
        "workers": args.workers,
        "include_examples": args.include_examples,
    }
    config_path = Path(args.config) if args.config else Path.cwd()
    try:
        config = load_config(config_path, overrides)
    except ConfigError as exc:
        print(f"autodocs: configuration error: {exc}", file=sys.stderr)
        return EXIT_USAGE

    try:
        sources = SourceScanner(ignore=config.ignore).scan(args.source)
    except FileNotFoundError as exc:
        print(f"autodocs: {exc}", file=sys.stderr)
        return EXIT_USAGE
    if not sources:
        print(f"autodocs: no supported source files found in {args.source}", file=sys.stderr)
        return EXIT_USAGE

    try:
        template = _read_template(config)
    except OSError as exc:
        print(f"autodocs: cannot read template: {exc}", file=sys.stderr)
        return EXIT_USAGE

    orchestrator = Orchestrator(
        provider=provider_from_config(config),
        template=template,
        workers=config.workers,
        combined=config.combined,
        on_event=event_logger(logger),
    )
    try:
        report = orchestrator.run(sources, config.formats)
    except AutoDocsError as exc:
        print(f"autodocs: {exc}", file=sys.stderr)
        return EXIT_USAGE

    written = write_artifacts(report.all_artifacts, config.output)
    _print_summary(report, len(written), config)
    if report.succeeded == 0 or report.format_errors:
        return EXIT_FAILURE
    return EXIT_OK


def _read_template(config: AutoDocsConfig) -> str | None:
    if config.template is None:
        return None
    return config.template.read_text(encoding="utf-8")


def _print_summary(report: RunReport, written: int, config: AutoDocsConfig) -> None:
    print(
        f"Attempted: {report.attempted}  Succeeded: {report.succeeded}  "
        f"Skipped: {len(report.skipped)}"
    )
    for skipped in report.skipped:
        print(f"  skipped {skipped.path}: {skipped.reason}")
    for path, fmt, reason in report.render_errors:
        print(f"  {fmt} artifact for {path} not written: {reason}")
    for fmt, reason in report.format_errors.items():
        print(f"  {fmt} output failed: {reason}")
    print(f"Wrote {written} file(s) to {_relativize(config.output)}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
