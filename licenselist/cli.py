"""CLI entrypoints for licenselist commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import load_config
from .database import LicenseDatabase
from .errors import LicenseListError
from .licenses import LicenseResolver
from .logging import configure_logging
from .orchestrator import Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="licenselist",
        description="Generate per-chunk license manifests from bundler build statistics.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write DEBUG-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Build the license manifest for a stats.json file.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "stats",
        help="Path to the bundler statistics JSON (e.g. webpack --json output).",
    )
    generate_parser.add_argument(
        "--config",
        default=".",
        help="Path to .licenselist.yml or its directory (defaults to current directory).",
    )
    generate_parser.add_argument(
        "--project-root",
        default=None,
        help="Directory module paths are relative to (defaults to the config directory).",
    )
    generate_parser.add_argument(
        "--output-path",
        default=None,
        help="Directory to write the manifest into instead of <outputPath>/<output_dir>.",
    )

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Print the license labels an SPDX expression resolves to.",
    )
    _add_verbose_option(resolve_parser, suppress_default=True)
    resolve_parser.add_argument("expression", help="License expression, e.g. 'MIT OR Apache-2.0'.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for licenselist commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    if args.command == "generate":
        try:
            config = load_config(Path(args.config))
            if args.project_root:
                config.root = Path(args.project_root).expanduser().resolve()
            stats = _read_stats(Path(args.stats))
            orchestrator = Orchestrator(config)
            output_path = Path(args.output_path) if args.output_path else None
            result = orchestrator.run(stats, output_path=output_path)
        except LicenseListError as exc:
            parser.exit(1, f"licenselist generate failed: {exc}\nRun with --verbose for more details.\n")
        rel_path = _relativize(result.manifest_path)
        print(f"License manifest written to {rel_path}")
        print(
            f"{result.modules_processed} modules, {result.files_copied} files copied, "
            f"{len(result.diagnostics)} warnings"
        )
    elif args.command == "resolve":
        try:
            resolver = LicenseResolver(LicenseDatabase.load())
        except LicenseListError as exc:
            parser.exit(1, f"licenselist resolve failed: {exc}\n")
        labels = resolver.resolve(args.expression, "command line")
        print(json.dumps([label.to_dict() for label in labels], indent=2))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _read_stats(path: Path) -> dict:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise LicenseListError(f"Stats file {path} does not exist") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise LicenseListError(f"Unable to read stats file {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise LicenseListError(f"Stats file {path} must contain a JSON object")
    return payload


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
