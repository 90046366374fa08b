"""CLI entrypoints for cargofleet commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .aggregate import analyze_dependencies, analyze_toolchains, check_all_licenses
from .clean import clean_projects
from .config import (
    AppConfig,
    ConfigError,
    default_scan_root,
    load_config,
    save_config,
    with_favorite,
    with_recent_project,
)
from .execution import OUTPUT_CHANNEL, CallbackEventSink, CommandRunner
from .logging import configure_logging, get_logger
from .models import OutputEvent, ProcessInvocation
from .manifest import TARGET_DIR
from .registry import ProjectRegistry, dir_size
from .stores import ScanCache
from .workspace import workspace_info


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


def _add_paths_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "paths",
        nargs="+",
        help="Project directories (each containing a Cargo.toml).",
    )


def _add_cache_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Do not record this analysis in the result cache.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cargofleet",
        description="Discover Cargo projects, compare their metadata and run cargo across them.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.yml (defaults to ~/.config/cargofleet/config.yml).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan", help="List Cargo projects below a directory.")
    _add_verbose_option(scan_parser, suppress_default=True)
    scan_parser.add_argument(
        "root",
        nargs="?",
        default=None,
        help="Directory to scan (defaults to the configured scan root).",
    )

    deps_parser = subparsers.add_parser(
        "deps", help="Group dependency versions across projects."
    )
    _add_verbose_option(deps_parser, suppress_default=True)
    _add_paths_argument(deps_parser)
    _add_cache_option(deps_parser)

    toolchain_parser = subparsers.add_parser(
        "toolchains", help="Group pinned toolchains and MSRV values across projects."
    )
    _add_verbose_option(toolchain_parser, suppress_default=True)
    _add_paths_argument(toolchain_parser)
    _add_cache_option(toolchain_parser)

    license_parser = subparsers.add_parser(
        "licenses", help="Group package licenses across projects (requires cargo-license)."
    )
    _add_verbose_option(license_parser, suppress_default=True)
    _add_paths_argument(license_parser)
    _add_cache_option(license_parser)

    workspace_parser = subparsers.add_parser(
        "workspace", help="Show the workspace role of one project."
    )
    _add_verbose_option(workspace_parser, suppress_default=True)
    workspace_parser.add_argument("path", help="Project directory.")

    run_parser = subparsers.add_parser("run", help="Run a cargo subcommand in a project.")
    _add_verbose_option(run_parser, suppress_default=True)
    run_parser.add_argument(
        "--batch",
        action="store_true",
        help="Collect output and print it after the command exits.",
    )
    run_parser.add_argument("path", help="Project directory used as working directory.")
    run_parser.add_argument("subcommand", help="Cargo subcommand, e.g. build or test.")
    run_parser.add_argument("args", nargs=argparse.REMAINDER, help="Extra arguments.")

    clean_parser = subparsers.add_parser("clean", help="Remove target directories.")
    _add_verbose_option(clean_parser, suppress_default=True)
    _add_paths_argument(clean_parser)
    clean_parser.add_argument(
        "--debug-only",
        action="store_true",
        help="Only remove target/debug.",
    )

    favorite_parser = subparsers.add_parser("favorite", help="Mark or unmark a favorite project.")
    _add_verbose_option(favorite_parser, suppress_default=True)
    favorite_parser.add_argument("path", help="Project directory.")
    favorite_parser.add_argument(
        "--remove",
        action="store_true",
        help="Remove the project from favorites.",
    )

    cache_parser = subparsers.add_parser("cache", help="Print cached analysis results.")
    _add_verbose_option(cache_parser, suppress_default=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _print_output_line(channel: str, payload: Any) -> None:
    if channel != OUTPUT_CHANNEL or not isinstance(payload, OutputEvent):
        return
    stream = sys.stderr if payload.stream == "stderr" else sys.stdout
    print(payload.line, file=stream, flush=True)


def _run(args: argparse.Namespace, config: AppConfig, config_path: Path | None) -> int:
    invocation = ProcessInvocation(
        command=args.subcommand, args=list(args.args), cwd=str(Path(args.path).resolve())
    )
    try:
        save_config(with_recent_project(config, invocation.cwd), config_path)
    except OSError as exc:
        get_logger("cli").warning("Could not record recent project: %s", exc)

    if args.batch:
        result = CommandRunner(config.cargo_executable).run(invocation)
        sys.stdout.write(result.stdout)
        sys.stderr.write(result.stderr)
        return 0 if result.success else 1

    runner = CommandRunner(config.cargo_executable, sink=CallbackEventSink(_print_output_line))
    completion = runner.stream(invocation)
    if completion is None or not completion.success:
        return 1
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for cargofleet commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    cache = None if getattr(args, "no_cache", True) else ScanCache()

    try:
        if args.command == "scan":
            root = args.root or config.scan_root or default_scan_root()
            projects = ProjectRegistry().discover(root)
            _print_json([project.to_dict() for project in projects])
        elif args.command == "deps":
            analysis = analyze_dependencies(args.paths)
            if cache is not None:
                cache.save_dependency_analysis(analysis)
            _print_json(analysis.to_dict())
        elif args.command == "toolchains":
            analysis = analyze_toolchains(args.paths)
            if cache is not None:
                cache.save_toolchain_analysis(analysis)
            _print_json(analysis.to_dict())
        elif args.command == "licenses":
            analysis = check_all_licenses(args.paths, CommandRunner(config.cargo_executable))
            if cache is not None:
                cache.save_license_analysis(analysis)
            _print_json(analysis.to_dict())
        elif args.command == "workspace":
            _print_json(workspace_info(args.path).to_dict())
        elif args.command == "run":
            status = _run(args, config, args.config)
            if status:
                parser.exit(status)
        elif args.command == "clean":
            hints = [dir_size(Path(path) / TARGET_DIR) for path in args.paths]
            results = clean_projects(
                args.paths, debug_only=bool(args.debug_only), size_hints=hints
            )
            _print_json([result.to_dict() for result in results])
        elif args.command == "favorite":
            path = str(Path(args.path).resolve())
            updated = with_favorite(config, path, not args.remove)
            save_config(updated, args.config)
            _print_json(list(updated.favorites))
        elif args.command == "cache":
            _print_json(ScanCache().snapshot())
        elif args.command == "serve":  # pragma: no cover - integration path
            from .service import run_service

            run_service(host=args.host, port=args.port)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except OSError as exc:
        parser.exit(1, f"cargofleet {args.command} failed: {exc}\nRun with --verbose for more details.\n")


if __name__ == "__main__":
    main(sys.argv[1:])
