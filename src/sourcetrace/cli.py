"""CLI entry point — ``sourcetrace serve`` and ``sourcetrace resolve``."""

from __future__ import annotations

import argparse
import asyncio
import sys

import httpx

from sourcetrace import __version__
from sourcetrace.config import Settings
from sourcetrace.errors import SourceTraceError
from sourcetrace.logging_config import setup_logging
from sourcetrace.resolver import (
    ResolutionResult,
    initialize_consumer,
    resolve_artifact,
)


def main() -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.version:
        print(f"sourcetrace {__version__}")
        return

    if args.command == "serve":
        _run_serve(args)
    elif args.command == "resolve":
        sys.exit(_run_resolve(args))
    else:
        parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sourcetrace",
        description=(
            "Map positions in built artifacts back to original source."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser(
        "serve",
        help="Start the overlay resolution server",
    )
    serve.add_argument(
        "--host",
        default=None,
        help="Bind address (default: from settings)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port (default: from settings)",
    )

    resolve = sub.add_parser(
        "resolve",
        help="Resolve one position and print the result as JSON",
    )
    resolve.add_argument(
        "file",
        help="Artifact path or http(s) URL",
    )
    resolve.add_argument(
        "line",
        type=int,
        help="Generated line (1-based)",
    )
    resolve.add_argument(
        "column",
        type=int,
        help="Generated column (0-based)",
    )
    resolve.add_argument(
        "--root",
        default=None,
        help="Project root stripped from file names (default: cwd)",
    )

    return parser


def _run_serve(args: argparse.Namespace) -> None:
    """Run the FastAPI app under uvicorn."""
    import uvicorn

    from sourcetrace.main import create_app

    settings = Settings()
    setup_logging(settings.log_level)
    app = create_app(settings)

    uvicorn.run(
        app,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )


def _run_resolve(args: argparse.Namespace) -> int:
    """Resolve a single position; returns the process exit code."""
    settings = Settings()
    setup_logging(settings.log_level)
    initialize_consumer()

    root = args.root or settings.root
    try:
        result = asyncio.run(
            _resolve_once(
                args.file,
                args.line,
                args.column,
                root,
                settings,
            )
        )
    except SourceTraceError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(result.model_dump_json(by_alias=True, indent=2))
    return 0


async def _resolve_once(
    file: str,
    line: int,
    column: int,
    root: str,
    settings: Settings,
) -> ResolutionResult:
    async with httpx.AsyncClient(
        timeout=settings.fetch_timeout_seconds,
        follow_redirects=True,
    ) as client:
        return await resolve_artifact(
            file,
            line,
            column,
            root,
            client=client,
            module_prefix=settings.module_prefix,
        )


if __name__ == "__main__":
    main()
