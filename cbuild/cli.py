"""CLI entrypoints for cbuild commands."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from .builder import build
from .bundlers import load_bundler_factory
from .config import load_config
from .errors import CBuildError
from .logging import configure_logging
from .models import BuildResult
from .report import format_tree, make_tree


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
        prog="cbuild",
        description="Bundle a package and its node_modules dependencies, emitting a loader config.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Bundle the package in a directory.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    build_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the package root (defaults to current directory).",
    )
    build_parser.add_argument(
        "-s",
        "--source",
        dest="source_path",
        help="Main source file to bundle (defaults to browser or main in package.json).",
    )
    build_parser.add_argument(
        "-o",
        "--out",
        dest="bundle_path",
        help="Bundled file to output.",
    )
    build_parser.add_argument(
        "-C",
        "--out-config",
        dest="out_config_path",
        help="Output config mapping package names to their main source files.",
    )
    build_parser.add_argument(
        "-I",
        "--include-config",
        dest="include_config_list",
        action="append",
        default=[],
        metavar="PATH",
        help="Merge another config file into the output config (repeatable).",
    )
    build_parser.add_argument(
        "-m",
        "--map",
        dest="map_packages",
        action="append",
        default=[],
        metavar="PACKAGE",
        help="Map an additional package in the output config (repeatable).",
    )
    build_parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        default=None,
        help="Use the development process shim.",
    )
    build_parser.add_argument(
        "--static",
        dest="sfx",
        action="store_true",
        default=None,
        help="Create a static self-executing bundle.",
    )
    build_parser.add_argument(
        "--bundler",
        help="Bundling engine factory as module:attr (defaults to the installed plugin).",
    )
    build_parser.add_argument(
        "--tree",
        action="store_true",
        help="Print the shortest import chain to each bundled file.",
    )

    tree_parser = subparsers.add_parser(
        "tree",
        help="Print the dependency tree of a saved bundle result.",
    )
    _add_verbose_option(tree_parser, suppress_default=True)
    tree_parser.add_argument(
        "result",
        help="Path to a JSON bundle result.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for cbuild commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "build":
        try:
            tree = _run_build(args)
        except (CBuildError, OSError, ValueError) as exc:
            parser.exit(1, f"cbuild build failed: {exc}\nRun with --verbose for more details.\n")
        if tree is not None:
            print(tree)
    elif args.command == "tree":
        try:
            payload = json.loads(Path(args.result).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            parser.exit(1, f"Cannot read bundle result: {exc}\n")
        if not isinstance(payload, dict):
            parser.exit(1, "Bundle result must be a JSON object\n")
        print(format_tree(make_tree(BuildResult.from_dict(payload))))
    elif args.command == "serve":  # pragma: no cover - integration path
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_build(args: argparse.Namespace) -> str | None:
    base_path = Path(args.path).expanduser().resolve()
    config = load_config(base_path)
    options = config.to_options(
        debug=args.debug,
        sfx=args.sfx,
        bundle_path=_absolute(args.bundle_path),
        source_path=_absolute(args.source_path),
        out_config_path=_absolute(args.out_config_path),
        include_config_list=[_absolute(path) for path in args.include_config_list],
        map_packages=list(args.map_packages),
    )
    factory = load_bundler_factory(args.bundler or config.bundler)
    outcome = asyncio.run(build(str(base_path), options, bundler_factory=factory))
    if args.tree:
        return format_tree(make_tree(outcome.result))
    return None


def _absolute(path: str | None) -> str | None:
    if path is None:
        return None
    return str(Path(path).expanduser().resolve())


if __name__ == "__main__":
    main(sys.argv[1:])
