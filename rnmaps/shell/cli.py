"""rnmaps CLI entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List

from ..combinator import ComposerConfig
from ..errors import SourceMapError
from .commands import build_registry
from .context import ShellContext
from .repl import ShellREPL

LOG = logging.getLogger("rnmaps.shell.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compose a bundle source map with the source maps of its intermediate files",
    )
    parser.add_argument("bundle_map", type=Path, help="Source map of the bundle (e.g. index.android.bundle.map)")
    parser.add_argument("-o", "--output", type=Path, help="Write the composed map here instead of stdout")
    parser.add_argument(
        "--vendored-marker",
        default="node_modules",
        help="Sources containing this path segment are never looked up (default node_modules)",
    )
    parser.add_argument(
        "--no-sibling-maps",
        action="store_true",
        help="Only follow sourceMappingURL comments; do not try <file>.map",
    )
    parser.add_argument(
        "--sources-content",
        action="store_true",
        help="Carry sourcesContent of rewritten sources into the composed map",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON output for shell commands")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("RNMAPS_LOG", "WARNING"),
        help="Logging level (default WARNING, or $RNMAPS_LOG)",
    )
    parser.add_argument("-i", "--interactive", action="store_true", help="Open the lookup shell after composing")
    parser.add_argument(
        "-c",
        "--command",
        help="Execute a single shell command non-interactively (quote the command string)",
    )
    parser.add_argument(
        "--history",
        type=Path,
        default=Path.home() / ".rnmaps-history",
        help="Path to the shell history file",
    )
    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    ctx = ShellContext(
        json_output=args.json,
        config=ComposerConfig(
            vendored_marker=args.vendored_marker,
            try_sibling_maps=not args.no_sibling_maps,
            include_sources_content=args.sources_content,
        ),
    )
    try:
        ctx.load_bundle(args.bundle_map)
    except (OSError, SourceMapError) as exc:
        LOG.error("cannot compose %s: %s", args.bundle_map, exc)
        return 1

    if args.output:
        args.output.write_text(ctx.dumps() + "\n", encoding="utf-8")
        LOG.info("wrote %s", args.output)

    registry = build_registry()
    if args.command:
        repl = ShellREPL(ctx, registry)
        try:
            return repl.dispatch(args.command)
        except SystemExit as exc:
            return int(exc.code or 0)
    if args.interactive:
        repl = ShellREPL(ctx, registry, history_path=args.history)
        try:
            return repl.run()
        except KeyboardInterrupt:
            print()
            return 0
    if not args.output:
        sys.stdout.write(ctx.dumps() + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
