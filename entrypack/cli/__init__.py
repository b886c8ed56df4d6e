"""
entrypack command line interface.

``entrypack attribute`` prints which packages each entry point needs;
``entrypack pack`` additionally writes and installs the per-entry manifests.
Both read the build description from ``entrypack.toml`` and the module graph
from a stats JSON file.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from entrypack import __version__
from entrypack.attribution import attribute_dependencies
from entrypack.config import EntrypackConfig, load_config
from entrypack.entries import build_entry_descriptors
from entrypack.errors import EntrypackError
from entrypack.graph import ModuleGraph
from entrypack.host import Compiler
from entrypack.manifest import FileSystemManifestStore, ManifestResolver
from entrypack.observability import configure_console_logging
from entrypack.plugin import DependencyPackerPlugin

LOG_LEVEL_ENV = "ENTRYPACK_LOG_LEVEL"


def _load(args: argparse.Namespace) -> tuple[EntrypackConfig, ModuleGraph]:
    config = load_config(args.config)
    graph_path = Path(args.graph)
    if not graph_path.is_file():
        raise EntrypackError(f"Module graph not found: {graph_path}", code="EP009")
    try:
        graph = ModuleGraph.load(graph_path)
    except json.JSONDecodeError as exc:
        raise EntrypackError(f"Could not parse {graph_path}: {exc}", code="EP009") from exc
    return config, graph


def cmd_attribute(args: argparse.Namespace) -> int:
    config, graph = _load(args)
    build = config.build_options()
    options = config.packer_options()
    entries = build_entry_descriptors(build.entry, build.output.path, build.output.filename)
    resolver = ManifestResolver(FileSystemManifestStore(options.manifest_filename))
    result = attribute_dependencies(graph, resolver, entries)

    payload = {entry.name: result.for_entry(entry.name) for entry in entries}
    print(json.dumps(payload, indent=2, sort_keys=True))
    return 0


def cmd_pack(args: argparse.Namespace) -> int:
    config, graph = _load(args)
    compiler = Compiler(config.build_options())
    plugin = DependencyPackerPlugin(config.packer_options())
    if not plugin.apply(compiler):
        return 0
    asyncio.run(compiler.run(list(graph)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="entrypack",
        description="Pack each bundle entry point with only the dependencies it uses.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warn", "warning", "error"],
        default=None,
        help=f"Diagnostic verbosity (default: ${LOG_LEVEL_ENV} or info)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, func, help_text in (
        ("attribute", cmd_attribute, "Print the dependencies attributed to each entry"),
        ("pack", cmd_pack, "Write and install a package.json for each entry"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--config", "-c", default="entrypack.toml", help="Path to entrypack.toml or pyproject.toml")
        sub.add_argument("--graph", "-g", required=True, help="Module graph stats JSON")
        sub.set_defaults(func=func)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_console_logging(args.log_level or os.getenv(LOG_LEVEL_ENV, "info"))
    try:
        return args.func(args)
    except EntrypackError as exc:
        print(f"Error: {exc.format()}", file=sys.stderr)
        return 1


__all__ = ["build_parser", "cmd_attribute", "cmd_pack", "main"]
