"""
Minimal build host.

Only the surface the dependency packer relies on is modelled: the build
options, the output filesystem, and the ``compilation`` / ``finish_modules``
/ ``done`` hooks fired in that order by :meth:`Compiler.run`.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

from .filesystem import LocalOutputFileSystem, OutputFileSystem
from .graph import ModuleNode
from .hooks import AsyncSeriesHook, SyncHook

DEFAULT_FILENAME_TEMPLATE = "[name].js"


@dataclass
class OutputOptions:
    path: Path = Path("dist")
    filename: str = DEFAULT_FILENAME_TEMPLATE


@dataclass
class BuildOptions:
    """Build configuration shared with plugins."""

    entry: Any = "./src/index.js"
    context: Path = field(default_factory=Path.cwd)
    output: OutputOptions = field(default_factory=OutputOptions)


@dataclass
class BuildStats:
    modules: int
    start_time: float
    end_time: float
    entries: List[str] = field(default_factory=list)

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


class CompilationHooks:
    def __init__(self) -> None:
        self.finish_modules = SyncHook()


class Compilation:
    """One pass over the module graph."""

    def __init__(self, compiler: Compiler):
        self.compiler = compiler
        self.hooks = CompilationHooks()
        self.modules: List[ModuleNode] = []


class CompilerHooks:
    def __init__(self) -> None:
        self.compilation = SyncHook()
        self.done = AsyncSeriesHook()


class Compiler:
    """Drives the hooks of a build for an already resolved module list."""

    def __init__(self, options: BuildOptions, output_filesystem: Optional[OutputFileSystem] = None):
        self.options = options
        self.output_filesystem = output_filesystem or LocalOutputFileSystem()
        self.hooks = CompilerHooks()

    async def run(self, modules: Iterable[ModuleNode]) -> BuildStats:
        start = time.time()
        compilation = Compilation(self)
        self.hooks.compilation.call(compilation)

        compilation.modules = list(modules)
        compilation.hooks.finish_modules.call(compilation.modules)

        entry = self.options.entry
        stats = BuildStats(
            modules=len(compilation.modules),
            start_time=start,
            end_time=time.time(),
            entries=list(entry) if isinstance(entry, Mapping) else [],
        )
        await self.hooks.done.promise(stats)
        return stats
