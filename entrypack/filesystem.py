"""Output filesystems the build host writes through."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, Protocol, runtime_checkable


@runtime_checkable
class OutputFileSystem(Protocol):
    """Write side of a build's output filesystem."""

    async def mkdirp(self, path: Path) -> None:
        """Create *path* and any missing parents."""

    async def write_text(self, path: Path, text: str) -> None:
        """Persist *text* as UTF-8 at *path*, replacing any previous content."""


class LocalOutputFileSystem:
    """Default filesystem backed by the local disk."""

    async def mkdirp(self, path: Path) -> None:
        await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)

    async def write_text(self, path: Path, text: str) -> None:
        target = Path(path)
        await self.mkdirp(target.parent)
        await asyncio.to_thread(target.write_text, text, encoding="utf-8")


class MemoryOutputFileSystem:
    """In-memory filesystem, useful for dry builds."""

    def __init__(self) -> None:
        self.files: Dict[Path, str] = {}
        self.directories: set[Path] = set()

    async def mkdirp(self, path: Path) -> None:
        self.directories.add(Path(path))

    async def write_text(self, path: Path, text: str) -> None:
        self.directories.add(Path(path).parent)
        self.files[Path(path)] = text
