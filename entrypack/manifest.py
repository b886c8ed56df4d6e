"""
Package manifest lookup, dependency-name resolution and per-entry manifest output.

Manifests are read through a :class:`ManifestStore` so the ancestor walk can
run against the real filesystem or an in-memory tree. The resolver caches
every directory it visits, since all modules under one project re-discover
the same manifest.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol

from .entries import EntryDescriptor
from .errors import InvalidManifestError, ManifestNotFoundError
from .filesystem import OutputFileSystem
from .observability import get_logger, log_event

MANIFEST_FILENAME = "package.json"


@dataclass(frozen=True)
class PackageManifest:
    """The parts of a package.json the packer needs."""

    name: Optional[str]
    dependencies: Mapping[str, str] = field(default_factory=dict)
    path: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: Optional[Path] = None) -> PackageManifest:
        if not isinstance(data, Mapping):
            raise InvalidManifestError(f"Manifest {path} is not a JSON object")
        raw_dependencies = data.get("dependencies") or {}
        if not isinstance(raw_dependencies, Mapping):
            raise InvalidManifestError(f"'dependencies' in {path} must be an object")
        dependencies = {str(name): str(spec) for name, spec in raw_dependencies.items()}
        name = data.get("name")
        return cls(name=str(name) if name is not None else None, dependencies=dependencies, path=path)


class ManifestStore(Protocol):
    """Backing store the resolver reads manifests from."""

    def load(self, directory: Path) -> Optional[PackageManifest]:
        """Return the manifest located directly in *directory*, if any."""


class FileSystemManifestStore:
    """Reads ``package.json`` files from disk."""

    def __init__(self, filename: str = MANIFEST_FILENAME):
        self.filename = filename

    def load(self, directory: Path) -> Optional[PackageManifest]:
        manifest_path = Path(directory) / self.filename
        if not manifest_path.is_file():
            return None
        try:
            data = json.loads(manifest_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise InvalidManifestError(f"Could not parse {manifest_path}: {exc}") from exc
        return PackageManifest.from_dict(data, path=manifest_path)


class InMemoryManifestStore:
    """Manifests keyed by directory, for tests and dry runs."""

    def __init__(self, manifests: Optional[Mapping[str | Path, Mapping[str, Any]]] = None):
        self._manifests: Dict[Path, PackageManifest] = {}
        for directory, data in (manifests or {}).items():
            self.add(directory, data)

    def add(self, directory: str | Path, data: Mapping[str, Any]) -> None:
        key = _normalize(directory)
        self._manifests[key] = PackageManifest.from_dict(data, path=key / MANIFEST_FILENAME)

    def load(self, directory: Path) -> Optional[PackageManifest]:
        return self._manifests.get(_normalize(directory))


def _normalize(directory: str | Path) -> Path:
    return Path(os.path.normpath(os.path.abspath(directory)))


class ManifestResolver:
    """Finds the nearest ancestor manifest of a directory."""

    def __init__(self, store: Optional[ManifestStore] = None):
        self.store = store or FileSystemManifestStore()
        self._cache: Dict[Path, PackageManifest] = {}

    def resolve(self, directory: str | Path) -> PackageManifest:
        start = _normalize(directory)
        visited = []
        for candidate in (start, *start.parents):
            cached = self._cache.get(candidate)
            if cached is not None:
                manifest = cached
                break
            visited.append(candidate)
            manifest = self.store.load(candidate)
            if manifest is not None:
                break
        else:
            raise ManifestNotFoundError(start)

        for path in visited:
            self._cache[path] = manifest
        return manifest

    def clear_cache(self) -> None:
        self._cache.clear()


def resolve_dependency_name(request: str, declared: Mapping[str, str]) -> Optional[str]:
    """Map a module specifier onto the package name declared for it.

    Trailing path segments are dropped until a declared name matches, so
    ``lodash/fp/pick`` resolves to ``lodash`` and ``@babel/runtime/helpers/x``
    to ``@babel/runtime``. Returns ``None`` when nothing matches.
    """

    name = request
    while name and name not in declared:
        name = name.rpartition("/")[0]
    return name or None


def render_entry_manifest(project_name: Optional[str], entry_name: str, dependencies: Mapping[str, str]) -> str:
    payload = {
        "name": f"{project_name}-{entry_name}",
        "dependencies": dict(dependencies),
    }
    return json.dumps(payload, indent=2)


class ManifestWriter:
    """Writes the per-entry ``package.json`` next to the entry bundle."""

    def __init__(
        self,
        filesystem: OutputFileSystem,
        *,
        filename: str = MANIFEST_FILENAME,
        logger: Optional[logging.Logger] = None,
    ):
        self.filesystem = filesystem
        self.filename = filename
        self.logger = logger or get_logger(__name__)

    async def write(
        self,
        entry: EntryDescriptor,
        project_name: Optional[str],
        dependencies: Mapping[str, str],
    ) -> Path:
        target = Path(entry.output_directory) / self.filename
        await self.filesystem.write_text(target, render_entry_manifest(project_name, entry.name, dependencies))
        log_event(
            self.logger,
            logging.DEBUG,
            "manifest_written",
            f"Wrote {target} with {len(dependencies)} dependencies.",
            entry=entry.name,
            path=str(target),
        )
        return target
