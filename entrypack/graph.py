"""
Module reference graph and entry-point attribution.

The build host hands over a flat list of modules where each module points
back at the module that caused its inclusion (``issuer``) and at every edge
that references it (``reasons``). :class:`ModuleGraph` indexes that list by
identifier; :class:`EntryAttributor` walks the back-references from an
externally resolved module up to the graph roots, i.e. the modules an entry
point included directly.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Set

from .builtins import is_builtin_module
from .errors import EntrypackError


@dataclass(frozen=True)
class Reason:
    """Why a module was included; ``module`` is ``None`` for entry inclusions."""

    module: Optional[str] = None


@dataclass
class ModuleNode:
    """A module of the build's reference graph."""

    identifier: str
    request: Optional[str] = None
    raw_request: Optional[str] = None
    context: Optional[str] = None
    issuer: Optional[str] = None
    reasons: List[Reason] = field(default_factory=list)

    @property
    def is_external(self) -> bool:
        """Externally resolved modules carry no raw request of their own."""
        return not self.raw_request

    @property
    def is_root(self) -> bool:
        return any(reason.module is None for reason in self.reasons)


class ModuleGraph:
    """Index over the modules of one compilation."""

    def __init__(self, modules: Iterable[ModuleNode] = ()):
        self._nodes: Dict[str, ModuleNode] = {}
        for module in modules:
            self._nodes[module.identifier] = module

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[ModuleNode]:
        return iter(self._nodes.values())

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._nodes

    def get(self, identifier: Optional[str]) -> Optional[ModuleNode]:
        if identifier is None:
            return None
        return self._nodes.get(identifier)

    def issuer_of(self, module: ModuleNode) -> Optional[ModuleNode]:
        return self.get(module.issuer)

    def referrers(self, module: ModuleNode) -> List[ModuleNode]:
        """Modules referencing *module*, in reason order, without duplicates."""
        seen: Set[str] = set()
        result = []
        for reason in module.reasons:
            parent = self.get(reason.module)
            if parent is not None and parent.identifier not in seen:
                seen.add(parent.identifier)
                result.append(parent)
        return result

    def external_modules(self) -> List[ModuleNode]:
        """Externally resolved modules that some other module issued."""
        return [
            module
            for module in self._nodes.values()
            if module.is_external and module.issuer is not None and module.request
        ]

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> ModuleGraph:
        """Build a graph from a stats document ``{"modules": [...]}``."""
        raw_modules = payload.get("modules")
        if not isinstance(raw_modules, list):
            raise EntrypackError("Module graph must contain a 'modules' list", code="EP009")

        modules = []
        for raw in raw_modules:
            if not isinstance(raw, Mapping) or "identifier" not in raw:
                raise EntrypackError(f"Malformed module entry: {raw!r}", code="EP009")
            reasons = [
                Reason(module=reason.get("moduleIdentifier"))
                for reason in raw.get("reasons") or []
                if isinstance(reason, Mapping)
            ]
            modules.append(
                ModuleNode(
                    identifier=str(raw["identifier"]),
                    request=raw.get("request"),
                    raw_request=raw.get("rawRequest"),
                    context=raw.get("context"),
                    issuer=raw.get("issuer"),
                    reasons=reasons,
                )
            )
        return cls(modules)

    @classmethod
    def load(cls, path: Path) -> ModuleGraph:
        with Path(path).open("r", encoding="utf-8") as handle:
            return cls.from_json(json.load(handle))


class EntryAttributor:
    """Determines which entry points transitively require a module."""

    def __init__(self, graph: ModuleGraph, is_builtin: Callable[[str], bool] = is_builtin_module):
        self.graph = graph
        self.is_builtin = is_builtin

    def entry_requests(self, module: ModuleNode) -> List[str]:
        """Raw requests of every root reachable backwards from *module*.

        A root is a module with a reason that names no referencing module; its
        raw request is the entry specifier it was included by. Each module is
        expanded at most once, so shared ancestors and cycles cost nothing
        extra and every root is reported once.
        """

        found: Dict[str, None] = {}
        visited = {module.identifier}
        stack = [module]
        while stack:
            node = stack.pop()
            if node.is_root and node.raw_request:
                found.setdefault(node.raw_request, None)
            for parent in self.graph.referrers(node):
                if parent.identifier not in visited:
                    visited.add(parent.identifier)
                    stack.append(parent)
        return list(found)

    def attribute(self) -> Dict[str, Set[str]]:
        """Map each entry specifier to the external requests reachable from it."""
        attributed: Dict[str, Set[str]] = {}
        for module in self.graph.external_modules():
            if self.is_builtin(module.request):
                continue
            for entry_request in self.entry_requests(module):
                attributed.setdefault(entry_request, set()).add(module.request)
        return attributed
