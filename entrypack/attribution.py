"""The "modules finished" pass: which packages each entry point needs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .builtins import is_builtin_module
from .entries import EntryDescriptor
from .errors import MissingDependencyDeclaration
from .graph import EntryAttributor, ModuleGraph
from .manifest import ManifestResolver, resolve_dependency_name
from .observability import get_logger, log_event

DependencySet = Dict[str, str]


class DependencyAccumulator:
    """Entry name -> {package name -> version range}, filled during one pass."""

    def __init__(self) -> None:
        self._entries: Dict[str, DependencySet] = {}
        self._frozen = False

    def record(self, entry: str, package: str, version_range: str) -> None:
        if self._frozen:
            raise RuntimeError("Cannot record dependencies after the attribution pass finished")
        self._entries.setdefault(entry, {})[package] = version_range

    def freeze(self) -> Dict[str, DependencySet]:
        self._frozen = True
        return {entry: dict(packages) for entry, packages in self._entries.items()}


@dataclass
class AttributionResult:
    """Outcome of one attribution pass."""

    dependencies: Dict[str, DependencySet] = field(default_factory=dict)
    missing: List[MissingDependencyDeclaration] = field(default_factory=list)

    def for_entry(self, entry_name: str) -> DependencySet:
        return dict(self.dependencies.get(entry_name, {}))


def _entry_names_by_specifier(entries: Iterable[EntryDescriptor]) -> Mapping[str, List[str]]:
    names: Dict[str, List[str]] = {}
    for entry in entries:
        for specifier in entry.specifiers:
            names.setdefault(specifier, []).append(entry.name)
    return names


def attribute_dependencies(
    graph: ModuleGraph,
    resolver: ManifestResolver,
    entries: Iterable[EntryDescriptor],
    *,
    logger: Optional[logging.Logger] = None,
    is_builtin: Callable[[str], bool] = is_builtin_module,
) -> AttributionResult:
    """Attribute every external module of *graph* to the entries requiring it.

    The version range recorded is the one declared by the manifest nearest to
    the issuing module. Modules whose package is not declared there are
    reported in :attr:`AttributionResult.missing` and skipped.
    """

    logger = logger or get_logger(__name__)
    names_by_specifier = _entry_names_by_specifier(entries)
    attributor = EntryAttributor(graph, is_builtin=is_builtin)
    accumulator = DependencyAccumulator()
    missing: List[MissingDependencyDeclaration] = []

    for module in graph.external_modules():
        if is_builtin(module.request):
            log_event(logger, logging.DEBUG, "builtin_skipped", f"{module.request} is a builtin module.", request=module.request)
            continue

        issuer = graph.issuer_of(module)
        if issuer is None or not issuer.context:
            continue

        manifest = resolver.resolve(issuer.context)
        package = resolve_dependency_name(module.request, manifest.dependencies)
        if package is None:
            missing.append(MissingDependencyDeclaration(module.request, manifest.path))
            log_event(
                logger,
                logging.WARNING,
                "missing_dependency",
                f"{module.request} was requested, but is not listed in dependencies! Skipping...",
                request=module.request,
                manifest=str(manifest.path) if manifest.path else None,
            )
            continue

        for entry_request in attributor.entry_requests(module):
            for entry_name in names_by_specifier.get(entry_request, ()):
                accumulator.record(entry_name, package, manifest.dependencies[package])

    return AttributionResult(dependencies=accumulator.freeze(), missing=missing)
