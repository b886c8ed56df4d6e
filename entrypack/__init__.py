"""
entrypack: per-entry dependency packing for bundled applications.

A bundler produces one artefact per entry point but the surrounding project
declares a single dependency set. entrypack walks the build's module graph to
find which declared packages each entry actually reaches, adds their peer
dependencies, and writes and installs a minimal ``package.json`` beside every
entry bundle.

The code is organised into several modules:

* ``graph`` – the module reference graph and entry attribution.
* ``manifest`` – nearest-manifest lookup, package-name resolution and the
  per-entry manifest writer.
* ``attribution`` – the pass run when the build's modules are finished.
* ``peers`` and ``install`` – registry queries and package installation.
* ``plugin`` – the build plugin wiring both phases into a ``host.Compiler``.
* ``cli`` – ``entrypack attribute`` / ``entrypack pack``.
"""

__version__ = "0.3.0"

from .attribution import AttributionResult, DependencyAccumulator, attribute_dependencies
from .config import EntrypackConfig, PackerOptions, load_config
from .entries import EntryDescriptor
from .errors import (
    EntrypackError,
    InstallError,
    ManifestNotFoundError,
    MissingDependencyDeclaration,
    PeerQueryError,
    PeerQueryMalformedResponse,
    UnsupportedConfigurationError,
)
from .graph import EntryAttributor, ModuleGraph, ModuleNode, Reason
from .host import BuildOptions, Compiler, OutputOptions
from .install import InstallOrchestrator
from .manifest import ManifestResolver, ManifestWriter, PackageManifest, resolve_dependency_name
from .peers import PeerDependencyExpander
from .plugin import DependencyPackerPlugin

__all__ = [
    "__version__",
    "AttributionResult",
    "BuildOptions",
    "Compiler",
    "DependencyAccumulator",
    "DependencyPackerPlugin",
    "EntryAttributor",
    "EntryDescriptor",
    "EntrypackConfig",
    "EntrypackError",
    "InstallError",
    "InstallOrchestrator",
    "ManifestNotFoundError",
    "ManifestResolver",
    "ManifestWriter",
    "MissingDependencyDeclaration",
    "ModuleGraph",
    "ModuleNode",
    "OutputOptions",
    "PackageManifest",
    "PackerOptions",
    "PeerDependencyExpander",
    "PeerQueryError",
    "PeerQueryMalformedResponse",
    "Reason",
    "UnsupportedConfigurationError",
    "attribute_dependencies",
    "load_config",
    "resolve_dependency_name",
]
