"""
Build plugin that packs each entry point with the dependencies it uses.

During the ``finish_modules`` phase every externally resolved module is
attributed to the entries that transitively require it. When the build is
``done``, each entry's dependency set is expanded with peer dependencies,
written as ``package.json`` next to the entry bundle and installed there.
Entries are processed concurrently; any failure fails the whole hook.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .attribution import AttributionResult, attribute_dependencies
from .config import PackerOptions
from .entries import EntryDescriptor, build_entry_descriptors
from .errors import UnsupportedConfigurationError
from .filesystem import LocalOutputFileSystem
from .graph import ModuleGraph
from .host import BuildStats, Compilation, Compiler
from .install import InstallOrchestrator
from .manifest import FileSystemManifestStore, ManifestResolver, ManifestStore, ManifestWriter
from .observability import PLUGIN_NAME, get_logger, log_event
from .peers import PeerDependencyExpander
from .runner import CommandRunner, SubprocessRunner


class DependencyPackerPlugin:
    """Emits and installs a minimal ``package.json`` per entry point."""

    name = PLUGIN_NAME

    def __init__(
        self,
        options: Union[PackerOptions, Mapping[str, Any], None] = None,
        *,
        manifest_store: Optional[ManifestStore] = None,
        runner: Optional[CommandRunner] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if options is None:
            options = PackerOptions()
        elif not isinstance(options, PackerOptions):
            options = PackerOptions.model_validate(dict(options))
        self.options = options
        self.package_manager = options.package_manager
        self.resolver = ManifestResolver(manifest_store or FileSystemManifestStore(options.manifest_filename))
        self.runner = runner or SubprocessRunner()
        self.logger = logger or get_logger(__name__)

        self.active = False
        self.project_name: Optional[str] = None
        self.entries: List[EntryDescriptor] = []
        self.written: Dict[str, Dict[str, str]] = {}
        self._attribution: Optional[AttributionResult] = None
        self._writer: Optional[ManifestWriter] = None
        self._expander: Optional[PeerDependencyExpander] = None
        self._installer: Optional[InstallOrchestrator] = None

    def apply(self, compiler: Compiler) -> bool:
        """Tap into *compiler*; returns ``False`` when the plugin stays inert."""
        build = compiler.options
        output_path = Path(build.output.path)
        if not output_path.is_absolute():
            output_path = Path(build.context) / output_path

        try:
            entries = build_entry_descriptors(build.entry, output_path, build.output.filename)
        except UnsupportedConfigurationError as exc:
            unsafe = exc.reason == "unsafe_output_layout"
            log_event(
                self.logger,
                logging.WARNING if unsafe else logging.INFO,
                "unsafe_output_layout" if unsafe else "unsupported_entry",
                exc.message,
                reason=exc.reason,
            )
            return False

        filesystem = compiler.output_filesystem
        if not isinstance(filesystem, LocalOutputFileSystem):
            log_event(
                self.logger,
                logging.INFO,
                "unsupported_filesystem",
                "Dependency packing only works for LocalOutputFileSystem.",
                filesystem=type(filesystem).__name__,
            )
            return False

        project_dir = self.options.cwd or build.context
        project = self.resolver.resolve(project_dir)
        # Unnamed projects take the name of the directory holding their manifest.
        self.project_name = project.name or (project.path.parent.name if project.path else Path(project_dir).name)
        self.entries = entries

        self._writer = ManifestWriter(filesystem, logger=self.logger)
        self._expander = PeerDependencyExpander(
            self.package_manager, runner=self.runner, filesystem=filesystem, logger=self.logger
        )
        self._installer = InstallOrchestrator(self.package_manager, runner=self.runner, logger=self.logger)

        compiler.hooks.compilation.tap(self.name, self.on_compilation)
        compiler.hooks.done.tap_promise(self.name, self.on_done)
        self.active = True
        return True

    def on_compilation(self, compilation: Compilation) -> None:
        compilation.hooks.finish_modules.tap(self.name, self.on_finish_modules)

    def on_finish_modules(self, modules) -> None:
        self._attribution = attribute_dependencies(
            ModuleGraph(modules),
            self.resolver,
            self.entries,
            logger=self.logger,
        )

    async def _prepare_entry(self, entry: EntryDescriptor) -> None:
        attribution = self._attribution or AttributionResult()
        dependencies = await self._expander.expand(entry, attribution.for_entry(entry.name))
        await self._writer.write(entry, self.project_name, dependencies)
        self.written[entry.name] = dependencies

    async def on_done(self, stats: BuildStats) -> None:
        self.written = {}
        try:
            await self._installer.install_all(self.entries, self._prepare_entry)
        finally:
            self._attribution = None
