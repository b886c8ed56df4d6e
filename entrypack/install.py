"""Concurrent package installation, one package-manager process per entry."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, List, Optional

from .entries import EntryDescriptor
from .errors import InstallError
from .observability import get_logger, log_event
from .runner import CommandRunner, SubprocessRunner, gather_all

PrepareEntry = Callable[[EntryDescriptor], Awaitable[object]]


class InstallOrchestrator:
    """Runs ``<pm> install`` in each entry's output directory."""

    def __init__(
        self,
        package_manager: str = "npm",
        *,
        runner: Optional[CommandRunner] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.package_manager = package_manager
        self.runner = runner or SubprocessRunner()
        self.logger = logger or get_logger(__name__)

    def install_command(self) -> List[str]:
        return [self.package_manager, "install"]

    async def install(self, entry: EntryDescriptor) -> None:
        command = self.install_command()
        cwd = entry.output_directory
        log_event(
            self.logger,
            logging.INFO,
            "installing",
            f"Installing packages for {entry.name}...",
            entry=entry.name,
        )
        try:
            result = await self.runner.run(command, cwd)
        except OSError as exc:
            raise InstallError(
                f"Could not run '{' '.join(command)}' for {entry.name}: {exc}",
                command=command,
                cwd=cwd,
            ) from exc
        if not result.ok:
            raise InstallError(
                f"'{' '.join(command)}' failed for {entry.name} with status {result.returncode}",
                command=command,
                cwd=cwd,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        log_event(
            self.logger,
            logging.DEBUG,
            "installed",
            f"Installed packages for {entry.name}.",
            entry=entry.name,
        )

    async def _prepare_and_install(self, entry: EntryDescriptor, prepare: Optional[PrepareEntry]) -> None:
        if prepare is not None:
            await prepare(entry)
        await self.install(entry)

    async def install_all(
        self,
        entries: Iterable[EntryDescriptor],
        prepare: Optional[PrepareEntry] = None,
    ) -> None:
        """Install every entry concurrently and wait for all of them.

        ``prepare(entry)`` is awaited before that entry's install starts. The
        first failure, in preparation or install, is raised once every other
        entry has settled; nothing is cancelled or rolled back.
        """

        await gather_all(*(self._prepare_and_install(entry, prepare) for entry in entries))
        log_event(
            self.logger,
            logging.INFO,
            "finished",
            "Finished installing packages for all entry points.",
        )
