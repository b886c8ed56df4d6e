"""
Peer dependency expansion.

For every dependency of an entry pinned to a concrete version the package
manager is asked for that version's ``peerDependencies``; the answers are
merged into the entry's dependency set. Peer-declared ranges take precedence
over the range recorded from the project manifest.
"""

from __future__ import annotations

import json
import logging
from typing import Dict, List, Mapping, Optional, Tuple

from .entries import EntryDescriptor
from .errors import PeerQueryError, PeerQueryMalformedResponse
from .filesystem import LocalOutputFileSystem, OutputFileSystem
from .observability import get_logger, log_event
from .runner import CommandRunner, SubprocessRunner, gather_all
from .versions import VersionRange

# Metadata key npm adds to some --json answers.
RESPONSE_METADATA_KEYS = ("type",)


def parse_peer_response(package: str, output: str) -> Dict[str, str]:
    """Parse the JSON printed by ``<pm> info <pkg> peerDependencies --json``.

    Raises :class:`PeerQueryMalformedResponse` when the output is not a JSON
    object.
    """

    try:
        data = json.loads(output)
    except json.JSONDecodeError as exc:
        raise PeerQueryMalformedResponse(package, output) from exc
    if not isinstance(data, dict):
        raise PeerQueryMalformedResponse(package, output)
    return {
        name: spec
        for name, spec in data.items()
        if name not in RESPONSE_METADATA_KEYS and isinstance(spec, str)
    }


class PeerDependencyExpander:
    """Merges registry-declared peer dependencies into an entry's set."""

    def __init__(
        self,
        package_manager: str = "npm",
        *,
        runner: Optional[CommandRunner] = None,
        filesystem: Optional[OutputFileSystem] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.package_manager = package_manager
        self.runner = runner or SubprocessRunner()
        self.filesystem = filesystem or LocalOutputFileSystem()
        self.logger = logger or get_logger(__name__)

    def query_command(self, package: str, version_range: VersionRange) -> List[str]:
        return [
            self.package_manager,
            "info",
            f"{package}@{version_range.version}",
            "peerDependencies",
            "--json",
        ]

    async def query(self, entry: EntryDescriptor, package: str, version_range: VersionRange) -> Dict[str, str]:
        """Peer dependencies of *package* at the version pinned by *version_range*."""
        command = self.query_command(package, version_range)
        cwd = entry.output_directory
        try:
            result = await self.runner.run(command, cwd)
        except OSError as exc:
            raise PeerQueryError(
                f"Could not run '{' '.join(command)}': {exc}",
                command=command,
                cwd=cwd,
            ) from exc
        if not result.ok:
            raise PeerQueryError(
                f"'{' '.join(command)}' exited with status {result.returncode}",
                command=command,
                cwd=cwd,
                returncode=result.returncode,
                stderr=result.stderr,
            )

        if not result.stdout.strip():
            log_event(
                self.logger,
                logging.DEBUG,
                "peer_query_empty",
                f"{package}@{version_range.version} declares no peer dependencies.",
                entry=entry.name,
                package=package,
            )
            return {}
        try:
            return parse_peer_response(package, result.stdout)
        except PeerQueryMalformedResponse as exc:
            log_event(
                self.logger,
                logging.WARNING,
                "peer_query_malformed",
                f"{exc.message}; assuming it has none.",
                entry=entry.name,
                package=package,
                output=result.stdout[:200],
            )
            return {}

    async def expand(self, entry: EntryDescriptor, dependencies: Mapping[str, str]) -> Dict[str, str]:
        """Return *dependencies* with the peer dependencies of each package merged in.

        Queries for one entry run concurrently. The first failing query
        propagates; queries already started are left to finish.
        """

        candidates: List[Tuple[str, VersionRange]] = []
        for package, spec in dependencies.items():
            version_range = VersionRange.parse(spec)
            if version_range is None:
                log_event(
                    self.logger,
                    logging.DEBUG,
                    "peer_query_skipped",
                    f"{package}@{spec} is not pinned to a concrete version; not querying peers.",
                    entry=entry.name,
                    package=package,
                )
                continue
            candidates.append((package, version_range))

        expanded = dict(dependencies)
        if not candidates:
            return expanded

        await self.filesystem.mkdirp(entry.output_directory)
        answers = await gather_all(
            *(self.query(entry, package, version_range) for package, version_range in candidates)
        )
        for peers in answers:
            expanded.update(peers)
        return expanded
