"""Unified error model for entrypack."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class EntrypackError(Exception):
    """Base class for all errors surfaced by the dependency packer."""

    code: Optional[str] = None
    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if hint is not None:
            self.hint = hint

    def format(self) -> str:
        components = [self.message]
        if self.code:
            components[-1] = f"{components[-1]} ({self.code})"
        if self.hint:
            components.append(f"Hint: {self.hint}")
        return " ".join(part for part in components if part)


class ManifestNotFoundError(EntrypackError):
    """Raised when the filesystem root is reached without finding a manifest."""

    code = "EP001"
    hint = "Every module directory must live below a package.json."

    def __init__(self, directory: Path, filename: str = "package.json") -> None:
        super().__init__(f"No {filename} found in {directory} or any parent directory")
        self.directory = directory
        self.filename = filename


class InvalidManifestError(EntrypackError):
    """Raised when a manifest exists but is not a JSON object."""

    code = "EP008"


class MissingDependencyDeclaration(EntrypackError):
    """A required package is not declared in the nearest manifest."""

    code = "EP002"

    def __init__(self, request: str, manifest_path: Optional[Path] = None) -> None:
        super().__init__(f"{request} was requested, but is not listed in dependencies")
        self.request = request
        self.manifest_path = manifest_path


class ConfigError(EntrypackError):
    """Raised when an entrypack configuration file is invalid."""

    code = "EP007"


class UnsupportedConfigurationError(EntrypackError):
    """Build configuration the packer cannot work with."""

    code = "EP006"

    def __init__(self, message: str, *, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


class CommandError(EntrypackError):
    """An external command could not be spawned or exited non-zero."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        cwd: Optional[Path] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command)
        self.cwd = cwd
        self.returncode = returncode
        self.stderr = stderr


class PeerQueryError(CommandError):
    """The registry peer-dependency query failed."""

    code = "EP003"


class PeerQueryMalformedResponse(EntrypackError):
    """The registry query succeeded but its output is not a JSON object."""

    code = "EP004"

    def __init__(self, package: str, output: str) -> None:
        super().__init__(f"Could not parse peerDependencies of {package}")
        self.package = package
        self.output = output


class InstallError(CommandError):
    """The package manager install command failed."""

    code = "EP005"


__all__ = [
    "EntrypackError",
    "ManifestNotFoundError",
    "InvalidManifestError",
    "MissingDependencyDeclaration",
    "ConfigError",
    "UnsupportedConfigurationError",
    "CommandError",
    "PeerQueryError",
    "PeerQueryMalformedResponse",
    "InstallError",
]
