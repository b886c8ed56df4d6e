"""Semantic versions and the version-range operators understood by peer expansion."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

SEMVER_PATTERN = re.compile(
    r"^v?(\d+)\.(\d+)\.(\d+)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)

RANGE_PATTERN = re.compile(r"^(?P<op>\^|~|=)?\s*(?P<version>.+)$")


@dataclass(frozen=True)
class SemVer:
    """Semantic version."""

    major: int
    minor: int
    patch: int
    pre_release: Optional[str] = None
    build: Optional[str] = None

    @classmethod
    def parse(cls, version: str) -> SemVer:
        """Parse semantic version string."""
        match = SEMVER_PATTERN.match(version.strip())
        if not match:
            raise ValueError(f"Invalid semantic version: {version}")

        major, minor, patch, pre_release, build = match.groups()
        return cls(
            major=int(major),
            minor=int(minor),
            patch=int(patch),
            pre_release=pre_release,
            build=build,
        )

    @classmethod
    def is_valid(cls, version: str) -> bool:
        return SEMVER_PATTERN.match(version.strip()) is not None

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release:
            version += f"-{self.pre_release}"
        if self.build:
            version += f"+{self.build}"
        return version


class RangeOperator(str, Enum):
    """Operators a concrete version range may carry."""

    CARET = "^"
    TILDE = "~"
    EXACT = ""

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class VersionRange:
    """A version range anchored on one concrete semantic version.

    Only the forms ``1.2.3``, ``=1.2.3``, ``^1.2.3`` and ``~1.2.3`` are
    concrete; everything else a manifest may hold (``>=1``, ``*``, tags, URLs)
    has no single version to query the registry with.
    """

    operator: RangeOperator
    version: SemVer
    raw: str

    @classmethod
    def parse(cls, text: str) -> Optional[VersionRange]:
        """Return the parsed range, or ``None`` when *text* is not concrete."""
        match = RANGE_PATTERN.match(text.strip())
        if not match:
            return None
        op = match.group("op") or ""
        try:
            version = SemVer.parse(match.group("version"))
        except ValueError:
            return None
        operator = RangeOperator.EXACT if op in ("", "=") else RangeOperator(op)
        return cls(operator=operator, version=version, raw=text)

    def __str__(self) -> str:
        return f"{self.operator}{self.version}"
