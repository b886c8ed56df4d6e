"""Configuration for the dependency packer and the build it plugs into."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError
from .host import DEFAULT_FILENAME_TEMPLATE, BuildOptions, OutputOptions

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - older interpreters
    import tomli as tomllib  # type: ignore

CONFIG_FILENAME = "entrypack.toml"
PACKAGE_MANAGER_ENV = "ENTRYPACK_PACKAGE_MANAGER"


class PackerOptions(BaseModel):
    """Options accepted by :class:`~entrypack.plugin.DependencyPackerPlugin`."""

    model_config = ConfigDict(extra="forbid")

    package_manager: str = Field(default="npm", min_length=1)
    cwd: Optional[Path] = None
    # Project manifests are read under this name; entry manifests are always package.json.
    manifest_filename: str = "package.json"


class OutputSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: Path = Path("dist")
    filename: str = DEFAULT_FILENAME_TEMPLATE


class BuildSection(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entry: Union[str, List[str], Dict[str, Union[str, List[str]]]]
    context: Optional[Path] = None
    output: OutputSection = Field(default_factory=OutputSection)


class EntrypackConfig(BaseModel):
    """Resolved contents of an ``entrypack.toml``."""

    options: PackerOptions = Field(default_factory=PackerOptions)
    build: BuildSection
    root: Path = Field(default_factory=Path.cwd)

    def build_options(self) -> BuildOptions:
        context = _anchor(self.root, self.build.context) or self.root
        return BuildOptions(
            entry=self.build.entry,
            context=context,
            output=OutputOptions(
                path=_anchor(context, self.build.output.path),
                filename=self.build.output.filename,
            ),
        )

    def packer_options(self) -> PackerOptions:
        return self.options.model_copy(update={"cwd": _anchor(self.root, self.options.cwd)})


def _anchor(base: Path, path: Optional[Path]) -> Optional[Path]:
    if path is None:
        return None
    return path if path.is_absolute() else base / path


def _extract_tables(data: Mapping[str, Any], source: Path) -> Mapping[str, Any]:
    """Bring ``[tool.entrypack]`` into the ``entrypack.toml`` shape."""
    if source.name != "pyproject.toml":
        return data
    tool = data.get("tool", {})
    if not isinstance(tool, Mapping) or not isinstance(tool.get("entrypack"), Mapping):
        raise ConfigError(f"{source} has no [tool.entrypack] table")
    table = dict(tool["entrypack"])
    build = table.pop("build", None)
    return {"entrypack": table, "build": build}


def parse_config(data: Mapping[str, Any], root: Path) -> EntrypackConfig:
    """Validate raw TOML tables; ``root`` anchors relative paths."""
    options = dict(data.get("entrypack") or {})
    override = os.getenv(PACKAGE_MANAGER_ENV)
    if override:
        options["package_manager"] = override
    try:
        return EntrypackConfig.model_validate({"options": options, "build": data.get("build"), "root": root})
    except ValidationError as exc:
        raise ConfigError(f"Invalid entrypack configuration: {exc}") from exc


def load_config(path: Optional[Union[str, Path]] = None) -> EntrypackConfig:
    """Load ``entrypack.toml`` (or ``[tool.entrypack]`` in ``pyproject.toml``)."""
    source = Path(path) if path is not None else Path.cwd() / CONFIG_FILENAME
    if not source.is_file():
        raise ConfigError(f"Configuration file not found: {source}")
    try:
        with source.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Could not parse {source}: {exc}") from exc
    return parse_config(_extract_tables(data, source), root=source.parent.absolute())
