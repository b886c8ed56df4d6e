"""Entry point descriptors derived from the build configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union

from .errors import UnsupportedConfigurationError

EntryValue = Union[str, List[str]]
EntryConfig = Union[str, List[str], Mapping[str, EntryValue]]

DEFAULT_ENTRY_NAME = "output"
NAME_PLACEHOLDER = "[name]"


@dataclass(frozen=True)
class EntryDescriptor:
    """One configured entry point and where its bundle is written."""

    name: str
    specifiers: Tuple[str, ...]
    output_directory: Path

    @property
    def specifier(self) -> str:
        return self.specifiers[0]


def normalize_entries(entry: Any) -> Dict[str, Tuple[str, ...]]:
    """Return ``name -> specifiers`` for a supported entry configuration.

    A bare string becomes a single entry called ``output``. Lists of
    specifiers carry no names and dynamic (callable) entries are only known
    at build time; both are rejected.
    """

    if isinstance(entry, str):
        return {DEFAULT_ENTRY_NAME: (entry,)}
    if callable(entry):
        raise UnsupportedConfigurationError(
            "Dynamic entry functions are not supported.",
            reason="dynamic_entry",
        )
    if isinstance(entry, (list, tuple)):
        raise UnsupportedConfigurationError(
            "The behavior of an entry as a string array has not yet been defined.",
            reason="entry_array",
        )
    if isinstance(entry, Mapping) and entry:
        normalized: Dict[str, Tuple[str, ...]] = {}
        for name, value in entry.items():
            if isinstance(value, str):
                normalized[str(name)] = (value,)
            elif isinstance(value, (list, tuple)) and value and all(isinstance(v, str) for v in value):
                normalized[str(name)] = tuple(value)
            else:
                raise UnsupportedConfigurationError(
                    f"Entry {name!r} must be a specifier or a list of specifiers.",
                    reason="entry_value",
                )
        return normalized
    raise UnsupportedConfigurationError(
        "No usable entry configuration found.",
        reason="entry_missing",
    )


def entry_output_directory(output_path: Path, filename_template: str, entry_name: str) -> Path:
    """Directory an entry's bundle is emitted to.

    ``[name]/[name].js`` under ``dist`` gives ``dist/<entry>``; a template
    without a directory component writes straight into ``output_path``.
    """

    rendered = filename_template.replace(NAME_PLACEHOLDER, entry_name)
    subdirectory, sep, _ = rendered.rpartition("/")
    if not sep or not subdirectory:
        return Path(output_path)
    return Path(output_path) / subdirectory


def build_entry_descriptors(
    entry: Any,
    output_path: Path,
    filename_template: str,
) -> List[EntryDescriptor]:
    entries = normalize_entries(entry)
    if len(entries) > 1 and "/" not in filename_template:
        raise UnsupportedConfigurationError(
            "Multiple entry points must be written to separate directories to avoid "
            "conflicts, e.g.: \"output.filename: '[name]/[name].js'\"",
            reason="unsafe_output_layout",
        )
    return [
        EntryDescriptor(
            name=name,
            specifiers=specifiers,
            output_directory=entry_output_directory(output_path, filename_template, name),
        )
        for name, specifiers in entries.items()
    ]
