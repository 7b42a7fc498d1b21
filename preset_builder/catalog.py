"""Loading and filtering of CMake configure presets."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Sequence, Tuple
import os
import platform
import re

from core.config_loader import ConfigDecodeError, load_config_file

from .errors import CatalogFormatError, CatalogReadError


PRESETS_KEY = "configurePresets"

_MACRO_PATTERN = re.compile(r"\$(?P<kind>env|penv)?\{(?P<name>[^{}]*)\}")


@dataclass(frozen=True, slots=True)
class PresetRecord:
    """One configure preset as declared in the presets file."""

    name: str
    display_name: str | None = None
    binary_dir: str | None = None
    hidden: bool = False

    @property
    def label(self) -> str:
        return self.display_name if self.display_name is not None else self.name

    @property
    def output_directory(self) -> str | None:
        return self.binary_dir

    @property
    def eligible(self) -> bool:
        return not self.hidden and self.binary_dir is not None


@dataclass(frozen=True, slots=True)
class PresetCatalog:
    path: Path
    working_directory: Path
    presets: Tuple[PresetRecord, ...] = ()
    duplicates: Tuple[str, ...] = field(default=())

    def names(self) -> List[str]:
        return [preset.name for preset in self.presets]


def _optional_string(entry: Mapping[str, Any], key: str, *, index: int) -> str | None:
    value = entry.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{PRESETS_KEY}[{index}].{key} must be a string")
    return value


def _parse_preset(entry: Any, *, index: int) -> PresetRecord:
    if not isinstance(entry, Mapping):
        raise ValueError(f"{PRESETS_KEY}[{index}] must be an object")

    name = entry.get("name")
    if not isinstance(name, str):
        raise ValueError(f"{PRESETS_KEY}[{index}].name is required and must be a string")

    hidden = entry.get("hidden", False)
    if not isinstance(hidden, bool):
        raise ValueError(f"{PRESETS_KEY}[{index}].hidden must be a boolean")

    return PresetRecord(
        name=name,
        display_name=_optional_string(entry, "displayName", index=index),
        binary_dir=_optional_string(entry, "binaryDir", index=index),
        hidden=hidden,
    )


def parse_presets(document: Mapping[str, Any]) -> Tuple[Tuple[PresetRecord, ...], Tuple[str, ...]]:
    """Return the presets declared in ``document`` and the names seen twice.

    The first record with a given name wins; later records are dropped.
    """

    raw_presets = document.get(PRESETS_KEY)
    if raw_presets is None:
        raise ValueError(f"missing '{PRESETS_KEY}' list")
    if isinstance(raw_presets, (str, bytes)) or not isinstance(raw_presets, Sequence):
        raise ValueError(f"'{PRESETS_KEY}' must be a list")

    presets: List[PresetRecord] = []
    duplicates: List[str] = []
    seen: set[str] = set()
    for index, entry in enumerate(raw_presets):
        preset = _parse_preset(entry, index=index)
        if preset.name in seen:
            if preset.name not in duplicates:
                duplicates.append(preset.name)
            continue
        seen.add(preset.name)
        presets.append(preset)
    return tuple(presets), tuple(duplicates)


def load_catalog(path: Path | str) -> PresetCatalog:
    """Read the presets file at ``path``.

    Raises :class:`CatalogReadError` when the file or its directory cannot be
    accessed and :class:`CatalogFormatError` when the content is not a presets
    document.
    """

    presets_path = Path(path).expanduser()
    try:
        working_directory = presets_path.absolute().parent.resolve(strict=True)
    except OSError as exc:
        raise CatalogReadError(presets_path, f"cannot resolve directory: {exc}") from exc

    try:
        document = load_config_file(presets_path)
    except ConfigDecodeError as exc:
        raise CatalogFormatError(presets_path, exc.reason) from exc
    except OSError as exc:
        raise CatalogReadError(presets_path, exc.strerror or str(exc)) from exc

    try:
        presets, duplicates = parse_presets(document)
    except ValueError as exc:
        raise CatalogFormatError(presets_path, str(exc)) from exc

    return PresetCatalog(
        path=presets_path,
        working_directory=working_directory,
        presets=presets,
        duplicates=duplicates,
    )


def eligible_presets(catalog: PresetCatalog) -> List[PresetRecord]:
    """Presets that may be offered for building, in catalog order."""

    return [preset for preset in catalog.presets if preset.eligible]


def expand_binary_dir(
    preset: PresetRecord,
    source_dir: Path,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Expand the preset macros CMake allows inside ``binaryDir``.

    ``cmake --build`` takes the directory literally, so macros must be
    substituted here. Unknown macros are kept as written.
    """

    if preset.binary_dir is None:
        raise ValueError(f"Preset '{preset.name}' has no binaryDir")

    env = os.environ if environ is None else environ
    values = {
        "sourceDir": str(source_dir),
        "sourceParentDir": str(source_dir.parent),
        "sourceDirName": source_dir.name,
        "presetName": preset.name,
        "hostSystemName": platform.system(),
        "pathListSep": os.pathsep,
        "dollar": "$",
    }

    def _replace(match: re.Match[str]) -> str:
        kind = match.group("kind")
        name = match.group("name")
        if kind:
            return env.get(name, "")
        return values.get(name, match.group(0))

    return _MACRO_PATTERN.sub(_replace, preset.binary_dir)


__all__ = [
    "PRESETS_KEY",
    "PresetCatalog",
    "PresetRecord",
    "eligible_presets",
    "expand_binary_dir",
    "load_catalog",
    "parse_presets",
]
