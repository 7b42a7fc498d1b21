"""Shared helpers for decoding structured configuration documents."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Mapping

import json
import tomllib

import yaml


ConfigLoader = Callable[[Any], Any]


FILE_LOADERS: Dict[str, ConfigLoader] = {
    ".toml": lambda stream: tomllib.load(stream),
    ".json": lambda stream: json.load(stream),
    ".yaml": lambda stream: yaml.safe_load(stream),
    ".yml": lambda stream: yaml.safe_load(stream),
}
"""Mapping of file suffixes to loader callables."""

DEFAULT_SUFFIX = ".json"
"""Suffix whose loader decodes files with an unregistered extension."""


class ConfigDecodeError(ValueError):
    """Raised when a configuration document cannot be decoded."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to parse '{path}': {reason}")
        self.path = path
        self.reason = reason


def register_loader(suffix: str, loader: ConfigLoader) -> None:
    """Register ``loader`` for files ending with ``suffix``."""

    normalized = suffix.lower()
    if not normalized.startswith("."):
        raise ValueError("Suffix must start with '.'")
    FILE_LOADERS[normalized] = loader


def loader_for(path: Path) -> tuple[str, ConfigLoader]:
    suffix = path.suffix.lower()
    if suffix not in FILE_LOADERS:
        suffix = DEFAULT_SUFFIX
    return suffix, FILE_LOADERS[suffix]


def load_config_file(path: Path) -> Mapping[str, Any]:
    """Load and decode a configuration mapping from ``path``.

    :class:`OSError` from opening or reading the file propagates unchanged so
    callers can tell an unreadable file from a malformed one; anything the
    decoder rejects, and a root that is not a mapping, raise
    :class:`ConfigDecodeError`.
    """

    suffix, loader = loader_for(path)
    mode = "rb" if suffix == ".toml" else "r"
    kwargs: Dict[str, Any] = {}
    if mode == "r":
        kwargs["encoding"] = "utf-8"

    with path.open(mode, **kwargs) as handle:
        try:
            data = loader(handle)
        except (ValueError, RecursionError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
            raise ConfigDecodeError(path, str(exc)) from exc

    if not isinstance(data, Mapping):
        raise ConfigDecodeError(path, "document root must be a mapping")

    return data


__all__ = [
    "ConfigDecodeError",
    "ConfigLoader",
    "DEFAULT_SUFFIX",
    "FILE_LOADERS",
    "load_config_file",
    "loader_for",
    "register_loader",
]
