"""Error types raised by the preset builder."""
from __future__ import annotations

from pathlib import Path


class PresetBuilderError(RuntimeError):
    """Base class for every failure the command line reports."""


class CatalogReadError(PresetBuilderError):
    """Raised when the presets file cannot be read."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to read presets file '{path}': {reason}")
        self.path = path


class CatalogFormatError(PresetBuilderError):
    """Raised when the presets file does not have the expected shape."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid presets file '{path}': {reason}")
        self.path = path
        self.reason = reason


class SelectionWriteError(PresetBuilderError):
    """Raised when the remembered selection cannot be saved."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to save preset selection to '{path}': {reason}")
        self.path = path


class SelectionCancelled(PresetBuilderError):
    """Raised when the user leaves the checklist without confirming."""


class SelectorUnavailableError(PresetBuilderError):
    """Raised when the interactive checklist cannot run in this terminal."""


class StepError(PresetBuilderError):
    """A configure or build step of one preset failed."""

    phase = ""

    def __init__(self, preset: str, detail: str):
        super().__init__(f"CMake {self.phase} step failed for preset '{preset}': {detail}")
        self.preset = preset
        self.detail = detail


class ConfigureError(StepError):
    phase = "configure"


class BuildError(StepError):
    phase = "build"


__all__ = [
    "BuildError",
    "CatalogFormatError",
    "CatalogReadError",
    "ConfigureError",
    "PresetBuilderError",
    "SelectionCancelled",
    "SelectionWriteError",
    "SelectorUnavailableError",
    "StepError",
]
