"""Interactive CMake preset picker that configures and builds the chosen presets."""

from .catalog import PresetCatalog, PresetRecord, eligible_presets, load_catalog
from .cli import main

__all__ = ["PresetCatalog", "PresetRecord", "eligible_presets", "load_catalog", "main"]
