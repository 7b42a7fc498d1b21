"""Shared core utilities for running external tools and loading configuration."""

from .command_runner import (
    CommandResult,
    CommandRunner,
    RecordingCommandRunner,
    SubprocessCommandRunner,
)
from .config_loader import (
    ConfigDecodeError,
    ConfigLoader,
    FILE_LOADERS,
    load_config_file,
    register_loader,
)
from .console import Console

__all__ = [
    "CommandResult",
    "CommandRunner",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
    "ConfigDecodeError",
    "ConfigLoader",
    "FILE_LOADERS",
    "load_config_file",
    "register_loader",
    "Console",
]
