"""Leveled console output shared by the command line tools."""
from __future__ import annotations

from typing import TextIO
import sys


class Console:
    """Simple console output handler with configurable log level.

    Levels: none < error < info < debug
    Default: 'none' (no output)
    """

    LEVELS = {
        "none": 0,
        "error": 1,
        "info": 2,
        "debug": 3,
    }

    def __init__(
        self,
        level: str = "none",
        dry_run: bool = False,
        *,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ):
        self.level_name = level
        self.level = self.LEVELS.get(level, 0)
        self.dry_run = dry_run
        self._stdout = stdout
        self._stderr = stderr

    @property
    def out(self) -> TextIO:
        return self._stdout or sys.stdout

    @property
    def err(self) -> TextIO:
        return self._stderr or sys.stderr

    def enabled(self, level: str) -> bool:
        return self.level >= self.LEVELS[level]

    def info(self, message: str) -> None:
        if self.enabled("info"):
            print(f"[INFO] {message}", file=self.out)

    def error(self, message: str) -> None:
        if self.enabled("error"):
            print(f"[ERROR] {message}", file=self.err)

    def dry(self, message: str) -> None:
        if self.dry_run:
            print(f"[DRY] {message}", file=self.out)

    def debug(self, message: str) -> None:
        if self.enabled("debug"):
            print(f"[DEBUG] {message}", file=self.out)

    def fatal(self, message: str) -> None:
        # Fatal messages ignore the level so failures are never silent.
        print(f"Error: {message}", file=self.err)


__all__ = ["Console"]
