"""Utilities for executing external tools with optional dry-run support."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence
import shlex
import subprocess


@dataclass
class CommandResult:
    """Represents the outcome of an executed command."""

    command: Sequence[str]
    returncode: int


def format_command(command: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(part)) for part in command)


class CommandRunner:
    """Abstract command runner interface.

    Output of the child goes straight to the terminal. ``run`` reports the
    exit status and raises :class:`OSError` when the executable cannot be
    launched at all.
    """

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        note: str | None = None,
    ) -> CommandResult:
        raise NotImplementedError

    def format_command(self, command: Sequence[str]) -> str:
        return format_command(command)


class SubprocessCommandRunner(CommandRunner):
    """Command runner that executes commands via :mod:`subprocess`."""

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        note: str | None = None,
    ) -> CommandResult:
        process = subprocess.run(
            list(command),
            cwd=str(cwd) if cwd else None,
            check=False,
        )
        return CommandResult(command=command, returncode=process.returncode)


@dataclass(slots=True)
class RecordedCommand:
    command: List[str]
    cwd: str | None
    note: str | None


class RecordingCommandRunner(CommandRunner):
    """Command runner that records commands instead of executing them.

    ``returncodes`` optionally scripts the exit status of successive calls,
    which lets callers rehearse failures without spawning anything. Once the
    script is exhausted every further command succeeds.
    """

    def __init__(self, returncodes: Iterable[int] | None = None) -> None:
        self.commands: List[RecordedCommand] = []
        self._returncodes: List[int] = list(returncodes or [])

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        note: str | None = None,
    ) -> CommandResult:
        self.commands.append(
            RecordedCommand(
                command=list(command),
                cwd=str(cwd) if cwd else None,
                note=note,
            )
        )
        returncode = self._returncodes.pop(0) if self._returncodes else 0
        return CommandResult(command=command, returncode=returncode)

    def iter_formatted(self, *, workspace: Path | None = None) -> Iterable[str]:
        default_cwd = str(workspace) if workspace else None
        for record in self.commands:
            cmd = self.format_command(record.command)
            cwd = record.cwd or default_cwd
            parts: List[str] = ["[dry-run]"]
            if record.note:
                parts.append(record.note)
            if cwd:
                parts.append(f"(cwd={cwd})")
            parts.append(cmd)
            yield " ".join(parts)


__all__ = [
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "SubprocessCommandRunner",
    "format_command",
]
