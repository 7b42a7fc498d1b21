"""Sequential configure-and-build execution of the chosen presets."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Mapping, TextIO
import sys

from core.command_runner import CommandResult, CommandRunner
from core.console import Console

from .catalog import PresetRecord, expand_binary_dir
from .errors import BuildError, ConfigureError, StepError


DEFAULT_CMAKE = "cmake"


class Phase(Enum):
    CONFIGURE = "configure"
    BUILD = "build"


@dataclass(frozen=True, slots=True)
class BuildFailure:
    """The step that stopped the run."""

    preset: PresetRecord
    phase: Phase
    returncode: int | None = None
    launch_error: str | None = None

    @property
    def detail(self) -> str:
        if self.launch_error is not None:
            return f"failed to launch CMake: {self.launch_error}"
        return f"CMake exited with code {self.returncode}"

    def to_error(self) -> StepError:
        error_type = ConfigureError if self.phase is Phase.CONFIGURE else BuildError
        return error_type(self.preset.label, self.detail)


@dataclass(slots=True)
class BuildReport:
    completed: List[PresetRecord] = field(default_factory=list)
    failure: BuildFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def raise_for_failure(self) -> None:
        if self.failure is not None:
            raise self.failure.to_error()


def configure_command(preset: PresetRecord, *, cmake: str = DEFAULT_CMAKE) -> List[str]:
    return [cmake, "--preset", preset.name]


def build_command(
    preset: PresetRecord,
    source_dir: Path,
    *,
    cmake: str = DEFAULT_CMAKE,
    environ: Mapping[str, str] | None = None,
) -> List[str]:
    return [cmake, "--build", expand_binary_dir(preset, source_dir, environ)]


class BuildDriver:
    """Runs configure then build for each preset and stops at the first failure."""

    def __init__(
        self,
        runner: CommandRunner,
        working_directory: Path,
        *,
        cmake: str = DEFAULT_CMAKE,
        console: Console | None = None,
        output: TextIO | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.runner = runner
        self.working_directory = working_directory
        self.cmake = cmake
        self.console = console or Console()
        self._output = output
        self._environ = environ

    def _announce(self, preset: PresetRecord) -> None:
        print(f"\n=== {preset.label} ===", file=self._output or sys.stdout, flush=True)

    def _step(self, preset: PresetRecord, phase: Phase, command: List[str]) -> BuildFailure | None:
        self.console.debug(f"Running {phase.value} step: {self.runner.format_command(command)}")
        try:
            result: CommandResult = self.runner.run(
                command,
                cwd=self.working_directory,
                note=f"{phase.value.capitalize()} preset '{preset.name}'",
            )
        except OSError as exc:
            return BuildFailure(preset=preset, phase=phase, launch_error=exc.strerror or str(exc))
        if result.returncode != 0:
            return BuildFailure(preset=preset, phase=phase, returncode=result.returncode)
        return None

    def run(self, chosen: Iterable[PresetRecord]) -> BuildReport:
        report = BuildReport()
        for preset in chosen:
            self._announce(preset)

            failure = self._step(preset, Phase.CONFIGURE, configure_command(preset, cmake=self.cmake))
            if failure is None:
                command = build_command(
                    preset,
                    self.working_directory,
                    cmake=self.cmake,
                    environ=self._environ,
                )
                failure = self._step(preset, Phase.BUILD, command)

            if failure is not None:
                self.console.debug(f"Stopping after failed {failure.phase.value} step of '{preset.name}'")
                report.failure = failure
                return report

            self.console.info(f"Preset '{preset.name}' built successfully")
            report.completed.append(preset)
        return report


__all__ = [
    "BuildDriver",
    "BuildFailure",
    "BuildReport",
    "DEFAULT_CMAKE",
    "Phase",
    "build_command",
    "configure_command",
]
