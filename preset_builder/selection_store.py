"""Persistence of the presets chosen on the previous run."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, List, TypeVar
import json
import os
import tempfile

from core.console import Console

from .errors import SelectionWriteError


SELECTION_FILENAME = ".preset-selection.json"
SELECTED_KEY = "selected"

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class SelectionState:
    selected_names: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, names: Iterable[str]) -> "SelectionState":
        return cls(frozenset(names))

    def names(self) -> List[str]:
        return sorted(self.selected_names)

    def __contains__(self, name: object) -> bool:
        return name in self.selected_names

    def __len__(self) -> int:
        return len(self.selected_names)


def selection_path(directory: Path) -> Path:
    """Location of the remembered selection for presets in ``directory``."""

    return directory / SELECTION_FILENAME


def best_effort(
    action: Callable[[], T],
    default: Callable[[], T],
    *,
    console: Console | None = None,
    what: str = "operation",
) -> T:
    """Run ``action``; on an I/O or decoding failure return ``default()``.

    This is the one place where failures are turned into a fallback value.
    """

    try:
        return action()
    except (OSError, ValueError, TypeError, RecursionError) as exc:
        if console is not None:
            console.debug(f"Ignoring failed {what}: {exc}")
        return default()


def _parse_selection(document: Any) -> SelectionState:
    if not isinstance(document, dict):
        raise ValueError("selection document must be an object")
    names = document.get(SELECTED_KEY)
    if not isinstance(names, list) or not all(isinstance(name, str) for name in names):
        raise ValueError(f"'{SELECTED_KEY}' must be a list of strings")
    return SelectionState.of(names)


def load_selection(path: Path) -> SelectionState:
    """Strict reader; raises on a missing or malformed file."""

    with path.open("r", encoding="utf-8") as handle:
        return _parse_selection(json.load(handle))


def read_selection(path: Path, *, console: Console | None = None) -> SelectionState:
    """Previously chosen preset names, or an empty state if none can be read."""

    state = best_effort(
        lambda: load_selection(path),
        SelectionState,
        console=console,
        what=f"read of '{path}'",
    )
    if console is not None and state:
        console.debug(f"Previously selected presets: {', '.join(state.names())}")
    return state


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_selection(path: Path, names: Iterable[str]) -> Path:
    """Replace the file at ``path`` with ``names``.

    The document is written to a sibling temporary file first and moved into
    place, so a reader sees either the old or the new content.
    """

    state = SelectionState.of(names)
    payload = json.dumps({SELECTED_KEY: state.names()}, indent=2) + "\n"

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f"{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(payload)
        # NamedTemporaryFile creates 0600; give the result the usual umask-derived mode.
        temp_path.chmod(0o666 & ~_current_umask())
        os.replace(temp_path, path)
    except OSError as exc:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise SelectionWriteError(path, exc.strerror or str(exc)) from exc
    return path


__all__ = [
    "SELECTION_FILENAME",
    "SelectionState",
    "best_effort",
    "load_selection",
    "read_selection",
    "selection_path",
    "write_selection",
]
