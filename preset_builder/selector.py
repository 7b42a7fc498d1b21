"""Choosing which eligible presets to build."""
from __future__ import annotations

from enum import Enum
from typing import AbstractSet, Callable, List, Sequence
import curses

from .catalog import PresetRecord
from .errors import SelectionCancelled, SelectorUnavailableError


PROMPT = "Select presets to build"
HELP_LINE = "space: toggle  a: all/none  enter: confirm  q/esc: cancel"

_ESCAPE = 27
_ENTER_KEYS = (curses.KEY_ENTER, ord("\n"), ord("\r"))


class Action(Enum):
    NONE = "none"
    CONFIRM = "confirm"
    CANCEL = "cancel"


class PresetSelector:
    """Maps the eligible presets and the previous choice to this run's choice.

    Implementations return a subset of ``eligible`` in the order given.
    """

    def select(
        self,
        eligible: Sequence[PresetRecord],
        previously_selected: AbstractSet[str],
    ) -> List[PresetRecord]:
        raise NotImplementedError


class AllPresetsSelector(PresetSelector):
    def select(
        self,
        eligible: Sequence[PresetRecord],
        previously_selected: AbstractSet[str],
    ) -> List[PresetRecord]:
        return list(eligible)


class PreviousSelectionSelector(PresetSelector):
    """Repeat the previous run's choice without asking."""

    def select(
        self,
        eligible: Sequence[PresetRecord],
        previously_selected: AbstractSet[str],
    ) -> List[PresetRecord]:
        return [preset for preset in eligible if preset.name in previously_selected]


class ChecklistModel:
    """Checklist state independent of any terminal."""

    def __init__(self, items: Sequence[PresetRecord], previously_selected: AbstractSet[str]):
        self.items: List[PresetRecord] = list(items)
        self.checked: List[bool] = [item.name in previously_selected for item in self.items]
        self.cursor = 0

    def __len__(self) -> int:
        return len(self.items)

    def move(self, delta: int) -> None:
        if self.items:
            self.cursor = (self.cursor + delta) % len(self.items)

    def jump(self, index: int) -> None:
        if self.items:
            self.cursor = max(0, min(index, len(self.items) - 1))

    def toggle(self, index: int | None = None) -> None:
        if not self.items:
            return
        position = self.cursor if index is None else index
        self.checked[position] = not self.checked[position]

    def toggle_all(self) -> None:
        target = not all(self.checked)
        self.checked = [target] * len(self.items)

    def chosen(self) -> List[PresetRecord]:
        return [item for item, checked in zip(self.items, self.checked) if checked]

    def handle_key(self, key: int) -> Action:
        if key in (curses.KEY_UP, ord("k")):
            self.move(-1)
        elif key in (curses.KEY_DOWN, ord("j")):
            self.move(1)
        elif key == curses.KEY_HOME:
            self.jump(0)
        elif key == curses.KEY_END:
            self.jump(len(self.items) - 1)
        elif key == ord(" "):
            self.toggle()
        elif key in (ord("a"), ord("A")):
            self.toggle_all()
        elif key in _ENTER_KEYS:
            return Action.CONFIRM
        elif key in (ord("q"), ord("Q"), _ESCAPE):
            return Action.CANCEL
        return Action.NONE

    def rows(self) -> List[str]:
        return [
            f"[{'x' if checked else ' '}] {item.label}"
            for item, checked in zip(self.items, self.checked)
        ]


def _put(stdscr: "curses._CursesWindow", y: int, x: int, text: str, attr: int) -> None:
    height, width = stdscr.getmaxyx()
    # Leave the last column free; writing the bottom-right cell is an error in curses.
    room = width - x - 1
    if 0 <= y < height and room > 0:
        stdscr.addnstr(y, x, text, room, attr)


def _draw(stdscr: "curses._CursesWindow", model: ChecklistModel, scroll: int) -> int:
    height, _ = stdscr.getmaxyx()
    stdscr.erase()

    # Windows shorter than three rows show only checklist rows.
    chrome = height >= 3
    top = 1 if chrome else 0
    body_height = max(1, height - 2 if chrome else height)

    if model.cursor < scroll:
        scroll = model.cursor
    elif model.cursor >= scroll + body_height:
        scroll = model.cursor - body_height + 1

    if chrome:
        _put(stdscr, 0, 0, PROMPT, curses.A_BOLD)
        _put(stdscr, height - 1, 0, HELP_LINE, curses.A_DIM)

    for offset, row in enumerate(model.rows()[scroll:scroll + body_height]):
        index = scroll + offset
        attr = curses.A_REVERSE if index == model.cursor else curses.A_NORMAL
        _put(stdscr, top + offset, 2, row, attr)

    stdscr.refresh()
    return scroll


def run_checklist(stdscr: "curses._CursesWindow", model: ChecklistModel) -> List[PresetRecord] | None:
    """Drive ``model`` from keyboard input; ``None`` means cancelled."""

    try:
        curses.curs_set(0)
    except curses.error:
        pass  # terminal cannot hide the cursor
    scroll = 0
    while True:
        scroll = _draw(stdscr, model, scroll)
        key = stdscr.getch()
        if key == curses.KEY_RESIZE:
            continue
        action = model.handle_key(key)
        if action is Action.CONFIRM:
            return model.chosen()
        if action is Action.CANCEL:
            return None


class CursesChecklistSelector(PresetSelector):
    """Full-screen checklist, pre-checked with the previous choice."""

    def __init__(self, wrapper: Callable[..., List[PresetRecord] | None] = curses.wrapper):
        self._wrapper = wrapper

    def select(
        self,
        eligible: Sequence[PresetRecord],
        previously_selected: AbstractSet[str],
    ) -> List[PresetRecord]:
        model = ChecklistModel(eligible, previously_selected)
        try:
            chosen = self._wrapper(run_checklist, model)
        except KeyboardInterrupt as exc:
            raise SelectionCancelled("Selection cancelled by user") from exc
        except curses.error as exc:
            raise SelectorUnavailableError(f"Interactive terminal required: {exc}") from exc
        if chosen is None:
            raise SelectionCancelled("Selection cancelled by user")
        return chosen


__all__ = [
    "Action",
    "AllPresetsSelector",
    "ChecklistModel",
    "CursesChecklistSelector",
    "HELP_LINE",
    "PROMPT",
    "PresetSelector",
    "PreviousSelectionSelector",
    "run_checklist",
]
