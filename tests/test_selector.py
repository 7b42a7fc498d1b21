from __future__ import annotations

from typing import List
import curses
import unittest

from preset_builder.catalog import PresetRecord
from preset_builder.errors import SelectionCancelled, SelectorUnavailableError
from preset_builder.selector import (
    Action,
    AllPresetsSelector,
    ChecklistModel,
    CursesChecklistSelector,
    PROMPT,
    PreviousSelectionSelector,
)


def _presets(*names: str) -> List[PresetRecord]:
    return [PresetRecord(name=name, binary_dir=f"build/{name}") for name in names]


class FakeScreen:
    """Stand-in for a curses window that replays scripted key presses."""

    def __init__(self, keys: List[int], size: tuple[int, int] = (24, 80)) -> None:
        self.keys = list(keys)
        self.size = size
        self.lines: dict[int, str] = {}

    def getmaxyx(self) -> tuple[int, int]:
        return self.size

    def erase(self) -> None:
        self.lines.clear()

    def addnstr(self, y: int, x: int, text: str, n: int, attr: int = 0) -> None:
        height, width = self.size
        if not (0 <= y < height and 0 <= x < width) or x + min(n, len(text)) > width:
            raise curses.error("addnwstr() returned ERR")
        self.lines[y] = text[:n]

    def refresh(self) -> None:
        pass

    def getch(self) -> int:
        return self.keys.pop(0)


def _scripted_wrapper(keys: List[int], screen_size: tuple[int, int] = (24, 80)):
    screens: List[FakeScreen] = []

    def _wrapper(func, *args):
        screen = FakeScreen(keys, screen_size)
        screens.append(screen)
        return func(screen, *args)

    return _wrapper, screens


class ChecklistModelTests(unittest.TestCase):
    def test_prior_selection_is_pre_checked(self) -> None:
        model = ChecklistModel(_presets("X", "Y", "Z"), {"X", "Z"})
        self.assertEqual(model.checked, [True, False, True])
        self.assertEqual(model.rows(), ["[x] X", "[ ] Y", "[x] Z"])

    def test_unknown_prior_names_are_ignored(self) -> None:
        model = ChecklistModel(_presets("X"), {"gone"})
        self.assertEqual(model.chosen(), [])

    def test_confirm_without_changes_returns_prior_in_catalog_order(self) -> None:
        model = ChecklistModel(_presets("X", "Y", "Z"), {"Z", "X"})
        self.assertIs(model.handle_key(ord("\n")), Action.CONFIRM)
        self.assertEqual([p.name for p in model.chosen()], ["X", "Z"])

    def test_toggle_order_does_not_affect_result_order(self) -> None:
        model = ChecklistModel(_presets("A", "B", "C"), set())
        model.jump(2)
        model.toggle()
        model.jump(0)
        model.toggle()
        self.assertEqual([p.name for p in model.chosen()], ["A", "C"])

    def test_cursor_wraps(self) -> None:
        model = ChecklistModel(_presets("A", "B"), set())
        model.handle_key(curses.KEY_UP)
        self.assertEqual(model.cursor, 1)
        model.handle_key(ord("j"))
        self.assertEqual(model.cursor, 0)

    def test_home_and_end(self) -> None:
        model = ChecklistModel(_presets("A", "B", "C"), set())
        model.handle_key(curses.KEY_END)
        self.assertEqual(model.cursor, 2)
        model.handle_key(curses.KEY_HOME)
        self.assertEqual(model.cursor, 0)

    def test_toggle_all_checks_then_clears(self) -> None:
        model = ChecklistModel(_presets("A", "B"), {"A"})
        model.handle_key(ord("a"))
        self.assertEqual(model.checked, [True, True])
        model.handle_key(ord("a"))
        self.assertEqual(model.checked, [False, False])

    def test_space_toggles_current_item(self) -> None:
        model = ChecklistModel(_presets("A", "B"), {"A"})
        model.handle_key(ord(" "))
        self.assertEqual(model.checked, [False, False])

    def test_cancel_keys(self) -> None:
        model = ChecklistModel(_presets("A"), set())
        for key in (ord("q"), 27):
            with self.subTest(key=key):
                self.assertIs(model.handle_key(key), Action.CANCEL)

    def test_empty_model_is_inert(self) -> None:
        model = ChecklistModel([], set())
        model.move(1)
        model.toggle()
        model.toggle_all()
        self.assertEqual(model.chosen(), [])

    def test_labels_use_display_name(self) -> None:
        preset = PresetRecord(name="rel", display_name="Release build", binary_dir="b")
        self.assertEqual(ChecklistModel([preset], {"rel"}).rows(), ["[x] Release build"])


class CursesChecklistSelectorTests(unittest.TestCase):
    def test_confirm_returns_pre_checked_items(self) -> None:
        wrapper, screens = _scripted_wrapper([ord("\n")])
        chosen = CursesChecklistSelector(wrapper).select(_presets("X", "Y", "Z"), {"X", "Z"})
        self.assertEqual([p.name for p in chosen], ["X", "Z"])
        self.assertEqual(screens[0].lines[0], PROMPT)
        self.assertEqual(screens[0].lines[1], "[x] X")
        self.assertEqual(screens[0].lines[2], "[ ] Y")
        self.assertEqual(screens[0].lines[3], "[x] Z")

    def test_keyboard_edits_are_applied(self) -> None:
        keys = [curses.KEY_DOWN, ord(" "), curses.KEY_UP, ord(" "), curses.KEY_RESIZE, ord("\r")]
        wrapper, _ = _scripted_wrapper(keys)
        chosen = CursesChecklistSelector(wrapper).select(_presets("X", "Y", "Z"), {"X", "Z"})
        self.assertEqual([p.name for p in chosen], ["Y", "Z"])

    def test_long_lists_scroll_to_cursor(self) -> None:
        names = [f"p{i}" for i in range(10)]
        keys = [curses.KEY_END, ord(" "), ord("\n")]
        wrapper, screens = _scripted_wrapper(keys, screen_size=(6, 40))
        chosen = CursesChecklistSelector(wrapper).select(_presets(*names), set())
        self.assertEqual([p.name for p in chosen], ["p9"])
        self.assertIn("[x] p9", screens[0].lines.values())

    def test_tiny_windows_still_work(self) -> None:
        for size in [(1, 2), (1, 40), (2, 3), (3, 1), (3, 10)]:
            with self.subTest(size=size):
                keys = [curses.KEY_DOWN, ord(" "), ord("\n")]
                wrapper, _ = _scripted_wrapper(keys, screen_size=size)
                chosen = CursesChecklistSelector(wrapper).select(_presets("X", "Y", "Z"), {"X"})
                self.assertEqual([p.name for p in chosen], ["X", "Y"])

    def test_one_row_window_shows_cursor_row(self) -> None:
        wrapper, screens = _scripted_wrapper([curses.KEY_END, ord("\n")], screen_size=(1, 40))
        CursesChecklistSelector(wrapper).select(_presets("X", "Y", "Z"), set())
        self.assertEqual(screens[0].lines, {0: "[ ] Z"})

    def test_quit_key_cancels(self) -> None:
        wrapper, _ = _scripted_wrapper([ord(" "), ord("q")])
        with self.assertRaises(SelectionCancelled):
            CursesChecklistSelector(wrapper).select(_presets("X"), set())

    def test_keyboard_interrupt_cancels(self) -> None:
        def _wrapper(func, *args):
            raise KeyboardInterrupt

        with self.assertRaises(SelectionCancelled):
            CursesChecklistSelector(_wrapper).select(_presets("X"), set())

    def test_terminal_errors_are_reported(self) -> None:
        def _wrapper(func, *args):
            raise curses.error("setupterm: could not find terminal")

        with self.assertRaises(SelectorUnavailableError) as exc_info:
            CursesChecklistSelector(_wrapper).select(_presets("X"), set())
        self.assertIn("could not find terminal", str(exc_info.exception))


class NonInteractiveSelectorTests(unittest.TestCase):
    def test_all_presets(self) -> None:
        chosen = AllPresetsSelector().select(_presets("A", "B"), {"B"})
        self.assertEqual([p.name for p in chosen], ["A", "B"])

    def test_previous_selection_keeps_catalog_order(self) -> None:
        chosen = PreviousSelectionSelector().select(_presets("A", "B", "C"), {"C", "A", "missing"})
        self.assertEqual([p.name for p in chosen], ["A", "C"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
