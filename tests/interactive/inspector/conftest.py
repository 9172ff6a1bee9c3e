"""
どこで: tests/interactive/inspector/conftest.py。
何を: pyimgui の呼び出しを記録し、戻り値を台本で差し替える偽 `imgui` モジュールを提供する。
なぜ: ウィンドウ/GL を作らずに、ウィジェットの type ディスパッチと更新値を検証するため。
"""

from __future__ import annotations

import sys
from types import ModuleType
from typing import Any, Callable

import pytest


class FakeImgui(ModuleType):
    """呼び出しを `calls` に記録する偽 imgui。

    `script(name, result, label=...)` で次の呼び出し結果を積む。
    label を指定した場合は、第 1 引数に label を含む呼び出しにだけ使う。
    """

    INPUT_TEXT_CHARS_DECIMAL = 1
    COLOR_EDIT_UINT8 = 2
    COLOR_EDIT_DISPLAY_HEX = 4
    WINDOW_NO_RESIZE = 8
    WINDOW_NO_COLLAPSE = 16
    WINDOW_NO_MOVE = 32
    ALWAYS = 1
    ONCE = 2

    def __init__(self) -> None:
        super().__init__("imgui")
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self._scripts: list[tuple[str, str | None, Any]] = []
        self.open_headers: set[str] = set()

    def script(self, name: str, result: Any, *, label: str | None = None) -> None:
        self._scripts.append((name, label, result))

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def labels(self, name: str) -> list[Any]:
        return [c[1][0] for c in self.calls if c[0] == name and c[1]]

    def _take(self, name: str, args: tuple[Any, ...]) -> tuple[bool, Any]:
        first = str(args[0]) if args else ""
        for i, (n, label, result) in enumerate(self._scripts):
            if n != name:
                continue
            if label is not None and label not in first:
                continue
            del self._scripts[i]
            return True, result
        return False, None

    def _call(self, name: str, default: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        self.calls.append((name, args, kwargs))
        found, result = self._take(name, args)
        if found:
            return result
        return default(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        defaults: dict[str, Callable[..., Any]] = {
            "input_text": lambda label, value, *a, **k: (False, value),
            "input_text_multiline": lambda label, value, *a, **k: (False, value),
            "checkbox": lambda label, state, *a, **k: (False, state),
            "begin_combo": lambda *a, **k: False,
            "selectable": lambda label, selected=False, *a, **k: (False, selected),
            "radio_button": lambda *a, **k: False,
            "button": lambda *a, **k: False,
            "small_button": lambda *a, **k: False,
            "slider_int": lambda label, value, *a, **k: (False, value),
            "slider_float": lambda label, value, *a, **k: (False, value),
            "color_edit3": lambda label, r, g, b, *a, **k: (False, (r, g, b)),
            "collapsing_header": lambda label, *a, **k: (
                any(h in str(label) for h in self.open_headers),
                None,
            ),
            "get_text_line_height": lambda *a, **k: 14.0,
            "is_item_hovered": lambda *a, **k: False,
            "begin_child": lambda *a, **k: True,
        }
        default = defaults.get(name, lambda *a, **k: None)

        def _fn(*args: Any, **kwargs: Any) -> Any:
            return self._call(name, default, *args, **kwargs)

        return _fn


@pytest.fixture
def fake_imgui(monkeypatch: pytest.MonkeyPatch) -> FakeImgui:
    fake = FakeImgui()
    monkeypatch.setitem(sys.modules, "imgui", fake)
    return fake
