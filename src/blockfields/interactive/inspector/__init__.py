# どこで: `src/blockfields/interactive/inspector/__init__.py`。
# 何を: ブロックインスペクタの公開 API を集約する。
# なぜ: 実装を責務ごとに分割しつつ、利用側の import パスを安定させるため。

from __future__ import annotations

from .editor import BlockEditor, draw_session
from .panels import PanelBlock, panel_blocks, render_panels
from .pyglet_backend import create_inspector_window
from .widgets import WidgetContext, render_field_widget, widget_registry

__all__ = [
    "BlockEditor",
    "PanelBlock",
    "WidgetContext",
    "create_inspector_window",
    "draw_session",
    "panel_blocks",
    "render_field_widget",
    "render_panels",
    "widget_registry",
]
