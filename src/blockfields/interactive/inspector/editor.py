# どこで: `src/blockfields/interactive/inspector/editor.py`。
# 何を: 1 ブロックの attribute を pyimgui で編集するインスペクタ（初期化/1フレーム描画/破棄）を提供する。
# なぜ: 依存の重いライフサイクル管理を 1 箇所に閉じ込め、パネル描画やコアを純粋に保つため。

from __future__ import annotations

import time
from typing import Any

from blockfields.core.block_registry import block_registry
from blockfields.core.choice_sources import ChoiceSources
from blockfields.core.fields.session import EditSession

from .panels import render_panels
from .pyglet_backend import _create_imgui_pyglet_renderer, _sync_imgui_io_for_window
from .widgets import WidgetContext, clear_drafts


def render_preview_area(imgui, session: EditSession) -> None:
    """プレビュー描画の結果を、操作できない領域として表示する。"""

    text = block_registry.render_preview(session.block.name, session.attributes())
    imgui.separator()
    imgui.text_disabled("Preview")
    imgui.begin_child("##preview", 0, 0, border=True)
    try:
        if text is None:
            imgui.text_disabled("(no preview)")
        else:
            imgui.text_wrapped(text)
    finally:
        imgui.end_child()


def draw_session(
    imgui,
    session: EditSession,
    *,
    open_panels: set[str] | None = None,
    sources: ChoiceSources | None = None,
) -> bool:
    """セッションのパネルとプレビューを描画し、attribute が変わったら True を返す。

    初回呼び出し時に `session.mount()`（旧 attribute 名の移行）を行う。
    """

    revision = session.store.revision
    session.mount()
    ctx = WidgetContext(sources=sources, scope=session.block.name)
    render_panels(
        session.panels,
        session.attributes(),
        session.update,
        open_panels=open_panels,
        ctx=ctx,
    )
    render_preview_area(imgui, session)
    return session.store.revision != revision


class BlockEditor:
    """pyimgui で EditSession を編集するためのインスペクタ。

    `draw_frame()` を呼ぶことで 1 フレーム分の UI を描画する。
    """

    def __init__(
        self,
        gui_window: Any,
        *,
        session: EditSession,
        sources: ChoiceSources | None = None,
        title: str | None = None,
    ) -> None:
        """GUI の初期化（ImGui コンテキスト / renderer 作成）。"""

        import imgui  # type: ignore[import-untyped]

        # imgui の pyglet backend は環境によって import 経路が揺れるため、明示的にここで解決する。
        try:
            from imgui.integrations import (
                pyglet as imgui_pyglet,  # type: ignore[import-untyped]
            )
        except ImportError as exc:
            raise RuntimeError(f"imgui.integrations.pyglet を import できない: {exc}") from exc

        self._window = gui_window
        self._session = session
        self._sources = sources
        self._title = session.block.title if title is None else str(title)
        # パネルは閉じた状態から始める
        self._open_panels: set[str] = set()

        self._imgui = imgui
        self._context = imgui.create_context()
        imgui.style_colors_dark()
        imgui.set_current_context(self._context)

        self._renderer = _create_imgui_pyglet_renderer(imgui_pyglet, gui_window)

        self._prev_time = time.monotonic()
        self._closed = False

    @property
    def session(self) -> EditSession:
        return self._session

    def draw_frame(self) -> bool:
        """1 フレーム分の GUI を描画し、attribute が変わった場合 True を返す。

        `flip()` は呼ばない。呼び出し側（pyglet の Window.draw）が担当する。
        """

        if self._closed:
            return False

        now = time.monotonic()
        dt = now - self._prev_time
        self._prev_time = now

        imgui = self._imgui
        imgui.set_current_context(self._context)

        imgui.new_frame()
        _sync_imgui_io_for_window(imgui, self._window, dt=dt)

        # 1 ウィンドウで全面表示する（位置/サイズ固定）。
        imgui.set_next_window_position(0, 0)
        imgui.set_next_window_size(self._window.width, self._window.height)
        imgui.begin(
            self._title,
            flags=imgui.WINDOW_NO_RESIZE | imgui.WINDOW_NO_COLLAPSE | imgui.WINDOW_NO_MOVE,
        )
        try:
            changed = draw_session(
                imgui,
                self._session,
                open_panels=self._open_panels,
                sources=self._sources,
            )
        finally:
            imgui.end()

        imgui.render()

        import pyglet

        pyglet.gl.glClearColor(0.12, 0.12, 0.12, 1.0)
        self._window.clear()
        self._renderer.render(imgui.get_draw_data())
        return changed

    def close(self) -> None:
        """GUI を終了し、コンテキストとウィンドウを破棄する。"""

        # 二重 close を許容する（呼び出し側の finally から安全に呼べるようにする）。
        if self._closed:
            return
        self._closed = True

        clear_drafts(self._session.block.name)
        shutdown = getattr(self._renderer, "shutdown", None)
        if callable(shutdown):
            shutdown()
        self._imgui.destroy_context(self._context)
        self._window.close()


__all__ = ["BlockEditor", "draw_session", "render_preview_area"]
