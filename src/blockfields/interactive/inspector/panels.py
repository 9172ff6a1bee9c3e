# どこで: `src/blockfields/interactive/inspector/panels.py`。
# 何を: PanelSpec 列を折りたたみヘッダ付きのフィールド群として描画し、変更を on_update へ流す。
# なぜ: パネル単位のレイアウトを 1 箇所に閉じ込め、attribute の更新経路（on_update）と分離するため。

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from blockfields.core.fields.resolver import ResolvedField, resolve_field
from blockfields.core.fields.spec import PanelSpec

from .widgets import WidgetContext, render_field_widget

OnUpdate = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True, slots=True)
class PanelBlock:
    """1 パネル分の描画単位（表示されるフィールドを宣言順に持つ）。"""

    key: str
    header: str
    fields: tuple[ResolvedField, ...]


def panel_blocks(panels: Iterable[PanelSpec], attributes: Mapping[str, Any]) -> list[PanelBlock]:
    """パネルごとに、現在の attribute で表示されるフィールドを解決して返す。

    フィールドを 1 件も宣言していないパネルは含めない。
    条件で全フィールドが隠れたパネルは、空のブロックとして残す。
    """

    out: list[PanelBlock] = []
    for panel in panels:
        if not panel.fields:
            continue
        resolved: list[ResolvedField] = []
        for field in panel.fields:
            r = resolve_field(field, attributes)
            if r is not None:
                resolved.append(r)
        out.append(
            PanelBlock(
                key=panel.key,
                header=panel.label or panel.key,
                fields=tuple(resolved),
            )
        )
    return out


def _field_id(index: int, field: ResolvedField) -> str:
    """ImGui の `push_id()` 用に、フィールドの安定 ID を返す。"""

    return f"{index}:{field.type}:{field.name}"


def render_panels(
    panels: Iterable[PanelSpec],
    attributes: Mapping[str, Any],
    on_update: OnUpdate,
    *,
    open_panels: set[str] | None = None,
    ctx: WidgetContext | None = None,
) -> list[PanelBlock]:
    """パネルを折りたたみヘッダとして描画し、描画したブロック列を返す。

    Parameters
    ----------
    panels : Iterable[PanelSpec]
        ブロックのパネル設定。
    attributes : Mapping[str, Any]
        描画開始時点の attribute（このフレーム中は読み取りのみ）。
    on_update : Callable[[Mapping[str, Any]], Any]
        フィールドの変更を渡す唯一の経路。
    open_panels : set[str] | None
        開いているパネル key の集合。描画結果で更新される。
        None の場合は ImGui 側の開閉状態に任せる（初期状態は閉）。
    ctx : WidgetContext | None
        選択肢の供給元などウィジェットに渡す情報。
    """

    import imgui  # type: ignore[import-untyped]

    blocks = panel_blocks(panels, attributes)
    widget_ctx = WidgetContext() if ctx is None else ctx

    for block in blocks:
        imgui.push_id(f"panel:{block.key}")
        try:
            if open_panels is not None:
                imgui.set_next_item_open(block.key in open_panels, imgui.ALWAYS)
            else:
                imgui.set_next_item_open(False, imgui.ONCE)

            expanded, _visible = imgui.collapsing_header(f"{block.header}##panel_header", None)

            if open_panels is not None:
                if expanded:
                    open_panels.add(block.key)
                else:
                    open_panels.discard(block.key)

            if not expanded:
                continue

            for index, field in enumerate(block.fields):
                imgui.push_id(_field_id(index, field))
                try:
                    update = render_field_widget(field, attributes, widget_ctx)
                finally:
                    imgui.pop_id()
                if update:
                    on_update(update)
        finally:
            imgui.pop_id()

    return blocks


__all__ = ["PanelBlock", "panel_blocks", "render_panels"]
