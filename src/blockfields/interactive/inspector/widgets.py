# どこで: `src/blockfields/interactive/inspector/widgets.py`。
# 何を: ResolvedField.type を pyimgui の入力ウィジェットへ対応付けて描画する。
# なぜ: type ごとの UI 実装を閉じ込め、パネル描画から分離するため。

from __future__ import annotations

import datetime as _dt
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from blockfields.core.choice_sources import ChoiceSources
from blockfields.core.fields.resolver import ResolvedField
from blockfields.core.fields.updates import (
    ALIGNMENT_TOKENS,
    as_optional_float,
    Option,
    OptionGroup,
    date_update,
    flatten_options,
    hex_from_rgb01,
    ids_from_options,
    image_text,
    image_update,
    move_item,
    normalize_hex_color,
    number_update,
    options_from_ids,
    range_is_integral,
    range_update,
    rgb01_from_hex,
    select_options,
    text_update,
    toggle_multi_value,
    toggle_update,
)


@dataclass(frozen=True, slots=True)
class WidgetContext:
    """ウィジェット描画に必要な外部情報。"""

    sources: ChoiceSources | None = None
    scope: str = ""


Update = dict[str, Any]
WidgetFn = Callable[[ResolvedField, Mapping[str, Any], WidgetContext], Update | None]

# 入力途中の文字列（"1." や "2024-0" など、まだ保存値にできないもの）を保持する。
_DRAFT_BY_KEY: dict[tuple[str, str], str] = {}


def _draft_key(ctx: WidgetContext, name: str) -> tuple[str, str]:
    return (str(ctx.scope), str(name))


def _draft_or_stored(ctx: WidgetContext, name: str, stored: str) -> str:
    draft = _DRAFT_BY_KEY.get(_draft_key(ctx, name))
    return stored if draft is None else draft


def _keep_draft(ctx: WidgetContext, name: str, text: str, committed: str | None) -> None:
    key = _draft_key(ctx, name)
    if committed is not None and committed == text:
        _DRAFT_BY_KEY.pop(key, None)
    else:
        _DRAFT_BY_KEY[key] = text


def clear_drafts(scope: str | None = None) -> None:
    """入力途中の文字列を破棄する。scope 指定時はその scope のみ。"""

    if scope is None:
        _DRAFT_BY_KEY.clear()
        return
    for key in [k for k in _DRAFT_BY_KEY if k[0] == scope]:
        del _DRAFT_BY_KEY[key]


def _draw_label(imgui, field: ResolvedField) -> None:
    if field.label:
        imgui.text(field.label)


def _parse_number(text: str) -> int | float | None:
    s = str(text).strip()
    try:
        return int(s)
    except ValueError:
        pass
    try:
        return float(s)
    except ValueError:
        return None


def _parse_date(text: str) -> str | None:
    """日付として確定できる文字列なら `YYYY-MM-DD`、空なら ""、それ以外は None。"""

    s = date_update(text)
    if not s:
        return ""
    try:
        return _dt.date.fromisoformat(s).isoformat()
    except ValueError:
        return None


def widget_separator(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> None:
    """区切り線を描画する（attribute を持たない）。"""

    import imgui  # type: ignore[import-untyped]

    imgui.separator()
    return None


def widget_text(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=text の 1 行入力を描画し、変更時は `{name: str}` を返す。"""

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    value = text_update(attributes.get(field.name) or "")
    imgui.set_next_item_width(-1)
    changed, out = imgui.input_text("##value", value)
    if not changed:
        return None
    return {field.name: text_update(out)}


def widget_textarea(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=textarea の複数行入力を描画する。"""

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    value = text_update(attributes.get(field.name) or "")
    line_count = int(value.count("\n")) + 1
    visible_lines = max(3, min(8, line_count))
    height = float(imgui.get_text_line_height()) * float(visible_lines) + 8.0
    changed, out = imgui.input_text_multiline("##value", value, -1, -1.0, float(height))
    if not changed:
        return None
    return {field.name: text_update(out)}


def widget_number(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=number の数値入力を描画する。保存値は常に文字列。"""

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    stored = number_update(attributes.get(field.name) or 0)
    text = _draft_or_stored(ctx, field.name, stored)
    imgui.set_next_item_width(-1)
    changed, out = imgui.input_text(
        "##value",
        text,
        flags=imgui.INPUT_TEXT_CHARS_DECIMAL,
    )
    if not changed:
        return None

    parsed = _parse_number(out)
    committed = None if parsed is None else number_update(parsed)
    _keep_draft(ctx, field.name, str(out), committed)
    if committed is None:
        return None
    return {field.name: committed}


def widget_date(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=date の日付入力（YYYY-MM-DD）とクリアボタンを描画する。"""

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    stored = date_update(attributes.get(field.name) or "")
    text = _draft_or_stored(ctx, field.name, stored)

    imgui.push_item_width(-60)
    changed, out = imgui.input_text("##value", text)
    imgui.pop_item_width()
    imgui.same_line(0.0, 8.0)
    cleared = imgui.button("Clear##clear")

    if cleared:
        _DRAFT_BY_KEY.pop(_draft_key(ctx, field.name), None)
        return {field.name: ""}
    if not changed:
        return None

    committed = _parse_date(out)
    _keep_draft(ctx, field.name, str(out), committed)
    if committed is None:
        return None
    return {field.name: committed}


def widget_toggle(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=toggle のチェックボックスを描画する。未設定は OFF。"""

    import imgui  # type: ignore[import-untyped]

    clicked, state = imgui.checkbox(f"{field.label}##value", bool(attributes.get(field.name)))
    if not clicked:
        return None
    return {field.name: toggle_update(state)}


def _option_label(options: list[Option], value: Any) -> str:
    for o in options:
        if o.value == str(value):
            return o.label
    return "" if value is None else str(value)


def _combo_items(
    imgui,
    options: list[Option | OptionGroup],
    *,
    is_selected: Callable[[str], bool],
) -> str | None:
    """combo の中身を描画し、クリックされた value を返す。"""

    clicked_value: str | None = None
    for i, item in enumerate(options):
        if isinstance(item, OptionGroup):
            imgui.text_disabled(item.label)
            imgui.indent()
            try:
                for j, sub in enumerate(item.options):
                    selected = is_selected(sub.value)
                    clicked, _ = imgui.selectable(f"{sub.label}##{i}_{j}", selected)
                    if clicked:
                        clicked_value = sub.value
            finally:
                imgui.unindent()
            continue
        selected = is_selected(item.value)
        clicked, _ = imgui.selectable(f"{item.label}##{i}", selected)
        if clicked:
            clicked_value = item.value
        if selected:
            imgui.set_item_default_focus()
    return clicked_value


def widget_select(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=select のプルダウンを描画する。

    choices にサブ選択肢があればグループ見出し付きで描画する。
    multiple の場合は選択状態をトグルし、選択肢の並び順で list を保存する。
    """

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    options, _grouped = select_options(field.get("choices") or {})
    flat = flatten_options(options)
    current = attributes.get(field.name)

    if field.get("multiple"):
        selected_values = [str(v) for v in (current or ())] if isinstance(current, (list, tuple)) else []
        preview = ", ".join(_option_label(flat, v) for v in selected_values)
    else:
        selected_values = [] if current in (None, "") else [str(current)]
        preview = _option_label(flat, current)

    imgui.set_next_item_width(-1)
    clicked_value: str | None = None
    if imgui.begin_combo("##value", preview):
        try:
            clicked_value = _combo_items(
                imgui, options, is_selected=lambda v: v in selected_values
            )
        finally:
            imgui.end_combo()

    if clicked_value is None:
        return None
    if not field.get("multiple"):
        return {field.name: clicked_value}

    toggled = set(toggle_multi_value(selected_values, clicked_value))
    return {field.name: [o.value for o in flat if o.value in toggled]}


def _sortable_multi_select(
    imgui,
    field: ResolvedField,
    attributes: Mapping[str, Any],
    available: list[Option],
) -> Update | None:
    """選択済みの並べ替え/削除と、未選択肢の追加を描画する。

    保存値はリッチな選択オブジェクトから識別子だけを取り出した list。
    """

    current = attributes.get(field.name)
    selection = options_from_ids(current if isinstance(current, (list, tuple)) else [], available)
    new_selection: list[Option] | None = None

    for i, option in enumerate(selection):
        imgui.push_id(f"selected_{i}")
        try:
            imgui.text(option.label)
            imgui.same_line(0.0, 8.0)
            if imgui.small_button("^"):
                new_selection = move_item(selection, i, -1)
            imgui.same_line(0.0, 4.0)
            if imgui.small_button("v"):
                new_selection = move_item(selection, i, +1)
            imgui.same_line(0.0, 4.0)
            if imgui.small_button("x"):
                new_selection = [o for j, o in enumerate(selection) if j != i]
        finally:
            imgui.pop_id()

    selected_values = {o.value for o in selection}
    remaining = [o for o in available if o.value not in selected_values]
    imgui.set_next_item_width(-1)
    if imgui.begin_combo("##add", "Add..."):
        try:
            for i, option in enumerate(remaining):
                clicked, _ = imgui.selectable(f"{option.label}##{i}", False)
                if clicked:
                    new_selection = [*selection, option]
        finally:
            imgui.end_combo()

    if new_selection is None:
        return None
    return {field.name: ids_from_options(new_selection)}


def widget_term_select(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=term_select を描画する。multiple なら並べ替え可能な複数選択。"""

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    sources = ctx.sources
    available = (
        []
        if sources is None
        else list(sources.terms(str(field.get("taxonomy")), field.get("query_args")))
    )

    if field.get("multiple"):
        return _sortable_multi_select(imgui, field, attributes, available)

    options: list[Option | OptionGroup] = []
    empty_choice = field.get("empty_choice")
    if empty_choice:
        options.append(Option(value="", label=str(empty_choice)))
    options.extend(available)

    current = attributes.get(field.name)
    current_text = "" if current is None else str(current)
    imgui.set_next_item_width(-1)
    clicked_value: str | None = None
    if imgui.begin_combo("##value", _option_label(flatten_options(options), current_text)):
        try:
            clicked_value = _combo_items(imgui, options, is_selected=lambda v: v == current_text)
        finally:
            imgui.end_combo()

    if clicked_value is None:
        return None
    return {field.name: clicked_value}


def widget_post_select(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=post_select の並べ替え可能な複数選択を描画する。"""

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    sources = ctx.sources
    available = [] if sources is None else list(sources.posts(str(field.get("post_type"))))
    return _sortable_multi_select(imgui, field, attributes, available)


def widget_radio_image(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=radio_image のラジオボタン群を描画する。選択肢は識別子 → 画像パス/URL。"""

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    choices: Mapping[str, Any] = field.get("choices") or {}
    current = attributes.get(field.name)
    current_text = "" if current is None else str(current)

    clicked_value: str | None = None
    keys = [str(k) for k in choices]
    for i, key in enumerate(keys):
        if imgui.radio_button(f"{key}##{i}", key == current_text):
            clicked_value = key
        if imgui.is_item_hovered():
            imgui.set_tooltip(str(choices[key]))
        if i != len(keys) - 1:
            imgui.same_line(0.0, 6.0)

    if clicked_value is None or clicked_value == current_text:
        return None
    return {field.name: clicked_value}


def widget_alignment_matrix(
    field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext
) -> Update | None:
    """type=alignment_matrix の 3x3 ボタン格子を描画する。"""

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    current = attributes.get(field.name) or ""

    clicked_value: str | None = None
    for row_index, row in enumerate(ALIGNMENT_TOKENS):
        for col_index, token in enumerate(row):
            mark = "[x]" if token == current else "[ ]"
            if imgui.button(f"{mark}##{row_index}_{col_index}", 32, 0):
                clicked_value = token
            if imgui.is_item_hovered():
                imgui.set_tooltip(token)
            if col_index != len(row) - 1:
                imgui.same_line(0.0, 4.0)

    if clicked_value is None:
        return None
    return {field.name: clicked_value}


def widget_range(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=range のスライダーを描画する（min/max で制限し step に丸める）。"""

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    # 置換で空になった境界や保存済みの不正値は既定値で描画する
    min_value = as_optional_float(field.get("min"))
    max_value = as_optional_float(field.get("max"))
    if min_value is None:
        min_value = 0.0
    if max_value is None:
        max_value = 100.0
    if min_value > max_value:
        min_value, max_value = max_value, min_value

    value = as_optional_float(attributes.get(field.name))
    if value is None:
        value = 0.0
    imgui.set_next_item_width(-1)
    if range_is_integral(field.args):
        changed, out = imgui.slider_int(
            "##value", int(round(value)), int(min_value), int(max_value)
        )
    else:
        changed, out = imgui.slider_float("##value", value, min_value, max_value)
    if not changed:
        return None
    return {field.name: range_update(out, field.args)}


def widget_color(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=color のカラーピッカーを描画する。未設定は #ffffff。"""

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    current = normalize_hex_color(attributes.get(field.name))
    r, g, b = rgb01_from_hex(current)
    flags = imgui.COLOR_EDIT_UINT8 | imgui.COLOR_EDIT_DISPLAY_HEX
    changed, out = imgui.color_edit3("##value", float(r), float(g), float(b), flags=flags)
    if not changed:
        return None
    value = hex_from_rgb01(out)
    if value == current and field.name in attributes:
        return None
    return {field.name: value}


def widget_gradient(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=gradient の CSS グラデーション文字列入力を描画する。"""

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    value = text_update(attributes.get(field.name) or "")
    imgui.set_next_item_width(-1)
    changed, out = imgui.input_text("##value", value)
    if not changed:
        return None
    return {field.name: str(out).strip()}


def widget_image(field: ResolvedField, attributes: Mapping[str, Any], ctx: WidgetContext) -> Update | None:
    """type=image の添付 ID 入力を描画する（gallery ならカンマ区切りの複数 ID）。"""

    import imgui  # type: ignore[import-untyped]

    _draw_label(imgui, field)
    gallery = bool(field.get("gallery"))
    stored = image_text(attributes.get(field.name))
    text = _draft_or_stored(ctx, field.name, stored)
    imgui.set_next_item_width(-1)
    changed, out = imgui.input_text("##value", text)
    if not changed:
        return None

    value = image_update(out, gallery=gallery)
    _keep_draft(ctx, field.name, str(out), image_text(value))
    return {field.name: value}


_TYPE_TO_WIDGET: dict[str, WidgetFn] = {
    "separator": widget_separator,
    "text": widget_text,
    "textarea": widget_textarea,
    "number": widget_number,
    "date": widget_date,
    "toggle": widget_toggle,
    "select": widget_select,
    "term_select": widget_term_select,
    "post_select": widget_post_select,
    "radio_image": widget_radio_image,
    "alignment_matrix": widget_alignment_matrix,
    "range": widget_range,
    "color": widget_color,
    "gradient": widget_gradient,
    "image": widget_image,
}


def render_field_widget(
    field: ResolvedField,
    attributes: Mapping[str, Any],
    ctx: WidgetContext | None = None,
) -> Update | None:
    """field.type に応じたウィジェットを描画し、変更があれば partial update を返す。

    未知 type は何も描画せず None を返す。
    """

    fn = _TYPE_TO_WIDGET.get(field.type)
    if fn is None:
        return None
    return fn(field, attributes, WidgetContext() if ctx is None else ctx)


def widget_registry() -> dict[str, WidgetFn]:
    """type→widget 関数マップのコピーを返す。"""

    return dict(_TYPE_TO_WIDGET)


__all__ = [
    "WidgetContext",
    "WidgetFn",
    "clear_drafts",
    "render_field_widget",
    "widget_registry",
]
