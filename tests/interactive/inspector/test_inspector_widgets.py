"""type → ウィジェットのディスパッチと、各ウィジェットが返す partial update のテスト。"""

from __future__ import annotations

import pytest

from blockfields.core.choice_sources import StaticChoiceSources
from blockfields.core.fields.resolver import ResolvedField, resolve_field
from blockfields.core.fields.spec import FIELD_TYPES, field_spec_from_mapping
from blockfields.core.fields.updates import Option
from blockfields.interactive.inspector.widgets import (
    WidgetContext,
    clear_drafts,
    render_field_widget,
    widget_registry,
)


@pytest.fixture(autouse=True)
def _reset_drafts():
    clear_drafts()
    yield
    clear_drafts()


def _resolved(attributes=None, **raw) -> ResolvedField:
    resolved = resolve_field(field_spec_from_mapping(raw), attributes or {})
    assert resolved is not None
    return resolved


def _sources() -> StaticChoiceSources:
    return StaticChoiceSources(
        terms={"category": [Option("5", "Cats"), Option("9", "Dogs")]},
        posts={"post": [Option("12", "Hello"), Option("13", "World")]},
    )


def _call_args(fake, name: str) -> list[tuple]:
    return [c[1] for c in fake.calls if c[0] == name]


def test_every_field_type_has_a_widget():
    assert set(widget_registry()) == set(FIELD_TYPES)


def test_unknown_type_draws_nothing(fake_imgui):
    field = ResolvedField(type="hologram", args={"name": "x"})
    assert render_field_widget(field, {}) is None
    assert fake_imgui.calls == []


def test_separator_has_no_attribute(fake_imgui):
    assert render_field_widget(_resolved(type="separator"), {}) is None
    assert fake_imgui.names() == ["separator"]


def test_text_returns_string_update(fake_imgui):
    field = _resolved(type="text", name="heading", label="Heading")
    fake_imgui.script("input_text", (True, "Hello"))

    assert render_field_widget(field, {}) == {"heading": "Hello"}
    assert _call_args(fake_imgui, "text") == [("Heading",)]


def test_unchanged_input_returns_none(fake_imgui):
    field = _resolved(type="textarea", name="body")
    assert render_field_widget(field, {"body": "a\nb"}) is None
    assert _call_args(fake_imgui, "input_text_multiline")[0][1] == "a\nb"


def test_number_is_stored_as_text(fake_imgui):
    field = _resolved(type="number", name="count")
    fake_imgui.script("input_text", (True, "42"))
    assert render_field_widget(field, {"count": "7"}) == {"count": "42"}


def test_number_keeps_partial_input_as_draft(fake_imgui):
    field = _resolved(type="number", name="count")
    ctx = WidgetContext(scope="demo/card")

    fake_imgui.script("input_text", (True, "-"))
    assert render_field_widget(field, {"count": "7"}, ctx) is None

    render_field_widget(field, {"count": "7"}, ctx)
    assert _call_args(fake_imgui, "input_text")[-1][1] == "-"

    clear_drafts("demo/card")
    render_field_widget(field, {"count": "7"}, ctx)
    assert _call_args(fake_imgui, "input_text")[-1][1] == "7"


def test_date_keeps_date_part_and_clear_stores_empty(fake_imgui):
    field = _resolved(type="date", name="start")

    fake_imgui.script("input_text", (True, "2024-05-01T10:00"))
    assert render_field_widget(field, {}) == {"start": "2024-05-01"}

    fake_imgui.script("button", True, label="Clear")
    assert render_field_widget(field, {"start": "2024-05-01"}) == {"start": ""}


def test_toggle_defaults_to_off(fake_imgui):
    field = _resolved(type="toggle", name="show_title", label="Show title")
    assert render_field_widget(field, {}) is None
    assert _call_args(fake_imgui, "checkbox")[0] == ("Show title##value", False)

    fake_imgui.script("checkbox", (True, True))
    assert render_field_widget(field, {}) == {"show_title": True}


def test_select_single(fake_imgui):
    field = _resolved(type="select", name="size", choices={"s": "Small", "l": "Large"})
    fake_imgui.script("begin_combo", True)
    fake_imgui.script("selectable", (True, True), label="Large")

    assert render_field_widget(field, {"size": "s"}) == {"size": "l"}
    assert _call_args(fake_imgui, "begin_combo")[0] == ("##value", "Small")


def test_select_multiple_keeps_choice_order(fake_imgui):
    field = _resolved(
        type="select", name="tags", multiple=True, choices={"a": "A", "b": "B", "c": "C"}
    )
    fake_imgui.script("begin_combo", True)
    fake_imgui.script("selectable", (True, True), label="A##")

    assert render_field_widget(field, {"tags": ["c"]}) == {"tags": ["a", "c"]}


def test_select_grouped_draws_group_headers(fake_imgui):
    field = _resolved(
        type="select",
        name="pet",
        choices={"none": "None", "pets": {"label": "Pets", "subchoices": {"cat": "Cat"}}},
    )
    fake_imgui.script("begin_combo", True)
    fake_imgui.script("selectable", (True, True), label="Cat")

    assert render_field_widget(field, {}) == {"pet": "cat"}
    assert ("Pets",) in _call_args(fake_imgui, "text_disabled")


def test_term_select_single_with_empty_choice(fake_imgui):
    field = _resolved(type="term_select", name="term", taxonomy="category", empty_choice="Any")
    ctx = WidgetContext(sources=_sources())
    fake_imgui.script("begin_combo", True)
    fake_imgui.script("selectable", (True, True), label="Any")

    assert render_field_widget(field, {"term": "5"}, ctx) == {"term": ""}
    assert _call_args(fake_imgui, "begin_combo")[0] == ("##value", "Cats")


def test_term_select_multiple_stores_identifiers(fake_imgui):
    field = _resolved(type="term_select", name="terms", taxonomy="category", multiple=True)
    ctx = WidgetContext(sources=_sources())
    fake_imgui.script("begin_combo", True, label="##add")
    fake_imgui.script("selectable", (True, True), label="Cats")

    assert render_field_widget(field, {"terms": ["9"]}, ctx) == {"terms": ["9", "5"]}


def test_post_select_reorders_selection(fake_imgui):
    field = _resolved(type="post_select", name="posts", post_type="post")
    ctx = WidgetContext(sources=_sources())
    fake_imgui.script("small_button", True, label="v")

    assert render_field_widget(field, {"posts": ["12", "13"]}, ctx) == {"posts": ["13", "12"]}


def test_post_select_without_sources_lists_nothing(fake_imgui):
    field = _resolved(type="post_select", name="posts", post_type="post")
    assert render_field_widget(field, {}) is None
    assert _call_args(fake_imgui, "selectable") == []


def test_radio_image_selects_new_key(fake_imgui):
    field = _resolved(
        type="radio_image", name="layout", choices={"grid": "img/grid.png", "list": "img/list.png"}
    )
    fake_imgui.script("radio_button", True, label="list")
    assert render_field_widget(field, {"layout": "grid"}) == {"layout": "list"}


def test_alignment_matrix_returns_token(fake_imgui):
    field = _resolved(type="alignment_matrix", name="align")
    fake_imgui.script("button", True, label="##1_1")
    assert render_field_widget(field, {}) == {"align": "center center"}
    assert len(_call_args(fake_imgui, "button")) == 9


def test_range_uses_int_slider_for_integral_bounds(fake_imgui):
    field = _resolved(type="range", name="columns", min=1, max=6, step=1)
    fake_imgui.script("slider_int", (True, 4))
    assert render_field_widget(field, {"columns": 2}) == {"columns": 4}
    assert _call_args(fake_imgui, "slider_int")[0] == ("##value", 2, 1, 6)


def test_range_with_empty_substituted_bound_uses_default(fake_imgui):
    field = _resolved({"limit": ""}, type="range", name="columns", min=0, max="{limit}", step=1)
    assert field.get("max") == ""

    assert render_field_widget(field, {"limit": ""}) is None
    assert _call_args(fake_imgui, "slider_int")[0] == ("##value", 0, 0, 100)


def test_range_with_non_integral_stored_value_rounds_for_int_slider(fake_imgui):
    field = _resolved(type="range", name="r", min=0, max=10, step=1)
    assert render_field_widget(field, {"r": "5.5"}) is None
    assert _call_args(fake_imgui, "slider_int")[0] == ("##value", 6, 0, 10)

    assert render_field_widget(field, {"r": "abc"}) is None
    assert _call_args(fake_imgui, "slider_int")[1] == ("##value", 0, 0, 10)


def test_range_snaps_float_to_step(fake_imgui):
    field = _resolved(type="range", name="opacity", min=0, max=1, step=0.25)
    fake_imgui.script("slider_float", (True, 0.3))
    assert render_field_widget(field, {}) == {"opacity": 0.25}


def test_color_defaults_to_white_and_returns_hex(fake_imgui):
    field = _resolved(type="color", name="bg")
    fake_imgui.script("color_edit3", (True, (1.0, 0.0, 0.0)))

    assert render_field_widget(field, {}) == {"bg": "#ff0000"}
    assert _call_args(fake_imgui, "color_edit3")[0][1:4] == (1.0, 1.0, 1.0)


def test_gradient_stores_css_text(fake_imgui):
    field = _resolved(type="gradient", name="bg_gradient")
    fake_imgui.script("input_text", (True, " linear-gradient(#000, #fff) "))
    assert render_field_widget(field, {}) == {"bg_gradient": "linear-gradient(#000, #fff)"}


def test_image_gallery_stores_id_list(fake_imgui):
    field = _resolved(type="image", name="photos", gallery=True)
    fake_imgui.script("input_text", (True, "3,4"))
    assert render_field_widget(field, {}) == {"photos": [3, 4]}
