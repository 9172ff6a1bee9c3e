"""パネル設定の正規化（FieldSpec / PanelSpec）のテスト。"""

from __future__ import annotations

import pytest

from blockfields.core.fields.conditions import ConditionGroup
from blockfields.core.fields.spec import (
    FIELD_TYPES,
    FieldSpec,
    PanelSpec,
    field_spec_from_mapping,
    iter_fields,
    panels_from_mapping,
    unknown_field_types,
)


def test_field_spec_from_mapping_normalizes_keys():
    spec = field_spec_from_mapping(
        {
            "type": "alignmentMatrix",
            "name": "align",
            "label": "Alignment",
            "old_name": "position",
            "conditional_logic": [{"field": "layout", "operator": "==", "value": "grid"}],
        }
    )
    assert spec.type == "alignment_matrix"
    assert spec.args["type"] == "alignment_matrix"
    assert spec.name == "align"
    assert spec.old_name == "position"
    assert isinstance(spec.conditional_logic, ConditionGroup)
    assert spec.is_known_type is True


def test_field_spec_args_are_frozen():
    spec = field_spec_from_mapping({"type": "select", "name": "s", "choices": {"a": "A"}})
    with pytest.raises(TypeError):
        spec.args["name"] = "x"  # type: ignore[index]
    with pytest.raises(TypeError):
        spec.args["choices"]["b"] = "B"  # type: ignore[index]


def test_field_spec_rejects_non_mapping():
    with pytest.raises(TypeError):
        field_spec_from_mapping(["text"])  # type: ignore[arg-type]


def test_panels_keep_declaration_order():
    panels = panels_from_mapping(
        {
            "b": {"label": "B", "fields": [{"type": "text", "name": "x"}]},
            "a": {"fields": [{"type": "number", "name": "y"}, {"type": "hologram", "name": "z"}]},
        }
    )
    assert [p.key for p in panels] == ["b", "a"]
    assert panels[1].label == ""
    assert [f.name for f in iter_fields(panels)] == ["x", "y", "z"]
    assert unknown_field_types(panels) == [("a", "hologram")]


def test_panels_from_mapping_accepts_panel_specs():
    panel = PanelSpec(key="p", label="P", fields=(FieldSpec(type="separator", name=None, label=""),))
    assert panels_from_mapping([panel]) == (panel,)
    with pytest.raises(TypeError):
        panels_from_mapping([{"fields": []}])  # type: ignore[list-item]


def test_panel_fields_must_be_a_list():
    with pytest.raises(TypeError):
        panels_from_mapping({"p": {"fields": "text"}})


def test_field_spec_default_args_is_shared_empty_mapping():
    a = FieldSpec(type="separator", name=None, label="")
    b = FieldSpec(type="text", name="x", label="")
    assert dict(a.args) == {}
    assert a.args is b.args
    with pytest.raises(TypeError):
        a.args["k"] = 1  # type: ignore[index]


def test_field_types_are_closed():
    assert "separator" in FIELD_TYPES
    assert "image" in FIELD_TYPES
    assert len(FIELD_TYPES) == 15
