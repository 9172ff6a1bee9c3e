# どこで: `src/blockfields/core/fields/spec.py`。
# 何を: パネル設定（dict/YAML 由来）を FieldSpec / PanelSpec へ正規化する関数を提供する。
# なぜ: 設定の生値を描画側へ直接渡さず、ロード時点で不変な内部表現へ統一するため。

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .conditions import ConditionNode, condition_from_raw

FIELD_TYPES: frozenset[str] = frozenset(
    {
        "separator",
        "text",
        "textarea",
        "number",
        "date",
        "toggle",
        "select",
        "term_select",
        "post_select",
        "radio_image",
        "alignment_matrix",
        "range",
        "color",
        "gradient",
        "image",
    }
)

# 旧設定フォーマット（camelCase のタグ）との互換
_FIELD_TYPE_ALIASES: dict[str, str] = {
    "termSelect": "term_select",
    "postSelect": "post_select",
    "radioImage": "radio_image",
    "alignmentMatrix": "alignment_matrix",
}

# name 以外に type ごとに必須となる設定キー
REQUIRED_ARGS_BY_TYPE: dict[str, tuple[str, ...]] = {
    "select": ("choices",),
    "radio_image": ("choices",),
    "term_select": ("taxonomy",),
    "post_select": ("post_type",),
}

_EMPTY_ARGS: Mapping[str, Any] = MappingProxyType({})


def normalize_field_type(raw: Any) -> str:
    """type タグを正規化して返す。未指定は空文字。"""

    if raw is None:
        return ""
    text = str(raw).strip()
    return _FIELD_TYPE_ALIASES.get(text, text)


def _freeze(value: Any) -> Any:
    """設定値を不変な表現（MappingProxyType / tuple）へ変換して返す。"""

    if isinstance(value, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """1 フィールドの設定。

    args は設定の全キー（type/name/label を含む）を保持する。
    プレースホルダ置換は args に対して行う。
    """

    type: str
    name: str | None
    label: str
    old_name: str | None = None
    conditional_logic: ConditionNode = None
    args: Mapping[str, Any] = field(default_factory=lambda: _EMPTY_ARGS)

    @property
    def is_known_type(self) -> bool:
        return self.type in FIELD_TYPES


@dataclass(frozen=True, slots=True)
class PanelSpec:
    """ラベル付きのフィールド群（サイドバー上の折りたたみパネル 1 つ分）。"""

    key: str
    label: str
    fields: tuple[FieldSpec, ...]


def field_spec_from_mapping(raw: FieldSpec | Mapping[str, Any]) -> FieldSpec:
    """dict 設定または `FieldSpec` から `FieldSpec` を返す。

    Parameters
    ----------
    raw : FieldSpec | Mapping[str, Any]
        フィールド設定。dict の場合、主なキーは以下。
        - type: str（未指定のフィールドは描画時にスキップされる）
        - name: str（separator 以外で必要）
        - label / old_name / choices / conditional_logic / min / max / step など

    Raises
    ------
    TypeError
        raw が dict でも FieldSpec でもない場合。
    """

    if isinstance(raw, FieldSpec):
        return raw
    if not isinstance(raw, Mapping):
        raise TypeError(f"field 設定は dict である必要があります: got={raw!r}")

    args = {str(k): v for k, v in raw.items()}
    field_type = normalize_field_type(args.get("type"))
    args["type"] = field_type

    name = args.get("name")
    old_name = args.get("old_name")
    raw_conditions = args.get("conditional_logic")
    conditions = condition_from_raw(raw_conditions) if raw_conditions else None

    return FieldSpec(
        type=field_type,
        name=None if not name else str(name),
        label="" if args.get("label") is None else str(args["label"]),
        old_name=None if not old_name else str(old_name),
        conditional_logic=conditions,
        args=_freeze(args),
    )


def panel_spec_from_mapping(key: str, raw: PanelSpec | Mapping[str, Any]) -> PanelSpec:
    """dict 設定または `PanelSpec` から `PanelSpec` を返す。"""

    if isinstance(raw, PanelSpec):
        return raw
    if not isinstance(raw, Mapping):
        raise TypeError(f"panel '{key}' の設定は dict である必要があります: got={raw!r}")

    raw_fields = raw.get("fields") or ()
    if isinstance(raw_fields, (str, bytes)) or not isinstance(raw_fields, Sequence):
        raise TypeError(f"panel '{key}' の fields は list である必要があります")

    return PanelSpec(
        key=str(key),
        label="" if raw.get("label") is None else str(raw["label"]),
        fields=tuple(field_spec_from_mapping(f) for f in raw_fields),
    )


def panels_from_mapping(
    panels: Mapping[str, PanelSpec | Mapping[str, Any]] | Iterable[PanelSpec],
) -> tuple[PanelSpec, ...]:
    """パネル設定（panel key → 設定）を宣言順の `PanelSpec` タプルへ正規化して返す。"""

    if isinstance(panels, Mapping):
        return tuple(panel_spec_from_mapping(str(k), v) for k, v in panels.items())

    out: list[PanelSpec] = []
    for panel in panels:
        if not isinstance(panel, PanelSpec):
            raise TypeError(f"panels の要素は PanelSpec である必要があります: got={panel!r}")
        out.append(panel)
    return tuple(out)


def iter_fields(panels: Iterable[PanelSpec]) -> Iterable[FieldSpec]:
    """全パネルのフィールドを宣言順に返す。"""

    for panel in panels:
        yield from panel.fields


def unknown_field_types(panels: Iterable[PanelSpec]) -> list[tuple[str, str]]:
    """未知 type を持つフィールドを (panel key, type) の列で返す。

    描画時は黙ってスキップされるため、設定チェック用に事前検出したい場合に使う。
    """

    out: list[tuple[str, str]] = []
    for panel in panels:
        for f in panel.fields:
            if f.type and not f.is_known_type:
                out.append((panel.key, f.type))
    return out


__all__ = [
    "FIELD_TYPES",
    "FieldSpec",
    "PanelSpec",
    "REQUIRED_ARGS_BY_TYPE",
    "field_spec_from_mapping",
    "iter_fields",
    "normalize_field_type",
    "panel_spec_from_mapping",
    "panels_from_mapping",
    "unknown_field_types",
]
