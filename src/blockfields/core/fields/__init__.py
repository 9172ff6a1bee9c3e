# どこで: `src/blockfields/core/fields/__init__.py`。
# 何を: フィールド設定・表示条件・attribute ストアの公開エイリアスをまとめる。
# なぜ: API 層や GUI 層から最小インポートで使えるようにするため。

from .conditions import (
    ConditionGroup,
    ConditionLeaf,
    condition_from_raw,
    evaluate_conditions,
    is_displayed,
)
from .migrate import migrate_attributes
from .resolver import ResolvedField, resolve_field
from .session import EditSession
from .spec import (
    FIELD_TYPES,
    FieldSpec,
    PanelSpec,
    field_spec_from_mapping,
    panels_from_mapping,
    unknown_field_types,
)
from .store import UNSET, AttributeStore
from .updates import Option, OptionGroup, ids_from_options

__all__ = [
    "AttributeStore",
    "ConditionGroup",
    "ConditionLeaf",
    "EditSession",
    "FIELD_TYPES",
    "FieldSpec",
    "Option",
    "OptionGroup",
    "PanelSpec",
    "ResolvedField",
    "UNSET",
    "condition_from_raw",
    "evaluate_conditions",
    "field_spec_from_mapping",
    "ids_from_options",
    "is_displayed",
    "migrate_attributes",
    "panels_from_mapping",
    "resolve_field",
    "unknown_field_types",
]
