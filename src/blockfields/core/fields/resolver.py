# どこで: `src/blockfields/core/fields/resolver.py`。
# 何を: FieldSpec と現在の attribute から、描画に渡す ResolvedField を決定する。
# なぜ: 表示判定・プレースホルダ置換・必須キー検査を描画から分離し、純粋関数として扱うため。

from __future__ import annotations

import html
import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from .conditions import is_displayed
from .spec import REQUIRED_ARGS_BY_TYPE, FieldSpec

# 文字列全体が 1 組の波括弧で囲まれている場合だけ置換する（`{a} and {b}` は対象外）
_PLACEHOLDER_RE = re.compile(r"\{([^{}\n]+)\}")


@dataclass(frozen=True, slots=True)
class ResolvedField:
    """描画用に解決済みのフィールド引数。"""

    type: str
    args: Mapping[str, Any]

    @property
    def name(self) -> str:
        return str(self.args.get("name") or "")

    @property
    def label(self) -> str:
        label = self.args.get("label")
        return "" if label is None else str(label)

    def get(self, key: str, default: Any = None) -> Any:
        return self.args.get(key, default)


def placeholder_name(value: Any) -> str | None:
    """value が `{name}` 形式の文字列なら name を、そうでなければ None を返す。"""

    if not isinstance(value, str):
        return None
    m = _PLACEHOLDER_RE.fullmatch(value)
    if m is None:
        return None
    return m.group(1)


def substitute_placeholders(
    args: Mapping[str, Any], attributes: Mapping[str, Any]
) -> dict[str, Any]:
    """`{name}` 形式の設定値を attributes[name] で置き換えた dict を返す。"""

    out: dict[str, Any] = {}
    for key, value in args.items():
        name = placeholder_name(value)
        out[key] = value if name is None else attributes.get(name)
    return out


def _has_required_args(field_type: str, args: Mapping[str, Any]) -> bool:
    if field_type != "separator" and not args.get("name"):
        return False
    for key in REQUIRED_ARGS_BY_TYPE.get(field_type, ()):
        if not args.get(key):
            return False
    return True


def resolve_field(field: FieldSpec, attributes: Mapping[str, Any]) -> ResolvedField | None:
    """field を attributes に対して解決し、描画しない場合は None を返す。

    Notes
    -----
    以下の場合は None（スキップ）になる。
    - type が未指定、または未知 type
    - conditional_logic の評価結果が False
    - name（separator 以外）や type ごとの必須キーが欠けている
    """

    if not field.type or not field.is_known_type:
        return None

    if not is_displayed(field.conditional_logic, attributes):
        return None

    args = dict(field.args)
    label = args.get("label")
    if isinstance(label, str) and label:
        args["label"] = html.unescape(label)

    args = substitute_placeholders(args, attributes)
    if not _has_required_args(field.type, args):
        return None

    return ResolvedField(type=field.type, args=MappingProxyType(args))


__all__ = ["ResolvedField", "placeholder_name", "resolve_field", "substitute_placeholders"]
