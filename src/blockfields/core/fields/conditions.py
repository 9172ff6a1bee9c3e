# どこで: `src/blockfields/core/fields/conditions.py`。
# 何を: フィールド表示条件（AND/OR が入れ子ごとに交互に切り替わる条件木）の解析と評価を提供する。
# なぜ: 表示判定を GUI から切り離し、純粋関数として unit test で担保するため。

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal, Union

Relation = Literal["AND", "OR"]

OPERATORS: frozenset[str] = frozenset({"===", "==", "!==", "!=", ">", ">=", "<", "<="})


@dataclass(frozen=True, slots=True)
class ConditionLeaf:
    """1 件の比較条件（attribute 名, 演算子, リテラル値）。"""

    field: str
    operator: str
    value: Any


@dataclass(frozen=True, slots=True)
class ConditionGroup:
    """子条件の列。relation は評価時に入れ子の深さから決まる。"""

    children: tuple["ConditionNode", ...]


ConditionNode = Union[ConditionLeaf, ConditionGroup, None]


def condition_from_raw(raw: Any) -> ConditionNode:
    """設定値（list/dict の入れ子）から条件木を組み立てて返す。

    Notes
    -----
    - 空でない list は ConditionGroup になる。
    - field/operator/value が揃った dict は ConditionLeaf になる。
    - それ以外（空 list・キー欠落・未知演算子）は None（= 評価結果なし）になる。
    """

    if isinstance(raw, ConditionLeaf | ConditionGroup):
        return raw
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        if not raw:
            return ConditionGroup(children=())
        return ConditionGroup(children=tuple(condition_from_raw(c) for c in raw))
    if isinstance(raw, Mapping):
        field = raw.get("field")
        operator = raw.get("operator")
        if not field or not operator or "value" not in raw:
            return None
        if str(operator) not in OPERATORS:
            return None
        return ConditionLeaf(field=str(field), operator=str(operator), value=raw["value"])
    return None


# --- スクリプト言語風の比較セマンティクス ---


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_text(value: Any) -> str:
    """配列/オブジェクトを比較用の文字列表現へ落とす。"""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return "[object Object]"
    if isinstance(value, Sequence):
        return ",".join(_to_text(v) for v in value)
    return str(value)


def _to_primitive(value: Any) -> Any:
    if isinstance(value, (list, tuple, Mapping)):
        return _to_text(value)
    return value


def _to_number(value: Any) -> float:
    """比較用に数値へ変換する。変換できない場合は NaN。"""

    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return _to_number(_to_primitive(value)) if isinstance(value, (list, tuple)) else math.nan


def strict_equals(left: Any, right: Any) -> bool:
    """`===` 相当。値の種別（数値/文字列/真偽値/None）が一致し、かつ等しい場合 True。"""

    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if _is_number(left) and _is_number(right):
        return float(left) == float(right)
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    if left is None or right is None:
        return left is None and right is None
    # list/dict は同一オブジェクトのときだけ等しい
    return left is right


def loose_equals(left: Any, right: Any) -> bool:
    """`==` 相当。数値文字列と数値、真偽値と 0/1 などを型変換して比較する。"""

    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, (list, tuple, Mapping)) and isinstance(right, (list, tuple, Mapping)):
        return left is right
    if isinstance(left, bool):
        return loose_equals(1 if left else 0, right)
    if isinstance(right, bool):
        return loose_equals(left, 1 if right else 0)
    if isinstance(left, (list, tuple, Mapping)):
        return loose_equals(_to_primitive(left), right)
    if isinstance(right, (list, tuple, Mapping)):
        return loose_equals(left, _to_primitive(right))
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    return _to_number(left) == _to_number(right)


def _relational(left: Any, right: Any, operator: str) -> bool:
    left_p = _to_primitive(left)
    right_p = _to_primitive(right)
    if isinstance(left_p, str) and isinstance(right_p, str):
        a: Any = left_p
        b: Any = right_p
    else:
        a = _to_number(left_p)
        b = _to_number(right_p)
        # NaN を含む比較は常に False
        if math.isnan(a) or math.isnan(b):
            return False
    if operator == ">":
        return a > b
    if operator == ">=":
        return a >= b
    if operator == "<":
        return a < b
    return a <= b


def compare(left: Any, operator: str, right: Any) -> bool | None:
    """left と right を operator で比較する。未知演算子は None。"""

    if operator == "===":
        return strict_equals(left, right)
    if operator == "==":
        return loose_equals(left, right)
    if operator == "!==":
        return not strict_equals(left, right)
    if operator == "!=":
        return not loose_equals(left, right)
    if operator in {">", ">=", "<", "<="}:
        return _relational(left, right, operator)
    return None


def _flip(relation: Relation) -> Relation:
    return "OR" if relation == "AND" else "AND"


def evaluate_conditions(
    node: Any,
    attributes: Mapping[str, Any],
    relation: Relation = "AND",
) -> bool | None:
    """条件木を attributes に対して評価し、結果を返す。

    Parameters
    ----------
    node : ConditionNode | list | dict
        条件木。生の設定値（list/dict）も受け付ける。
    attributes : Mapping[str, Any]
        ブロックの現在の attribute。
    relation : {"AND", "OR"}
        この階層の子条件を結合する関係。入れ子 1 段ごとに反転する。

    Returns
    -------
    bool | None
        評価結果。有効な leaf が 1 件も無い場合は None（呼び出し側は「表示」として扱う）。
    """

    parsed = condition_from_raw(node)

    if parsed is None:
        return None

    if isinstance(parsed, ConditionLeaf):
        if parsed.field not in attributes:
            # attribute が存在しない場合は条件を確認できないので True とみなす
            return True
        return compare(attributes[parsed.field], parsed.operator, parsed.value)

    final: bool | None = None
    for child in parsed.children:
        if isinstance(child, ConditionGroup):
            result = evaluate_conditions(child, attributes, _flip(relation))
        else:
            result = evaluate_conditions(child, attributes, relation)
        if result is None:
            continue
        if final is None:
            final = bool(result)
        elif relation == "AND":
            final = final and bool(result)
        else:
            final = final or bool(result)
    return final


def is_displayed(conditional_logic: Any, attributes: Mapping[str, Any]) -> bool:
    """条件が未指定/空/評価結果なしなら True、評価結果が False のときだけ False を返す。"""

    if not conditional_logic:
        return True
    return evaluate_conditions(conditional_logic, attributes) is not False


__all__ = [
    "ConditionGroup",
    "ConditionLeaf",
    "ConditionNode",
    "OPERATORS",
    "compare",
    "condition_from_raw",
    "evaluate_conditions",
    "is_displayed",
    "loose_equals",
    "strict_equals",
]
