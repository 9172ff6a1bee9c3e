# どこで: `src/blockfields/core/fields/store.py`。
# 何を: AttributeStore（1 ブロックインスタンスの attribute 値）を定義する。
# なぜ: 変更経路を `update()` 1 つに固定し、描画側が状態を直接書き換えないようにするため。

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any


class _Unset:
    """attribute を「未定義」に戻すための番兵。"""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class AttributeStore:
    """attribute 名 → 値 のフラットなストア。

    Notes
    -----
    - 値はスカラーまたは list。
    - 変更は `update()` のみで行い、`UNSET` を渡したキーは削除する。
    - 外部には読み取り専用のスナップショットだけを渡す。
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = {}
        self._revision = 0
        if initial:
            for k, v in initial.items():
                if v is not UNSET:
                    self._values[str(k)] = v

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def get(self, name: str, default: Any = None) -> Any:
        """name の値を返す。未定義なら default。"""

        return self._values.get(name, default)

    @property
    def revision(self) -> int:
        """`update()` で実際に値が変わった回数。"""

        return self._revision

    def snapshot(self) -> Mapping[str, Any]:
        """現在値の読み取り専用スナップショットを返す。"""

        return MappingProxyType(dict(self._values))

    def as_dict(self) -> dict[str, Any]:
        """現在値の dict コピーを返す。"""

        return dict(self._values)

    def update(self, partial: Mapping[str, Any]) -> bool:
        """partial をキーの順に適用し、何か変わったら True を返す。"""

        changed = False
        for name, value in partial.items():
            key = str(name)
            if value is UNSET:
                if key in self._values:
                    del self._values[key]
                    changed = True
                continue
            if key in self._values and _same_value(self._values[key], value):
                continue
            self._values[key] = value
            changed = True
        if changed:
            self._revision += 1
        return changed


def _same_value(a: Any, b: Any) -> bool:
    # True == 1 のような型をまたぐ一致は「変更あり」として扱う
    return type(a) is type(b) and a == b


__all__ = ["AttributeStore", "UNSET"]
