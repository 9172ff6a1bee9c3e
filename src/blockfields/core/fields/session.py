# どこで: `src/blockfields/core/fields/session.py`。
# 何を: 1 ブロックインスタンスの編集セッション（mount / 更新 / 保存）を定義する。
# なぜ: ホスト側が暗黙に持っていた状態を明示的なコンテキストへ寄せ、更新経路を 1 つに固定するため。

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .migrate import migrate_attributes
from .spec import PanelSpec
from .store import AttributeStore

if TYPE_CHECKING:
    from blockfields.core.block_registry import Block

_logger = logging.getLogger(__name__)


class EditSession:
    """Block 1 インスタンスの編集状態。

    Notes
    -----
    - `update()` が唯一の書き込み経路。
    - `mount()` は何度呼んでも 1 回だけ移行処理を行う。
    """

    def __init__(self, block: "Block", store: AttributeStore | None = None) -> None:
        self._block = block
        self._store = AttributeStore() if store is None else store
        self._mounted = False

    @property
    def block(self) -> "Block":
        return self._block

    @property
    def store(self) -> AttributeStore:
        return self._store

    @property
    def panels(self) -> tuple[PanelSpec, ...]:
        return self._block.panels

    @property
    def mounted(self) -> bool:
        return self._mounted

    def mount(self) -> list[tuple[str, str]]:
        """初回だけ旧 attribute 名を移行し、移行した (old, new) を返す。"""

        if self._mounted:
            return []
        self._mounted = True
        return migrate_attributes(self.panels, self._store.snapshot(), self.update)

    def attributes(self) -> Mapping[str, Any]:
        """現在の attribute の読み取り専用スナップショットを返す。"""

        return self._store.snapshot()

    def update(self, partial: Mapping[str, Any]) -> bool:
        """partial を store へ反映し、変更があれば True を返す。"""

        changed = self._store.update(partial)
        if changed:
            _logger.debug("%s: attribute を更新しました: %s", self._block.name, sorted(partial))
        return changed

    def save(self) -> None:
        """保存時のマークアップを返す。描画はプレビュー側が担うため常に None。"""

        return self._block.save()


__all__ = ["EditSession"]
