# どこで: `src/blockfields/core/fields/migrate.py`。
# 何を: 旧 attribute 名（old_name）の値を現行名へ移し、旧名を未定義へ戻す互換処理を提供する。
# なぜ: 設定側で attribute をリネームしても、保存済みブロックの値を失わないようにするため。

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .spec import PanelSpec, iter_fields
from .store import UNSET

_logger = logging.getLogger(__name__)

OnUpdate = Callable[[Mapping[str, Any]], Any]


def migrate_attributes(
    panels: Iterable[PanelSpec],
    attributes: Mapping[str, Any],
    on_update: OnUpdate,
) -> list[tuple[str, str]]:
    """old_name を持つフィールドの値を name へ移す。

    Parameters
    ----------
    panels : Iterable[PanelSpec]
        ブロックのパネル設定。
    attributes : Mapping[str, Any]
        現在の attribute。
    on_update : Callable[[Mapping[str, Any]], Any]
        更新の唯一の経路。フィールドごとに `{name: 値, old_name: UNSET}` を 1 回で渡す。

    Returns
    -------
    list[tuple[str, str]]
        移行した (old_name, name) の列。2 回目以降は旧名が無いので空になる。
    """

    migrated: list[tuple[str, str]] = []
    for field in iter_fields(panels):
        old_name = field.old_name
        if not old_name or not field.name or old_name == field.name:
            continue
        if old_name not in attributes:
            continue
        on_update({field.name: attributes[old_name], old_name: UNSET})
        migrated.append((old_name, field.name))

    if migrated:
        _logger.info(
            "旧 attribute 名を移行しました: %s",
            ", ".join(f"{old}->{new}" for old, new in migrated),
        )
    return migrated


__all__ = ["migrate_attributes"]
