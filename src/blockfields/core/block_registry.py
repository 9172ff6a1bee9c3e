# どこで: `src/blockfields/core/block_registry.py`。
# 何を: Block（名前・表示引数・パネル設定）と、ブロック名 → Block / プレビュー関数のレジストリを提供する。
# なぜ: ブロック名から編集 UI とプレビュー描画を引けるようにし、登録経路を 1 箇所に揃えるため。

from __future__ import annotations

import logging
from collections.abc import ItemsView, Iterable, Mapping
from types import MappingProxyType
from typing import Any, Callable

from blockfields.core.fields.session import EditSession
from blockfields.core.fields.spec import PanelSpec, panels_from_mapping
from blockfields.core.fields.store import AttributeStore

_logger = logging.getLogger(__name__)

PreviewFunc = Callable[[Mapping[str, Any]], str]


class Block:
    """1 種類のブロック定義。

    生成時にパネル設定を正規化し、グローバルな `block_registry` へ自身を登録する。
    """

    def __init__(
        self,
        name: str,
        *,
        args: Mapping[str, Any] | None = None,
        panels: Mapping[str, Any] | Iterable[PanelSpec] = (),
        overwrite: bool = True,
        registry: "BlockRegistry | None" = None,
    ) -> None:
        if not name:
            raise ValueError("block name は空にできません")
        self.name = str(name)
        self.args: Mapping[str, Any] = MappingProxyType(dict(args or {}))
        self.panels: tuple[PanelSpec, ...] = panels_from_mapping(panels)
        (block_registry if registry is None else registry)._register(self, overwrite=overwrite)

    @property
    def title(self) -> str:
        return str(self.args.get("title") or self.name)

    def edit(self, attributes: Mapping[str, Any] | AttributeStore | None = None) -> EditSession:
        """編集セッションを作って返す。"""

        if isinstance(attributes, AttributeStore):
            store = attributes
        else:
            store = AttributeStore(attributes)
        return EditSession(self, store)

    def save(self) -> None:
        """保存されるマークアップ。描画はプレビュー側に委ねるので常に None。"""

        return None

    def __repr__(self) -> str:
        return f"Block(name={self.name!r}, panels={[p.key for p in self.panels]!r})"


class BlockRegistry:
    """ブロック名と Block / プレビュー関数を対応付けるレジストリ。"""

    def __init__(self) -> None:
        self._items: dict[str, Block] = {}
        self._previews: dict[str, PreviewFunc] = {}

    def _register(self, block: Block, *, overwrite: bool = True) -> None:
        """Block を登録する（内部用）。

        Notes
        -----
        登録は `Block(...)` の生成経由に統一する。
        """

        if not overwrite and block.name in self._items:
            raise ValueError(f"block '{block.name}' は既に登録されている")
        self._items[block.name] = block

    def get(self, name: str) -> Block:
        """ブロック名に対応する Block を返す。

        Raises
        ------
        KeyError
            未登録のブロック名が指定された場合。
        """

        return self._items[name]

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __getitem__(self, name: str) -> Block:
        return self.get(name)

    def items(self) -> ItemsView[str, Block]:
        return self._items.items()

    def names(self) -> list[str]:
        """登録順のブロック名を返す。"""

        return list(self._items)

    def unregister(self, name: str) -> None:
        """ブロックとプレビュー関数の登録を外す（未登録なら何もしない）。"""

        self._items.pop(name, None)
        self._previews.pop(name, None)

    def set_preview(self, name: str, func: PreviewFunc) -> None:
        self._previews[str(name)] = func

    def render_preview(self, name: str, attributes: Mapping[str, Any]) -> str | None:
        """ブロック名と attribute からプレビューを描画して返す。

        プレビュー関数が未登録なら None。関数の例外はログに残して None を返す。
        """

        func = self._previews.get(name)
        if func is None:
            return None
        try:
            return str(func(MappingProxyType(dict(attributes))))
        except Exception:
            _logger.exception("プレビューの描画に失敗しました: block=%s", name)
            return None


block_registry = BlockRegistry()
"""グローバルなブロックレジストリインスタンス。"""


def preview(name: str, *, registry: BlockRegistry | None = None):
    """ブロック名に対するプレビュー関数を登録するデコレータ。

    Examples
    --------
    @preview("grimlock/query")
    def render_query(attributes):
        return f"<div>{attributes.get('title', '')}</div>"
    """

    def decorator(func: PreviewFunc) -> PreviewFunc:
        (block_registry if registry is None else registry).set_preview(name, func)
        return func

    return decorator


def render_preview(name: str, attributes: Mapping[str, Any]) -> str | None:
    """グローバルレジストリでプレビューを描画して返す。"""

    return block_registry.render_preview(name, attributes)


__all__ = ["Block", "BlockRegistry", "PreviewFunc", "block_registry", "preview", "render_preview"]
