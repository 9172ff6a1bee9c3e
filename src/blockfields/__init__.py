# どこで: `src/blockfields/__init__.py`。
# 何を: ルート `blockfields` パッケージを定義する。
# なぜ: import 起点を `blockfields` に統一するため。

from __future__ import annotations

from blockfields.api import Block, StaticChoiceSources, load_block_definitions, preview, run

__all__ = ["Block", "StaticChoiceSources", "load_block_definitions", "preview", "run"]
