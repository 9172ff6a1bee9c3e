# どこで: `src/blockfields/api/__init__.py`。
# 何を: 公開 API パッケージのエントリポイントとして Block / preview / run などを再エクスポートする。
# なぜ: ユーザーコードからシンプルに API を import できるようにするため。

from __future__ import annotations

from blockfields.core.block_loader import load_block_definitions
from blockfields.core.block_registry import Block, block_registry, preview, render_preview
from blockfields.core.choice_sources import StaticChoiceSources

__all__ = [
    "Block",
    "StaticChoiceSources",
    "block_registry",
    "load_block_definitions",
    "preview",
    "render_preview",
    "run",
]


def run(*args, **kwargs):
    """公開 run API へのラッパ（遅延インポートで GUI 依存を後回しにする）。"""

    from .runner import run as _run

    return _run(*args, **kwargs)
