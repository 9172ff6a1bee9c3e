# どこで: `src/blockfields/core/block_loader.py`。
# 何を: YAML のブロック定義ファイルを読み込み、Block をレジストリへ登録する。
# なぜ: パネル設定をコード外の静的ファイルとして管理できるようにするため。

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .block_registry import Block, BlockRegistry
from .choice_sources import StaticChoiceSources
from .fields.spec import unknown_field_types

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BlockDefinitions:
    """ブロック定義ファイルの読み込み結果。"""

    source: str
    blocks: tuple[Block, ...]
    sources: StaticChoiceSources


def load_block_definitions_text(
    text: str,
    *,
    source: str = "<string>",
    registry: BlockRegistry | None = None,
) -> BlockDefinitions:
    """YAML テキストからブロック定義を読み込み、登録して返す。

    形式::

        blocks:
          grimlock/query:
            args: {title: Query}
            panels:
              general:
                label: General
                fields:
                  - {type: text, name: title, label: Title}
        sources:
          terms: {category: [{value: "5", label: Cats}]}
          posts: {post: {"12": Hello}}

    Raises
    ------
    RuntimeError
        YAML として読めない場合や、blocks / panels の形が不正な場合。
    """

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"ブロック定義の読み込みに失敗しました: source={source}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise RuntimeError(f"ブロック定義は mapping である必要があります: source={source}")

    raw_blocks = data.get("blocks") or {}
    if not isinstance(raw_blocks, dict):
        raise RuntimeError(f"blocks は mapping である必要があります: source={source}")

    blocks: list[Block] = []
    for name, raw in raw_blocks.items():
        blocks.append(_block_from_raw(str(name), raw, source=source, registry=registry))

    try:
        sources = StaticChoiceSources.from_mapping(data.get("sources"))
    except TypeError as exc:
        raise RuntimeError(f"sources が不正です: source={source}: {exc}") from exc

    _logger.info("ブロック定義を読み込みました: %s (%d blocks)", source, len(blocks))
    return BlockDefinitions(source=source, blocks=tuple(blocks), sources=sources)


def _block_from_raw(
    name: str,
    raw: Any,
    *,
    source: str,
    registry: BlockRegistry | None,
) -> Block:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise RuntimeError(f"block '{name}' は mapping である必要があります: source={source}")

    args = raw.get("args") or {}
    if not isinstance(args, dict):
        raise RuntimeError(f"block '{name}' の args は mapping である必要があります: source={source}")

    panels = raw.get("panels") or {}
    if not isinstance(panels, dict):
        raise RuntimeError(f"block '{name}' の panels は mapping である必要があります: source={source}")

    try:
        block = Block(name, args=args, panels=panels, registry=registry)
    except TypeError as exc:
        raise RuntimeError(f"block '{name}' のパネル設定が不正です: source={source}: {exc}") from exc

    unknown = unknown_field_types(block.panels)
    if unknown:
        # 描画時は黙ってスキップされるので、読み込み時にだけ知らせる
        _logger.debug("block '%s' に未知 type のフィールドがあります: %s", name, unknown)
    return block


def load_block_definitions(path: Path, *, registry: BlockRegistry | None = None) -> BlockDefinitions:
    """YAML ファイルからブロック定義を読み込み、登録して返す。"""

    text = Path(path).read_text(encoding="utf-8")
    return load_block_definitions_text(text, source=str(path), registry=registry)


__all__ = ["BlockDefinitions", "load_block_definitions", "load_block_definitions_text"]
