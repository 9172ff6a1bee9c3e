"""
どこで: `src/blockfields/api/runner.py`。公開 API のランナー実装。
何を: pyglet + pyimgui のインスペクタウィンドウで 1 ブロックの attribute を編集するランナーを提供する。
なぜ: ブロック定義とプレビュー関数を実際に操作して確認できる経路を用意するため。
"""

from __future__ import annotations

import logging
from pathlib import Path

import pyglet

from blockfields.core.block_loader import load_block_definitions
from blockfields.core.block_registry import Block, block_registry
from blockfields.core.choice_sources import ChoiceSources
from blockfields.core.fields.persistence import (
    default_attribute_store_path,
    load_attribute_store,
    save_attribute_store,
)
from blockfields.core.runtime_config import runtime_config, set_config_path
from blockfields.interactive.inspector.editor import BlockEditor
from blockfields.interactive.inspector.pyglet_backend import create_inspector_window

_logger = logging.getLogger(__name__)


def run(
    block: Block | str,
    *,
    blocks_file: str | Path | None = None,
    config_path: str | Path | None = None,
    sources: ChoiceSources | None = None,
    persistence: bool = True,
) -> None:
    """インスペクタウィンドウを開き、ウィンドウを閉じるまで block の attribute を編集する。

    Parameters
    ----------
    block : Block | str
        編集するブロック、または登録済みのブロック名。
    blocks_file : str | Path | None
        ブロック定義 YAML。None の場合は config の `paths.blocks_file` を使う（未設定なら読まない）。
    config_path : str | Path | None
        明示する config.yaml。
    sources : ChoiceSources | None
        term_select / post_select の選択肢供給元。None の場合はブロック定義の `sources:` を使う。
    persistence : bool
        True の場合、attribute を `{output_dir}/attributes/` に JSON 保存し、次回起動時に復元する。

    Returns
    -------
    None
        ウィンドウを閉じると制御を返す。
    """

    if config_path is not None:
        set_config_path(config_path)
    cfg = runtime_config()

    definitions_path = Path(blocks_file) if blocks_file is not None else cfg.blocks_file
    if definitions_path is not None:
        definitions = load_block_definitions(definitions_path)
        if sources is None:
            sources = definitions.sources

    target = block if isinstance(block, Block) else block_registry.get(str(block))

    store_path = default_attribute_store_path(target.name) if persistence else None
    store = load_attribute_store(store_path) if store_path is not None else None
    session = target.edit(store)

    width, height = cfg.inspector_window_size
    window = create_inspector_window(
        width=width,
        height=height,
        caption=f"{target.title} - Block Inspector",
        position=cfg.inspector_window_position,
    )
    editor = BlockEditor(window, session=session, sources=sources)

    def request_exit(*_: object) -> None:
        pyglet.app.exit()

    def draw_frame() -> None:
        editor.draw_frame()

    window.push_handlers(on_close=request_exit, on_draw=draw_frame)

    def draw_all(dt: float) -> None:
        if window in pyglet.app.windows:
            window.draw(dt)

    # fps<=0 は「スロットリング無し（可能な限り回す）」として扱う。
    if cfg.fps <= 0:
        pyglet.clock.schedule(draw_all)
    else:
        pyglet.clock.schedule_interval(draw_all, 1.0 / float(cfg.fps))

    try:
        pyglet.app.run(interval=None)
    finally:
        pyglet.clock.unschedule(draw_all)
        if store_path is not None:
            try:
                save_attribute_store(session.store, store_path, block_name=target.name)
            except OSError:
                _logger.exception("attribute の保存に失敗しました: %s", store_path)
        editor.close()


__all__ = ["run"]
