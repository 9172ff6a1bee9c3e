# どこで: `src/blockfields/core/fields/persistence.py`。
# 何を: AttributeStore の JSON 永続化（path 算出 / load / save）を提供する。
# なぜ: インスペクタで編集した attribute を、ブロック単位で再起動後に復元できるようにするため。

from __future__ import annotations

import logging
import re
from pathlib import Path

from blockfields.core.runtime_config import output_root_dir

from .codec import dumps_attribute_store, loads_attribute_store
from .store import AttributeStore

_logger = logging.getLogger(__name__)


def _sanitize_filename_fragment(text: str) -> str:
    """ファイル名に埋め込めるように text を正規化して返す。"""

    normalized = re.sub(r"[^A-Za-z0-9._-]+", "_", str(text))
    normalized = normalized.strip("._-")
    return normalized or "unknown"


def default_attribute_store_path(block_name: str) -> Path:
    """ブロック名に基づく AttributeStore の既定保存パスを返す。

    Notes
    -----
    パスは `{output_root}/attributes/{block_name}.json`（`/` などは `_` に置換）。
    """

    filename = f"{_sanitize_filename_fragment(block_name)}.json"
    return output_root_dir() / "attributes" / filename


def load_attribute_store(path: Path) -> AttributeStore:
    """JSON ファイルから AttributeStore をロードして返す。無ければ空の AttributeStore を返す。"""

    try:
        payload = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return AttributeStore()
    except OSError:
        _logger.warning("attribute ファイルを読めません: %s", path)
        return AttributeStore()
    except UnicodeDecodeError:
        _logger.warning("attribute ファイルが破損しているため無視します: %s", path)
        return AttributeStore()

    try:
        return loads_attribute_store(payload)
    except ValueError:
        # 破損した JSON は利便性のため無視して起動する。
        _logger.warning("attribute ファイルが破損しているため無視します: %s", path)
        return AttributeStore()


def save_attribute_store(store: AttributeStore, path: Path, *, block_name: str) -> None:
    """AttributeStore を JSON として path に保存する（親ディレクトリは作成する）。"""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_attribute_store(store, block_name=block_name) + "\n", encoding="utf-8")
    _logger.info("attribute を保存しました: %s (%d keys)", path, len(store))


__all__ = ["default_attribute_store_path", "load_attribute_store", "save_attribute_store"]
