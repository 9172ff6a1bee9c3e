# どこで: `src/blockfields/core/fields/codec.py`。
# 何を: AttributeStore の JSON encode/decode を提供する。
# なぜ: 永続化仕様を AttributeStore 本体から分離し、スキーマ変更の影響範囲を局所化するため。

from __future__ import annotations

import json
from typing import Any

from .store import AttributeStore

CODEC_VERSION = 1


def _json_safe(value: Any) -> Any:
    """JSON に載せられる値へ寄せる（tuple は list、未知型は文字列）。"""

    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    return str(value)


def encode_attribute_store(store: AttributeStore, *, block_name: str) -> dict[str, Any]:
    """AttributeStore を JSON 化可能な dict に変換して返す。"""

    return {
        "version": CODEC_VERSION,
        "block": str(block_name),
        "attributes": {k: _json_safe(v) for k, v in store.as_dict().items()},
    }


def decode_attribute_store(obj: Any) -> AttributeStore:
    """JSON 由来の dict から AttributeStore を復元して返す。

    Raises
    ------
    ValueError
        形式が不正な場合。
    """

    if not isinstance(obj, dict):
        raise ValueError("attribute store の JSON は object である必要があります")
    version = obj.get("version", CODEC_VERSION)
    if version != CODEC_VERSION:
        raise ValueError(f"未対応の attribute store version です: got={version!r}")
    attributes = obj.get("attributes", {})
    if not isinstance(attributes, dict):
        raise ValueError("attributes は object である必要があります")
    return AttributeStore({str(k): v for k, v in attributes.items()})


def dumps_attribute_store(store: AttributeStore, *, block_name: str) -> str:
    """AttributeStore を JSON 文字列にして返す。"""

    return json.dumps(
        encode_attribute_store(store, block_name=block_name),
        ensure_ascii=False,
        indent=2,
        sort_keys=True,
    )


def loads_attribute_store(payload: str) -> AttributeStore:
    """JSON 文字列から AttributeStore を復元して返す。"""

    return decode_attribute_store(json.loads(payload))


__all__ = [
    "decode_attribute_store",
    "dumps_attribute_store",
    "encode_attribute_store",
    "loads_attribute_store",
]
