# どこで: `src/blockfields/core/choice_sources.py`。
# 何を: term_select / post_select に渡す選択肢（Option 列）の供給元を定義する。
# なぜ: タクソノミー/投稿の取得方法をウィジェットから切り離し、差し替え可能にするため。

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from blockfields.core.fields.updates import Option


class ChoiceSources(Protocol):
    """term / post の選択肢を返す供給元。"""

    def terms(self, taxonomy: str, query_args: Mapping[str, Any] | None = None) -> Sequence[Option]:
        ...

    def posts(self, post_type: str) -> Sequence[Option]:
        ...


def _options_from_raw(raw: Any, *, key: str) -> tuple[Option, ...]:
    """`[{value, label}, ...]` または `{value: label}` から Option 列を作る。"""

    if raw is None:
        return ()
    if isinstance(raw, Mapping):
        return tuple(Option(value=str(k), label=str(v)) for k, v in raw.items())
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise TypeError(f"{key} は list または mapping である必要があります: got={raw!r}")
    out: list[Option] = []
    for item in raw:
        if not isinstance(item, Mapping) or "value" not in item:
            raise TypeError(f"{key} の要素は value を持つ mapping である必要があります: got={item!r}")
        value = str(item["value"])
        out.append(Option(value=value, label=str(item.get("label", value))))
    return tuple(out)


class StaticChoiceSources:
    """設定ファイル（`sources:`）由来の固定の選択肢を返す。"""

    def __init__(
        self,
        *,
        terms: Mapping[str, Sequence[Option]] | None = None,
        posts: Mapping[str, Sequence[Option]] | None = None,
    ) -> None:
        self._terms = {str(k): tuple(v) for k, v in (terms or {}).items()}
        self._posts = {str(k): tuple(v) for k, v in (posts or {}).items()}

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "StaticChoiceSources":
        """`{"terms": {taxonomy: [...]}, "posts": {post_type: [...]}}` から生成する。"""

        if not raw:
            return cls()
        if not isinstance(raw, Mapping):
            raise TypeError(f"sources は mapping である必要があります: got={raw!r}")
        terms_raw = raw.get("terms") or {}
        posts_raw = raw.get("posts") or {}
        if not isinstance(terms_raw, Mapping) or not isinstance(posts_raw, Mapping):
            raise TypeError("sources.terms / sources.posts は mapping である必要があります")
        return cls(
            terms={
                str(k): _options_from_raw(v, key=f"sources.terms.{k}")
                for k, v in terms_raw.items()
            },
            posts={
                str(k): _options_from_raw(v, key=f"sources.posts.{k}")
                for k, v in posts_raw.items()
            },
        )

    def terms(self, taxonomy: str, query_args: Mapping[str, Any] | None = None) -> Sequence[Option]:
        options = self._terms.get(str(taxonomy), ())
        if query_args:
            include = query_args.get("include")
            if include:
                wanted = {str(v) for v in include}
                options = tuple(o for o in options if o.value in wanted)
        return options

    def posts(self, post_type: str) -> Sequence[Option]:
        return self._posts.get(str(post_type), ())


__all__ = ["ChoiceSources", "StaticChoiceSources"]
