"""固定の選択肢供給元（StaticChoiceSources）のテスト。"""

from __future__ import annotations

import pytest

from blockfields.core.choice_sources import StaticChoiceSources
from blockfields.core.fields.updates import Option


def test_from_mapping_accepts_list_and_mapping_forms():
    sources = StaticChoiceSources.from_mapping(
        {
            "terms": {"category": [{"value": 5, "label": "Cats"}, {"value": "9"}]},
            "posts": {"page": {"1": "Home", "2": "About"}},
        }
    )
    assert list(sources.terms("category")) == [Option("5", "Cats"), Option("9", "9")]
    assert list(sources.posts("page")) == [Option("1", "Home"), Option("2", "About")]


def test_unknown_taxonomy_or_post_type_is_empty():
    sources = StaticChoiceSources.from_mapping(None)
    assert list(sources.terms("tag")) == []
    assert list(sources.posts("post")) == []


def test_terms_include_filter():
    sources = StaticChoiceSources(
        terms={"category": [Option("5", "Cats"), Option("9", "Dogs"), Option("11", "Birds")]}
    )
    out = sources.terms("category", {"include": [9, "11"]})
    assert [o.label for o in out] == ["Dogs", "Birds"]


def test_from_mapping_rejects_bad_shapes():
    with pytest.raises(TypeError):
        StaticChoiceSources.from_mapping({"terms": {"category": "Cats"}})
    with pytest.raises(TypeError):
        StaticChoiceSources.from_mapping({"terms": {"category": [{"label": "no value"}]}})
    with pytest.raises(TypeError):
        StaticChoiceSources.from_mapping({"terms": ["category"]})
