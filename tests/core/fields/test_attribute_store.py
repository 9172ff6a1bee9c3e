"""AttributeStore の更新経路（update / UNSET / revision）のテスト。"""

from __future__ import annotations

from blockfields.core.fields.store import UNSET, AttributeStore


def test_update_applies_keys_and_bumps_revision():
    store = AttributeStore({"a": 1})
    assert store.revision == 0

    assert store.update({"b": "x", "a": 2}) is True
    assert store.as_dict() == {"a": 2, "b": "x"}
    assert store.revision == 1


def test_update_with_same_value_is_not_a_change():
    store = AttributeStore({"a": 1})
    assert store.update({"a": 1}) is False
    assert store.revision == 0


def test_update_treats_type_change_as_change():
    store = AttributeStore({"flag": 1})
    assert store.update({"flag": True}) is True
    assert store.get("flag") is True


def test_unset_deletes_key():
    store = AttributeStore({"old": "v", "keep": 1})
    assert store.update({"old": UNSET}) is True
    assert "old" not in store
    assert store.get("old") is None
    assert store.update({"missing": UNSET}) is False


def test_initial_unset_values_are_dropped():
    store = AttributeStore({"a": UNSET, "b": 2})
    assert list(store) == ["b"]
    assert len(store) == 1


def test_snapshot_is_read_only_copy():
    store = AttributeStore({"a": [1, 2]})
    snap = store.snapshot()
    store.update({"a": [3]})
    assert snap["a"] == [1, 2]
    try:
        snap["b"] = 1  # type: ignore[index]
    except TypeError:
        pass
    else:
        raise AssertionError("snapshot は書き換えられない想定")


def test_unset_is_falsy_singleton():
    assert not UNSET
    assert repr(UNSET) == "UNSET"
    assert type(UNSET)() is UNSET
