import threading

import pytest

from beans.links import (
    BrokenLink,
    Cycle,
    LinkCheckResult,
    LinkMixin,
    SelfLink,
    canonical_cycle_key,
    join_with_or,
    valid_parent_types,
)
from beans.model import Bean


class _Store(LinkMixin):
    def __init__(self, beans):
        self._beans = {b.id: b for b in beans}
        self._lock = threading.RLock()
        self.saved = []

    def get(self, bean_id):
        try:
            return self._beans[bean_id]
        except KeyError:
            raise LookupError(bean_id) from None

    def _save_to_disk(self, bean):
        self.saved.append(bean.id)


def _bean(bean_id, blocking=None, parent="", bean_type="task"):
    return Bean(
        id=bean_id,
        title=f"Bean {bean_id}",
        status="todo",
        type=bean_type,
        blocking=list(blocking or []),
        parent=parent,
    )


@pytest.fixture
def incoming_store():
    return _Store(
        [
            _bean("aaa1", blocking=["bbb2"], parent="ccc3"),
            _bean("bbb2"),
            _bean("ccc3"),
            _bean("ddd4", blocking=["bbb2"]),
        ]
    )


def test_multiple_incoming_blocks(incoming_store):
    links = incoming_store.find_incoming_links("bbb2")
    assert len(links) == 2
    assert {link.from_bean.id: link.link_type for link in links} == {
        "aaa1": "blocking",
        "ddd4": "blocking",
    }


def test_single_incoming_parent_link(incoming_store):
    links = incoming_store.find_incoming_links("ccc3")
    assert len(links) == 1
    assert links[0].from_bean.id == "aaa1"
    assert links[0].link_type == "parent"


def test_no_incoming_links(incoming_store):
    assert incoming_store.find_incoming_links("aaa1") == []
    assert incoming_store.find_incoming_links("nonexistent") == []


@pytest.fixture
def chain_store():
    return _Store(
        [
            _bean("aaa1", blocking=["bbb2"]),
            _bean("bbb2", blocking=["ccc3"]),
            _bean("ccc3"),
            _bean("ddd4"),
            _bean("xxx1", parent="yyy2"),
            _bean("yyy2", parent="zzz3"),
            _bean("zzz3"),
        ]
    )


def test_detect_cycle_would_create_cycle(chain_store):
    cycle = chain_store.detect_cycle("ccc3", "blocking", "aaa1")
    assert cycle == ["ccc3", "aaa1", "bbb2", "ccc3"]


def test_detect_cycle_none(chain_store):
    assert chain_store.detect_cycle("ddd4", "blocking", "aaa1") is None


def test_detect_parent_cycle(chain_store):
    cycle = chain_store.detect_cycle("zzz3", "parent", "xxx1")
    assert cycle == ["zzz3", "xxx1", "yyy2", "zzz3"]


def test_detect_cycle_ignores_other_link_types(chain_store):
    assert chain_store.detect_cycle("ccc3", "related", "aaa1") is None


@pytest.fixture
def broken_result():
    store = _Store(
        [
            _bean("aaa1", blocking=["bbb2", "aaa1"], parent="nonexistent"),
            _bean("bbb2", blocking=["aaa1"]),
        ]
    )
    return store.check_all_links()


def test_check_detects_broken_links(broken_result):
    assert broken_result.broken_links == [BrokenLink("aaa1", "parent", "nonexistent")]


def test_check_detects_self_references(broken_result):
    assert broken_result.self_links == [SelfLink("aaa1", "blocking")]


def test_check_detects_cycles(broken_result):
    assert len(broken_result.cycles) == 1
    cycle = broken_result.cycles[0]
    assert cycle.link_type == "blocking"
    assert cycle.path == ["aaa1", "bbb2", "aaa1"]


def test_check_counts(broken_result):
    assert broken_result.has_issues() is True
    assert broken_result.total_issues() == 3


def test_check_all_links_clean():
    store = _Store([_bean("aaa1", blocking=["bbb2"]), _bean("bbb2")])
    result = store.check_all_links()
    assert result.has_issues() is False
    assert result.total_issues() == 0


def test_remove_links_to():
    store = _Store(
        [
            _bean("aaa1", blocking=["target"], parent="target"),
            _bean("bbb2", blocking=["target"]),
            _bean("target"),
        ]
    )
    assert store.remove_links_to("target") == 3
    a = store.get("aaa1")
    assert a.parent == ""
    assert a.blocking == []
    assert store.get("bbb2").blocking == []
    assert sorted(store.saved) == ["aaa1", "bbb2"]


def test_fix_broken_links():
    store = _Store(
        [
            _bean("aaa1", blocking=["bbb2", "aaa1"], parent="nonexistent"),
            _bean("bbb2"),
        ]
    )
    assert store.fix_broken_links() == 2
    a = store.get("aaa1")
    assert a.blocking == ["bbb2"]
    assert a.is_blocking("bbb2")
    assert a.parent == ""
    assert store.saved == ["aaa1"]


def test_link_check_result_empty():
    result = LinkCheckResult()
    assert result.has_issues() is False
    assert result.total_issues() == 0


def test_link_check_result_with_issues():
    result = LinkCheckResult(
        broken_links=[BrokenLink("a", "blocking", "x")],
        self_links=[SelfLink("b", "parent")],
        cycles=[Cycle("blocking", ["a", "b", "a"])],
    )
    assert result.has_issues() is True
    assert result.total_issues() == 3


@pytest.mark.parametrize(
    "path, expected",
    [
        (["a", "b", "c", "a"], "a->b->c"),
        (["c", "a", "b", "c"], "a->b->c"),
        (["b", "c", "a", "b"], "a->b->c"),
        (["x", "y", "x"], "x->y"),
        (["a"], ""),
        ([], ""),
    ],
)
def test_canonical_cycle_key(path, expected):
    assert canonical_cycle_key(path) == expected


@pytest.mark.parametrize(
    "bean_type, expected",
    [
        ("milestone", None),
        ("epic", ["milestone"]),
        ("feature", ["milestone", "epic"]),
        ("task", ["milestone", "epic", "feature"]),
        ("bug", ["milestone", "epic", "feature"]),
        ("unknown", ["milestone", "epic", "feature"]),
    ],
)
def test_valid_parent_types(bean_type, expected):
    assert valid_parent_types(bean_type) == expected


@pytest.mark.parametrize(
    "items, expected",
    [
        ([], ""),
        (["a"], "a"),
        (["a", "b"], "a or b"),
        (["a", "b", "c"], "a, b, or c"),
    ],
)
def test_join_with_or(items, expected):
    assert join_with_or(items) == expected


@pytest.fixture
def typed_store():
    return _Store(
        [
            _bean("ms01", bean_type="milestone"),
            _bean("ep01", bean_type="epic"),
            _bean("tk01", bean_type="task"),
        ]
    )


def test_validate_parent_accepts_valid(typed_store):
    epic = typed_store.get("ep01")
    assert typed_store.validate_parent(epic, "ms01") is None
    assert typed_store.validate_parent(epic, "") is None


def test_validate_parent_milestone_cannot_have_parent(typed_store):
    with pytest.raises(ValueError, match="milestone beans cannot have a parent"):
        typed_store.validate_parent(typed_store.get("ms01"), "ep01")


def test_validate_parent_missing(typed_store):
    with pytest.raises(ValueError, match="parent bean not found: nope"):
        typed_store.validate_parent(typed_store.get("tk01"), "nope")


def test_validate_parent_wrong_type(typed_store):
    with pytest.raises(
        ValueError,
        match="task beans can only have milestone, epic, or feature as parent, not task",
    ):
        typed_store.validate_parent(_bean("tk02"), "tk01")