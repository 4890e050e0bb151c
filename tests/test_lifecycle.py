"""Copy, move, swap and clear."""
import copy

import pytest

from pyskip import SkipList
from pyskip.store import NodeStore


def _towers(sl):
    out = []
    cur = sl.begin()
    while cur:
        out.append((cur.key, cur.height))
        cur.advance()
    return out


@pytest.fixture
def big():
    sl = SkipList(seed=31)
    for i in range(300):
        sl.insert(i * 3 % 301, f"v{i}")
    return sl


def test_copy_keeps_content_and_heights(big, check_structure):
    """copy keeps content and every tower height."""
    clone = big.copy()
    assert list(clone.items()) == list(big.items())
    assert _towers(clone) == _towers(big)
    assert clone.top_level() == big.top_level()
    check_structure(clone)


def test_copy_is_independent(big, check_structure):
    """Mutating a copy or its source does not affect the other."""
    clone = copy.copy(big)
    clone.erase(3)
    clone[1000] = "new"
    big[0] = "changed"
    assert 3 in big and 3 not in clone
    assert 1000 not in big
    assert clone[0] == "v0"
    check_structure(big)
    check_structure(clone)


def test_copy_shares_values():
    """copy is shallow on values."""
    payload = [1]
    sl = SkipList({"k": payload})
    assert sl.copy()["k"] is payload


def test_deepcopy_copies_values(check_structure):
    """deepcopy copies values and keeps tower heights."""
    sl = SkipList({"k": [1]}, seed=6)
    deep = copy.deepcopy(sl)
    deep["k"].append(2)
    assert sl["k"] == [1]
    assert _towers(deep) == _towers(sl)
    check_structure(deep)


def test_copy_of_empty():
    """Copying an empty list yields an empty list."""
    sl = SkipList()
    clone = sl.copy()
    assert clone.empty()
    assert clone.top_level() == 1


def test_copy_failure_frees_partial_copy(big, monkeypatch):
    """A failed copy releases its partial nodes and leaves the source intact."""
    before = list(big.items())
    stores = []
    original = NodeStore.allocate

    def flaky(self, key, value, height):
        if self not in stores:
            stores.append(self)
        if len(self) == 50:
            raise MemoryError
        return original(self, key, value, height)

    monkeypatch.setattr(NodeStore, "allocate", flaky)
    with pytest.raises(MemoryError):
        big.copy()
    assert len(stores) == 1
    assert len(stores[0]) == 0
    assert list(big.items()) == before


def test_assign_replaces_content(big, check_structure):
    """assign copies another list and invalidates old cursors."""
    target = SkipList({"x": 1}, seed=2)
    stale = target.find("x")
    target.assign(big)
    assert list(target.items()) == list(big.items())
    assert _towers(target) == _towers(big)
    with pytest.raises(RuntimeError):
        stale.value
    target.assign(target)
    assert len(target) == len(big)
    check_structure(target)
    with pytest.raises(TypeError):
        target.assign({"a": 1})  # type: ignore[arg-type]


def test_failed_assign_keeps_target(big, monkeypatch):
    """A failed assign keeps the target's content."""
    target = SkipList({"x": 1})

    def boom(*args, **kwargs):
        raise MemoryError

    monkeypatch.setattr(NodeStore, "allocate", boom)
    with pytest.raises(MemoryError):
        target.assign(big)
    assert list(target.items()) == [("x", 1)]


def test_move_leaves_source_empty(big):
    """move hands the nodes over and leaves the source empty."""
    content = list(big.items())
    cur = big.find(3)
    moved = big.move()
    assert big.empty()
    assert big.size() == 0
    assert big.top_level() == 1
    assert list(moved.items()) == content
    # cursors follow the nodes to their new owner
    assert cur.value == moved[3]
    big[1] = "again"
    assert moved[1] == "v201"


def test_move_from_replaces_destination(big):
    """move_from replaces the destination's content."""
    content = list(big.items())
    dest = SkipList({"x": 1})
    dest.move_from(big)
    assert list(dest.items()) == content
    assert big.empty()
    with pytest.raises(TypeError):
        dest.move_from([1, 2])  # type: ignore[arg-type]


def test_swap(check_structure):
    """swap exchanges the content of two lists."""
    a = SkipList({1: "a"})
    b = SkipList({2: "b", 3: "c"})
    a.swap(b)
    assert list(a.items()) == [(2, "b"), (3, "c")]
    assert list(b.items()) == [(1, "a")]
    check_structure(a)
    check_structure(b)


def test_clear(big):
    """clear empties the list and releases every node."""
    big.clear()
    assert big.empty()
    assert big.size() == 0
    assert big.top_level() == 1
    assert len(big._store) == 0
    big.insert(5, 5)
    assert list(big.items()) == [(5, 5)]


@pytest.mark.parametrize("operation", ["copy", "deepcopy", "move"])
def test_lifecycle_does_not_disturb_source_heights(operation):
    """copy, deepcopy and move leave the source's future tower heights unchanged."""
    a = SkipList(seed=5)
    b = SkipList(seed=5)
    for i in range(10):
        a.insert(i, i)
        b.insert(i, i)

    if operation == "copy":
        a.copy()
    elif operation == "deepcopy":
        copy.deepcopy(a)
    else:
        a = a.move().move()

    for i in range(10, 210):
        a.insert(i, i)
        b.insert(i, i)
    assert _towers(a) == _towers(b)
