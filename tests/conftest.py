"""Shared fixtures for the skip-list test-suite."""
import pytest

from pyskip import SkipList


def _check_structure(sl: SkipList) -> None:
    """Assert every structural invariant of `sl` holds."""
    store = sl._store
    head = sl._head
    less = sl._less

    assert len(head) >= 1
    bottom = []
    handle = head[0]
    while handle is not None:
        bottom.append(handle)
        handle = store.node(handle).forward[0]

    # every live record is reachable exactly once from the bottom chain
    assert len(set(bottom)) == len(bottom)
    assert sorted(bottom) == sorted(store)

    position = {h: i for i, h in enumerate(bottom)}
    for a, b in zip(bottom, bottom[1:]):
        assert less(store.node(a).key, store.node(b).key)

    tallest = max((store.node(h).height for h in bottom), default=1)
    assert len(head) == tallest

    for level in range(len(head)):
        expected = [h for h in bottom if store.node(h).height > level]
        chain = []
        handle = head[level]
        while handle is not None:
            chain.append(handle)
            handle = store.node(handle).forward[level]
        assert chain == expected, f"level {level} is not the tower subsequence"
        assert [position[h] for h in chain] == sorted(position[h] for h in chain)


@pytest.fixture
def check_structure():
    return _check_structure


@pytest.fixture
def sample():
    """Seeded list holding 1..6 -> 10..15."""
    sl = SkipList[int, int](seed=1234)
    for key, value in [(1, 10), (2, 11), (3, 12), (4, 13), (5, 14), (6, 15)]:
        sl.insert(key, value)
    return sl
