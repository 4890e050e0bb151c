"""Tower-height generation for new skip-list nodes.

Heights follow the classic 50 % branching factor: start at 1 and keep adding a
level while a fair coin says so. The draw is capped at one level above the
current top so that a single insert grows the head by at most one level.

Coin flips are served from a cached random word, one bit per flip, so the
underlying engine is only consulted once every ``_WORD_BITS`` flips. Every
generator owns its cache and its engine; containers never share one unless a
caller explicitly hands the same generator to several of them.
"""
from __future__ import annotations

import random
from typing import Optional

__all__ = ["LevelGenerator"]

_WORD_BITS = 32


class LevelGenerator:
    """Per-instance fair-coin height generator.

    Parameters
    ----------
    seed:
        Seed for a private :class:`random.Random` engine.
    rng:
        An existing engine to draw from instead (takes precedence over `seed`).
    max_level:
        Optional hard ceiling on generated heights.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        rng: Optional[random.Random] = None,
        max_level: Optional[int] = None,
    ) -> None:
        if max_level is not None and max_level < 1:
            raise ValueError(f"max_level must be >= 1, got {max_level}")
        self._rng = rng if rng is not None else random.Random(seed)
        self.max_level = max_level
        self._word = 0
        self._bit = _WORD_BITS  # empty cache, refill on first flip

    def flip(self) -> bool:
        """Consume one cached random bit."""
        if self._bit >= _WORD_BITS:
            self._word = self._rng.getrandbits(_WORD_BITS)
            self._bit = 0
        mask = 1 << self._bit
        self._bit += 1
        return bool(self._word & mask)

    def generate(self, top_level: int) -> int:
        """Return a height in ``1 .. top_level + 1`` (geometric, p = 0.5)."""
        limit = top_level + 1
        if self.max_level is not None:
            limit = min(limit, self.max_level)
        height = 1
        while height < limit and self.flip():
            height += 1
        return height

    def spawn(self) -> "LevelGenerator":
        """Fork of this generator: same engine state, bit cache and ceiling.

        The parent's engine is only read, so spawning never changes the
        heights the parent produces afterwards.
        """
        rng = random.Random()
        rng.setstate(self._rng.getstate())
        child = LevelGenerator(rng=rng, max_level=self.max_level)
        child._word, child._bit = self._word, self._bit
        return child
