"""Seeded random number generator for the battle simulator.

Wraps Python's random.Random so initiative and ability draws can be
reproduced from a seed.  Anything that satisfies :class:`RandomSource`
can be handed to the resolver instead, which is how tests script the
exact sequence of draws.
"""

from __future__ import annotations

import random
from typing import Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """The two draws a battle needs."""

    def random_bool(self) -> bool: ...

    def random_choice(self, seq: Sequence[T]) -> T: ...


class BattleRNG:
    """Deterministic RNG for initiative and ability draws.

    Parameters
    ----------
    seed:
        Integer seed for the underlying Mersenne Twister.  ``None`` picks
        a fresh seed from system entropy (the seed is still recorded so a
        battle can be replayed).
    """

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            seed = random.SystemRandom().getrandbits(63)
        self._seed = seed
        self._rng = random.Random(seed)

    # -- public properties ---------------------------------------------------

    @property
    def seed(self) -> int:
        """Return the seed this RNG was initialised with."""
        return self._seed

    # -- core random methods -------------------------------------------------

    def random_bool(self) -> bool:
        """Return ``True`` with probability one half."""
        return self._rng.random() < 0.5

    def random_choice(self, seq: Sequence[T]) -> T:
        """Return a random element from a non-empty sequence."""
        return self._rng.choice(seq)

    def __repr__(self) -> str:
        return f"BattleRNG(seed={self._seed})"
