from __future__ import annotations

import random
import secrets
from typing import Protocol


class DieRoller(Protocol):
    def roll(self, sides: int) -> int:
        """Return a uniform integer in ``[1, sides]``."""
        ...


class RandomDieRoller:
    """Die roller backed by a ``random.Random`` compatible generator.

    Defaults to ``secrets.SystemRandom``; use :meth:`seeded` for reproducible
    rolls.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else secrets.SystemRandom()

    @classmethod
    def seeded(cls, seed: int | str) -> RandomDieRoller:
        return cls(random.Random(seed))

    @property
    def source(self) -> str:
        return f"{type(self._rng).__module__}.{type(self._rng).__name__}"

    def roll(self, sides: int) -> int:
        return self._rng.randint(1, sides)
