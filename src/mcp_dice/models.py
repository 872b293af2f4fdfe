from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias


Mode: TypeAlias = Literal["advantage", "disadvantage"]
SelectorKind: TypeAlias = Literal["kh", "kl", "dh", "dl"]

KEEP_KINDS: frozenset[str] = frozenset({"kh", "kl"})
DROP_KINDS: frozenset[str] = frozenset({"dh", "dl"})


@dataclass(frozen=True)
class DieRoll:
    value: int


@dataclass(frozen=True)
class Selector:
    kind: SelectorKind
    n: int

    def __post_init__(self) -> None:
        if self.kind not in KEEP_KINDS | DROP_KINDS:
            raise ValueError(f"unknown selector {self.kind!r}")
        if self.n < 1:
            raise ValueError("selector count must be at least 1")

    @property
    def is_keep(self) -> bool:
        return self.kind in KEEP_KINDS

    def __str__(self) -> str:
        return f"{self.kind}{self.n}"


@dataclass(frozen=True)
class DiceTerm:
    count: int
    sides: int
    keep: Selector | None = None
    drop: Selector | None = None

    def __post_init__(self) -> None:
        if self.count < 1 or self.sides < 1:
            raise ValueError("dice count and sides must be at least 1")
        if self.keep is not None and self.drop is not None:
            raise ValueError("a dice term takes either a keep or a drop selector, not both")
        if self.keep is not None and not self.keep.is_keep:
            raise ValueError(f"{self.keep.kind!r} is not a keep selector")
        if self.drop is not None and self.drop.is_keep:
            raise ValueError(f"{self.drop.kind!r} is not a drop selector")

    @property
    def selector(self) -> Selector | None:
        return self.keep or self.drop

    def __str__(self) -> str:
        base = f"{self.count}d{self.sides}" if self.count != 1 else f"d{self.sides}"
        return f"{base}{self.selector or ''}"


@dataclass(frozen=True)
class ModifierTerm:
    value: int


Term: TypeAlias = DiceTerm | ModifierTerm


@dataclass(frozen=True)
class ParsedExpression:
    terms: list[Term]
    advantage: bool = False
    disadvantage: bool = False

    def __post_init__(self) -> None:
        if self.advantage and self.disadvantage:
            raise ValueError("advantage and disadvantage are mutually exclusive")

    @property
    def mode(self) -> Mode | None:
        if self.advantage:
            return "advantage"
        if self.disadvantage:
            return "disadvantage"
        return None


@dataclass(frozen=True)
class TermResult:
    """A general dice term: every die as rolled plus the indices that counted."""

    term: DiceTerm
    rolls: tuple[DieRoll, ...]
    used_indices: tuple[int, ...]
    subtotal: int

    @property
    def values(self) -> list[int]:
        return [r.value for r in self.rolls]

    @property
    def dropped_indices(self) -> tuple[int, ...]:
        used = set(self.used_indices)
        return tuple(i for i in range(len(self.rolls)) if i not in used)


@dataclass(frozen=True)
class AdvantageResult:
    """A single d20 rolled with advantage or disadvantage.

    ``base`` is recorded for display only; the contribution is the max (or
    min) of the two fresh dice in ``pair``.
    """

    mode: Mode
    base: DieRoll
    pair: tuple[DieRoll, DieRoll]
    final: int

    @property
    def subtotal(self) -> int:
        return self.final


@dataclass(frozen=True)
class ModifierDetail:
    value: int

    @property
    def subtotal(self) -> int:
        return self.value


Detail: TypeAlias = TermResult | AdvantageResult | ModifierDetail


@dataclass(frozen=True)
class RollResult:
    notation: str
    expression: ParsedExpression
    total: int
    details: list[Detail] = field(default_factory=list)
