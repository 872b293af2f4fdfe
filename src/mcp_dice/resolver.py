from __future__ import annotations

import logging

from .models import (
    AdvantageResult,
    DiceTerm,
    Detail,
    DieRoll,
    ModifierDetail,
    ModifierTerm,
    Mode,
    ParsedExpression,
    RollResult,
    TermResult,
)
from .parser import parse
from .rng import DieRoller, RandomDieRoller


logger = logging.getLogger(__name__)


def _ranked_indices(rolls: tuple[DieRoll, ...]) -> list[int]:
    # Highest value first; sorted() is stable so ties keep draw order.
    return sorted(range(len(rolls)), key=lambda i: -rolls[i].value)


def select_indices(term: DiceTerm, rolls: tuple[DieRoll, ...]) -> list[int]:
    """Indices of the dice that count toward the subtotal.

    ``kh`` reports indices in ranked order (highest first); ``kl``, ``dh``,
    ``dl`` and plain terms report them in draw order. Selectors larger than
    the pool clamp to keeping (or dropping) everything.
    """

    everything = list(range(len(rolls)))
    selector = term.selector
    if selector is None:
        return everything

    ranked = _ranked_indices(rolls)
    n = selector.n
    if selector.kind == "kh":
        return ranked[:n]
    if selector.kind == "kl":
        return sorted(ranked[-n:])

    dropped = set(ranked[:n] if selector.kind == "dh" else ranked[-n:])
    return [i for i in everything if i not in dropped]


def roll_term(term: DiceTerm, roller: DieRoller) -> TermResult:
    rolls = tuple(DieRoll(roller.roll(term.sides)) for _ in range(term.count))
    used = tuple(select_indices(term, rolls))
    subtotal = sum(rolls[i].value for i in used)
    return TermResult(term=term, rolls=rolls, used_indices=used, subtotal=subtotal)


def roll_advantage(mode: Mode, roller: DieRoller) -> AdvantageResult:
    base = DieRoll(roller.roll(20))
    a = DieRoll(roller.roll(20))
    b = DieRoll(roller.roll(20))
    final = max(a.value, b.value) if mode == "advantage" else min(a.value, b.value)
    return AdvantageResult(mode=mode, base=base, pair=(a, b), final=final)


def _uses_advantage(term: DiceTerm, expr: ParsedExpression) -> bool:
    return (
        expr.mode is not None
        and term.count == 1
        and term.sides == 20
        and term.selector is None
    )


def resolve(expr: ParsedExpression, roller: DieRoller | None = None) -> tuple[int, list[Detail]]:
    """Roll every term of ``expr`` in source order and return ``(total, details)``."""

    roller = roller if roller is not None else RandomDieRoller()
    details: list[Detail] = []

    for term in expr.terms:
        if isinstance(term, ModifierTerm):
            details.append(ModifierDetail(value=term.value))
        elif _uses_advantage(term, expr):
            details.append(roll_advantage(expr.mode, roller))
        else:
            details.append(roll_term(term, roller))
        logger.debug("resolved %s", details[-1])

    total = sum(d.subtotal for d in details)
    return total, details


def roll(
    notation: str,
    roller: DieRoller | None = None,
    *,
    max_dice_count: int | None = None,
    max_die_sides: int | None = None,
    max_terms: int | None = None,
) -> RollResult:
    """Parse and resolve ``notation`` in one step."""

    expr = parse(
        notation,
        max_dice_count=max_dice_count,
        max_die_sides=max_die_sides,
        max_terms=max_terms,
    )
    total, details = resolve(expr, roller)
    return RollResult(notation=notation, expression=expr, total=total, details=details)
