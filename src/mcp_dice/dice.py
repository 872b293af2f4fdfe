from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from .config import Settings
from .errors import DiceError
from .models import AdvantageResult, Detail, ModifierDetail, Selector
from .parser import format_expression
from .resolver import roll
from .rng import DieRoller, RandomDieRoller


logger = logging.getLogger(__name__)


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _selector_to_dict(selector: Selector | None) -> dict[str, Any] | None:
    if selector is None:
        return None
    return {"kind": selector.kind, "n": selector.n}


def detail_to_dict(detail: Detail) -> dict[str, Any]:
    if isinstance(detail, ModifierDetail):
        return {"type": "modifier", "value": detail.value, "subtotal": detail.subtotal}

    if isinstance(detail, AdvantageResult):
        a, b = (d.value for d in detail.pair)
        short = "adv" if detail.mode == "advantage" else "dis"
        return {
            "type": "d20",
            "mode": detail.mode,
            "base": detail.base.value,
            "rolls": [a, b],
            "adv_or_dis": f"{short}({a}, {b})",
            "final": detail.final,
            "subtotal": detail.subtotal,
        }

    return {
        "type": "dice",
        "count": detail.term.count,
        "sides": detail.term.sides,
        "keep": _selector_to_dict(detail.term.keep),
        "drop": _selector_to_dict(detail.term.drop),
        "rolls": detail.values,
        "used_indices": list(detail.used_indices),
        "subtotal": detail.subtotal,
    }


def _explain(detail: Detail) -> str:
    if isinstance(detail, ModifierDetail):
        return f"{detail.value:+d}"

    if isinstance(detail, AdvantageResult):
        short = "adv" if detail.mode == "advantage" else "dis"
        rolls = [d.value for d in detail.pair]
        return f"d20({short}): base {detail.base.value}, rolls {rolls} -> keep {detail.final}"

    # Dropped dice are shown in parentheses.
    used = set(detail.used_indices)
    shown = ", ".join(
        str(r.value) if i in used else f"({r.value})" for i, r in enumerate(detail.rolls)
    )
    return f"{detail.term}: rolls [{shown}] => {detail.subtotal}"


def roll_from_text(
    text: str,
    roller: DieRoller | None = None,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Parse, validate, then roll. Raises DiceError for invalid input.

    When ``settings`` is given its dice limits are enforced.
    """

    roller = roller if roller is not None else RandomDieRoller()
    limits = settings.limits() if settings is not None else {}

    try:
        result = roll(text, roller, **limits)
    except DiceError as e:
        logger.warning("rejected %r: %s", text, e)
        raise

    details = [detail_to_dict(d) for d in result.details]
    explanation = "; ".join(_explain(d) for d in result.details) + f" => {result.total}"
    logger.info("rolled %r => %d", text, result.total)

    return {
        "request_id": uuid.uuid4().hex,
        "timestamp": _now_utc_iso(),
        "notation": text,
        "normalized_expression": format_expression(result.expression),
        "advantage": result.expression.advantage,
        "disadvantage": result.expression.disadvantage,
        "rng": {
            "source": getattr(roller, "source", type(roller).__name__),
            "nonce": str(uuid.uuid4()),
        },
        "details": details,
        "total": result.total,
        "explanation": explanation,
        "summary": f"Expression: {text}\nTotal: {result.total}",
    }
