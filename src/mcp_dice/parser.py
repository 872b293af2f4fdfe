from __future__ import annotations

import logging
import re

from .errors import DiceLimitError, DiceSyntaxError
from .models import DiceTerm, ModifierTerm, ParsedExpression, Selector, Term


logger = logging.getLogger(__name__)

_ADVANTAGE_TOKENS = {"adv", "advantage"}
_DISADVANTAGE_TOKENS = {"dis", "disadvantage"}

_TERM_RE = re.compile(
    r"(?P<sign>[+-])"
    r"(?:(?P<count>\d*)d(?P<sides>\d+)(?:(?P<selector>kh|kl|dh|dl)(?P<n>\d+))?"
    r"|(?P<modifier>\d+))",
    re.ASCII,
)

# Zero-width split: every run after the first starts at its sign character.
_SPLIT_RE = re.compile(r"(?=[+-])")

_MAX_DIGITS = 9

_EXAMPLE = "Example: '1d20+5 adv', '4d6kh3' or '2d6+1d4+3'."


def _strip_mode_tokens(tokens: list[str]) -> tuple[list[str], bool, bool]:
    advantage = disadvantage = False
    while tokens:
        last = tokens[-1]
        if last in _ADVANTAGE_TOKENS:
            advantage = True
        elif last in _DISADVANTAGE_TOKENS:
            disadvantage = True
        else:
            break
        tokens.pop()
    return tokens, advantage, disadvantage


def _split_runs(joined: str) -> list[str]:
    if joined[0] not in "+-":
        joined = "+" + joined
    return [run for run in _SPLIT_RE.split(joined) if run]


def _check_limit(name: str, value: int, limit: int | None, run: str) -> None:
    if limit is not None and value > limit:
        raise DiceLimitError(
            f"[LIMIT_EXCEEDED] {name} {value} in '{run}' is above the limit of {limit}. {_EXAMPLE}",
            fragment=run,
        )


def _to_int(digits: str, run: str) -> int:
    if len(digits.lstrip("0")) > _MAX_DIGITS:
        raise DiceLimitError(
            f"[LIMIT_EXCEEDED] Numbers may have at most {_MAX_DIGITS} digits in '{run[:40]}'. {_EXAMPLE}",
            fragment=run,
        )
    return int(digits)


def _parse_run(run: str, max_dice_count: int | None, max_die_sides: int | None) -> Term:
    m = _TERM_RE.fullmatch(run)
    if m is None:
        raise DiceSyntaxError(f"[INVALID_TERM] Could not understand '{run}'. {_EXAMPLE}", fragment=run)

    sign = -1 if m.group("sign") == "-" else 1
    if m.group("modifier") is not None:
        return ModifierTerm(value=sign * _to_int(m.group("modifier"), run))

    if sign < 0:
        raise DiceSyntaxError(
            f"[NEGATIVE_DICE_POOL] Dice terms cannot be subtracted: '{run}'. Only modifiers may be negative, e.g. '1d20-1'.",
            fragment=run,
        )

    count_str = m.group("count")
    # An absent or zero count rolls a single die.
    count = (_to_int(count_str, run) if count_str else 0) or 1
    sides = _to_int(m.group("sides"), run)
    if sides < 1:
        raise DiceSyntaxError(
            f"[INVALID_TERM] Dice must have at least 1 side in '{run}'. {_EXAMPLE}", fragment=run
        )
    _check_limit("Dice count", count, max_dice_count, run)
    _check_limit("Die size", sides, max_die_sides, run)

    keep = drop = None
    kind = m.group("selector")
    n = _to_int(m.group("n"), run) if m.group("n") else 0
    # A zero-sized selector is the same as no selector at all.
    if kind and n:
        selector = Selector(kind=kind, n=n)
        if selector.is_keep:
            keep = selector
        else:
            drop = selector

    return DiceTerm(count=count, sides=sides, keep=keep, drop=drop)


def parse(
    notation: str,
    *,
    max_dice_count: int | None = None,
    max_die_sides: int | None = None,
    max_terms: int | None = None,
) -> ParsedExpression:
    """Parse dice notation into an ordered list of terms.

    Trailing ``adv``/``advantage`` and ``dis``/``disadvantage`` words set the
    expression flags; whitespace elsewhere is ignored. Limits are only
    enforced when given.
    """

    if not notation or not notation.strip():
        raise DiceSyntaxError(f"[EMPTY_EXPRESSION] Empty input. {_EXAMPLE}")

    tokens, advantage, disadvantage = _strip_mode_tokens(notation.strip().lower().split())
    if advantage and disadvantage:
        raise DiceSyntaxError(
            "[CONFLICTING_MODE] Found both advantage and disadvantage. Use only one. Example: '1d20+5 adv'."
        )

    joined = "".join(tokens)
    if not joined:
        raise DiceSyntaxError(f"[EMPTY_EXPRESSION] No dice or modifiers found. {_EXAMPLE}")

    runs = _split_runs(joined)
    if max_terms is not None and len(runs) > max_terms:
        raise DiceLimitError(
            f"[LIMIT_EXCEEDED] {len(runs)} terms is above the limit of {max_terms}. {_EXAMPLE}"
        )

    terms = [_parse_run(run, max_dice_count, max_die_sides) for run in runs]
    logger.debug("parsed %r into %d term(s), advantage=%s, disadvantage=%s",
                 notation, len(terms), advantage, disadvantage)
    return ParsedExpression(terms=terms, advantage=advantage, disadvantage=disadvantage)


def format_expression(expr: ParsedExpression) -> str:
    """Render a parsed expression canonically, e.g. ``4d6kh3 + 5 adv``."""

    chunks: list[str] = []

    def append_signed(piece: str, sign: int) -> None:
        if not chunks:
            chunks.append(f"-{piece}" if sign < 0 else piece)
            return
        chunks.append(f"- {piece}" if sign < 0 else f"+ {piece}")

    for term in expr.terms:
        if isinstance(term, DiceTerm):
            append_signed(str(term), 1)
        else:
            append_signed(str(abs(term.value)), 1 if term.value >= 0 else -1)

    if expr.advantage:
        chunks.append("adv")
    elif expr.disadvantage:
        chunks.append("dis")
    return " ".join(chunks)
