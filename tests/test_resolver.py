import pytest

from mcp_dice.models import (
    AdvantageResult,
    DiceTerm,
    DieRoll,
    ModifierDetail,
    ModifierTerm,
    ParsedExpression,
    Selector,
    TermResult,
)
from mcp_dice.parser import parse
from mcp_dice.resolver import resolve, roll, select_indices
from mcp_dice.rng import RandomDieRoller


def _rolls(*values):
    return tuple(DieRoll(v) for v in values)


@pytest.mark.parametrize(
    ("selector", "values", "expected"),
    [
        (None, (3, 6, 1), [0, 1, 2]),
        # kh reports ranked order, ties favour the earlier die.
        (Selector("kh", 3), (4, 2, 6, 4), [2, 0, 3]),
        (Selector("kh", 2), (5, 5, 5), [0, 1]),
        # kl is restored to draw order.
        (Selector("kl", 2), (4, 2, 6, 1), [1, 3]),
        (Selector("kl", 1), (3, 3, 3), [2]),
        (Selector("dh", 1), (4, 2, 6, 4), [0, 1, 3]),
        (Selector("dh", 1), (5, 5), [1]),
        (Selector("dl", 1), (4, 2, 6, 4), [0, 2, 3]),
        (Selector("dl", 1), (5, 5), [0]),
    ],
)
def test_select_indices(selector, values, expected):
    count = len(values)
    if selector is None:
        term = DiceTerm(count=count, sides=6)
    elif selector.is_keep:
        term = DiceTerm(count=count, sides=6, keep=selector)
    else:
        term = DiceTerm(count=count, sides=6, drop=selector)
    assert select_indices(term, _rolls(*values)) == expected


@pytest.mark.parametrize(
    ("selector", "expected"),
    [
        (Selector("kh", 5), [1, 0]),
        (Selector("kl", 5), [0, 1]),
        (Selector("dh", 5), []),
        (Selector("dl", 5), []),
    ],
)
def test_oversized_selectors_clamp(selector, expected):
    kwargs = {"keep": selector} if selector.is_keep else {"drop": selector}
    term = DiceTerm(count=2, sides=6, **kwargs)
    assert select_indices(term, _rolls(2, 5)) == expected


def test_keep_highest_three_of_four(scripted):
    roller = scripted([3, 6, 1, 5])
    total, (detail,) = resolve(parse("4d6kh3"), roller)

    assert isinstance(detail, TermResult)
    assert detail.values == [3, 6, 1, 5]
    assert detail.used_indices == (1, 3, 0)
    assert detail.dropped_indices == (2,)
    assert detail.subtotal == total == 14


def test_drop_lowest_of_two_d20(scripted):
    total, (detail,) = resolve(parse("2d20dl1"), scripted([7, 15]))
    assert detail.used_indices == (1,)
    assert total == 15


def test_modifiers_and_dice_sum_in_source_order(scripted):
    roller = scripted([2, 5, 3])
    total, details = resolve(parse("2d6+1d4+3"), roller)

    assert roller.sides_seen == [6, 6, 4]
    assert [d.subtotal for d in details] == [7, 3, 3]
    assert isinstance(details[2], ModifierDetail)
    assert total == 13


def test_modifier_only_expression(scripted):
    total, details = resolve(parse("+3"), scripted([]))
    assert total == 3
    assert details == [ModifierDetail(value=3)]


def test_advantage_discards_base_and_keeps_higher_of_fresh_pair(scripted):
    roller = scripted([20, 4, 11])
    total, details = resolve(parse("1d20+5 adv"), roller)

    assert roller.sides_seen == [20, 20, 20]
    adv = details[0]
    assert isinstance(adv, AdvantageResult)
    assert adv.mode == "advantage"
    assert adv.base == DieRoll(20)
    assert adv.pair == (DieRoll(4), DieRoll(11))
    assert adv.final == 11
    assert total == 16


def test_disadvantage_keeps_lower_of_fresh_pair(scripted):
    total, (dis,) = resolve(parse("d20 dis"), scripted([1, 18, 9]))
    assert dis.mode == "disadvantage"
    assert dis.final == 9
    assert total == 9


def test_advantage_ignored_for_non_d20(scripted):
    roller = scripted([4])
    total, (detail,) = resolve(parse("1d6 adv"), roller)
    assert isinstance(detail, TermResult)
    assert roller.sides_seen == [6]
    assert total == 4


@pytest.mark.parametrize("text", ["2d20 adv", "1d20kh1 adv", "1d20dl1 dis"])
def test_advantage_needs_a_plain_single_d20(scripted, text):
    expr = parse(text)
    count = expr.terms[0].count
    roller = scripted([10] * count)
    total, (detail,) = resolve(expr, roller)
    assert isinstance(detail, TermResult)
    assert len(roller.sides_seen) == count


def test_advantage_applies_to_every_eligible_d20(scripted):
    roller = scripted([1, 2, 3, 4, 5, 6])
    total, details = resolve(parse("1d20+1d20 adv"), roller)
    assert [d.final for d in details] == [3, 6]
    assert total == 9


def test_hand_built_expression_resolves():
    expr = ParsedExpression(
        terms=[DiceTerm(count=3, sides=1, drop=Selector("dh", 1)), ModifierTerm(value=-2)]
    )
    total, details = resolve(expr)
    assert details[0].used_indices == (1, 2)
    assert total == 0


def test_total_is_sum_of_contributions():
    roller = RandomDieRoller.seeded(7)
    for _ in range(50):
        total, details = resolve(parse("4d6kh3 + 2d8dl1 + 1d20 - 2 adv"), roller)
        assert total == sum(d.subtotal for d in details)


def test_seeded_rolls_are_reproducible():
    a = roll("6d6dh2 + 1d20 + 3 dis", RandomDieRoller.seeded(42))
    b = roll("6d6dh2 + 1d20 + 3 dis", RandomDieRoller.seeded(42))
    assert a == b


def test_rolled_values_stay_in_range():
    result = roll("20d6+20d20", RandomDieRoller.seeded("range"))
    d6, d20 = result.details
    assert all(1 <= v <= 6 for v in d6.values)
    assert all(1 <= v <= 20 for v in d20.values)
