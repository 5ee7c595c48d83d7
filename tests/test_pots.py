import pytest

from holdem.models import Pot
from holdem.pots import build_pots, split_pot


def test_equal_contributions_make_one_pot():
    pots = build_pots({0: 100, 1: 100, 2: 100}, live=[0, 1, 2])
    assert pots == [Pot(amount=300, eligible={0, 1, 2})]


def test_all_in_levels_create_side_pots():
    pots = build_pots({0: 100, 1: 300, 2: 500}, live=[0, 1, 2])
    assert pots == [
        Pot(amount=300, eligible={0, 1, 2}),
        Pot(amount=400, eligible={1, 2}),
        Pot(amount=200, eligible={2}),
    ]
    assert sum(pot.amount for pot in pots) == 900


def test_folded_chips_stay_but_seat_is_not_eligible():
    pots = build_pots({0: 10, 1: 5, 2: 10}, live=[0, 2])
    assert pots == [Pot(amount=25, eligible={0, 2})]


def test_layer_above_every_live_seat_joins_pot_below():
    # Seat 2 folded after putting in more than anyone still live.
    pots = build_pots({0: 50, 1: 50, 2: 80}, live=[0, 1])
    assert pots == [Pot(amount=180, eligible={0, 1})]


def test_zero_contributions_are_ignored():
    assert build_pots({0: 0, 1: 0}, live=[0, 1]) == []


def test_split_pot_gives_odd_chips_to_earliest_winners():
    assert split_pot(25, [2, 0]) == {2: 13, 0: 12}
    assert split_pot(100, [1, 3, 0]) == {1: 34, 3: 33, 0: 33}
    assert split_pot(90, [4]) == {4: 90}


def test_split_pot_needs_a_winner():
    with pytest.raises(ValueError):
        split_pot(10, [])
