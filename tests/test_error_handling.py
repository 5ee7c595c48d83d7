import pytest

from holdem.game import GameEngine
from holdem.models import ActionType, TableConfig

from .helpers import auto_complete_hand, create_engine, perform_actions, start_hand


@pytest.fixture
def engine():
    table = create_engine()
    start_hand(table)
    return table


@pytest.mark.parametrize(
    "seat, action, amount, message",
    [
        (0, ActionType.CHECK, None, "Cannot check when facing a bet"),
        (1, ActionType.CALL, None, "Out of turn"),
        (0, "BOGUS", None, "Unsupported action"),
        (0, ActionType.BET, 60, "Cannot bet when facing a bet"),
        (0, ActionType.RAISE, None, "Raise requires amount"),
        (0, ActionType.RAISE, True, "Raise requires amount"),
        (0, ActionType.RAISE, 20, "Raise must exceed current bet"),
        (0, ActionType.RAISE, 30, "Raise below minimum"),
    ],
)
def test_illegal_action_is_rejected_without_side_effects(engine, seat, action, amount, message):
    before = engine.snapshot()
    with pytest.raises(ValueError, match=message):
        engine.apply_action(seat, action, amount)
    assert engine.snapshot() == before
    assert engine.next_actor() == 0


def test_call_with_nothing_owed_is_rejected(engine):
    perform_actions(engine, [(0, ActionType.CALL, None)])
    with pytest.raises(ValueError, match="Nothing to call"):
        engine.apply_action(1, ActionType.CALL)


def test_raise_with_no_bet_must_be_a_bet(engine):
    perform_actions(engine, [(0, ActionType.CALL, None), (1, ActionType.CHECK, None)])
    with pytest.raises(ValueError, match="Nothing to raise"):
        engine.apply_action(1, ActionType.RAISE, 40)
    events = engine.apply_action(1, ActionType.BET, 40)
    assert events[0] == {"ev": "BET", "seat": 1, "amount": 40, "to": 40, "all_in": False}


def test_oversized_raise_is_clamped_to_all_in(engine):
    events = engine.apply_action(0, ActionType.RAISE, 5_000)
    assert events[0] == {"ev": "RAISE", "seat": 0, "amount": 990, "to": 1000, "all_in": True}
    assert engine.seats[0].stack == 0


def test_folded_seat_cannot_act(engine):
    engine.seats[1].in_hand = False
    with pytest.raises(RuntimeError, match="Seat not active"):
        engine.legal_actions(1)
    with pytest.raises(RuntimeError, match="Seat not active"):
        engine.legal_actions(7)


def test_no_actions_after_hand_completes(engine):
    perform_actions(engine, [(0, ActionType.FOLD, None)])
    assert engine.next_actor() is None
    with pytest.raises(RuntimeError, match="Hand not in progress"):
        engine.apply_action(1, ActionType.CHECK)


def test_cannot_start_hand_while_one_is_running(engine):
    with pytest.raises(RuntimeError, match="already in progress"):
        engine.start_hand()


def test_cannot_start_hand_without_two_stacks():
    table = create_engine(stacks=[1000, 0])
    assert not table.can_start_hand()
    with pytest.raises(RuntimeError, match="Not enough active players"):
        table.start_hand()


def test_seating_rules():
    table = create_engine()
    with pytest.raises(ValueError, match="NAME_REQUIRED"):
        table.seat_player("   ")
    assert table.seat_player("player1") is table.seats[1]
    with pytest.raises(RuntimeError, match="Table is full"):
        table.seat_player("Newcomer")


def test_table_size_is_limited_by_deck():
    with pytest.raises(ValueError, match="between 2 and 22 seats"):
        GameEngine(TableConfig(seats=23))
    with pytest.raises(ValueError):
        GameEngine(TableConfig(seats=1))

    table = create_engine(seats=22)
    start_hand(table)
    auto_complete_hand(table)
    assert table.is_hand_complete()
    assert len(table.hand.community) == 5
    assert len(table.hand.deck) == 0
