from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from holdem.cards import RANKS, SUITS, Card, parse_cards
from holdem.game import GameEngine, HandContext
from holdem.models import ActionType, TableConfig


def create_engine(
    *,
    seats: int = 2,
    starting_stack: int = 1_000,
    sb: int = 10,
    bb: int = 20,
    stacks: Optional[Sequence[int]] = None,
    max_illegal_actions: int = 3,
) -> GameEngine:
    """Instantiate a game engine with a populated table."""
    engine = GameEngine(
        TableConfig(
            seats=seats,
            starting_stack=starting_stack,
            sb=sb,
            bb=bb,
            max_illegal_actions=max_illegal_actions,
        )
    )
    for idx in range(seats):
        engine.seat_player(f"Player{idx}", stack=None if stacks is None else stacks[idx])
    return engine


def start_hand(engine: GameEngine, seed: int = 42) -> HandContext:
    ctx = engine.start_hand(seed=seed)
    assert ctx is not None
    return ctx


def stacked_deck(labels: Sequence[str]) -> List[Card]:
    """Deck whose top cards are ``labels`` in order, followed by every other card."""
    top = parse_cards(labels)
    rest = [Card(rank, suit) for rank in RANKS for suit in SUITS if Card(rank, suit) not in top]
    return top + rest


def use_deck(monkeypatch, labels: Sequence[str]) -> None:
    monkeypatch.setattr("holdem.game.build_deck", lambda seed=None: stacked_deck(labels))


def perform_actions(engine: GameEngine, actions: Iterable[Tuple[int, ActionType, Optional[int]]]) -> List[dict]:
    """Apply a scripted sequence of actions (seat, action, amount)."""
    events: List[dict] = []
    for seat_idx, action, amount in actions:
        events.extend(engine.apply_action(seat_idx, action, amount))
    return events


def passive_action(engine: GameEngine, seat_idx: int) -> ActionType:
    legal = engine.legal_actions(seat_idx).legal
    if ActionType.CHECK in legal:
        return ActionType.CHECK
    if ActionType.CALL in legal:
        return ActionType.CALL
    return ActionType.FOLD


def auto_complete_hand(engine: GameEngine) -> List[dict]:
    """Advance the current hand with straightforward actions until completion."""
    events: List[dict] = []
    while not engine.is_hand_complete():
        actor = engine.next_actor()
        if actor is None:
            break
        events.extend(engine.apply_action(actor, passive_action(engine, actor), None))
    return events


def total_chips(engine: GameEngine) -> int:
    pot = engine.hand.pot_total if engine.hand else 0
    return sum(player.stack for player in engine.players) + pot


def stacks(engine: GameEngine) -> List[int]:
    return [player.stack for player in engine.players]
