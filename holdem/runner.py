"""Synchronous driver: the one place where the engine waits for a decision."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping, Optional

from .game import Event, GameEngine
from .models import Action, ActionType, ActionWindow, TableSnapshot

LOGGER = logging.getLogger("holdem.runner")

ActionProvider = Callable[[ActionWindow, TableSnapshot], Action]


def fallback_action(window: ActionWindow) -> Action:
    """Forced decision for a seat that timed out or kept sending illegal actions."""
    return Action(ActionType.FOLD)


def request_action(engine: GameEngine, seat_idx: int, provider: ActionProvider) -> List[Event]:
    attempts = max(engine.config.max_illegal_actions, 1)
    for attempt in range(1, attempts + 1):
        window = engine.legal_actions(seat_idx)
        action = provider(window, engine.snapshot(viewer=seat_idx))
        try:
            return engine.apply_action(seat_idx, action.type, action.amount)
        except ValueError as exc:
            LOGGER.warning(
                "Rejected action seat=%s action=%s amount=%s reason=%s (attempt %s/%s)",
                seat_idx,
                action.type,
                action.amount,
                exc,
                attempt,
                attempts,
            )

    LOGGER.error("Seat %s sent %s illegal actions; folding", seat_idx, attempts)
    forced = fallback_action(engine.legal_actions(seat_idx))
    return engine.apply_action(seat_idx, forced.type, forced.amount)


def play_hand(
    engine: GameEngine,
    providers: Mapping[int, ActionProvider],
    seed: Optional[int] = None,
) -> List[Event]:
    """Play one full hand, asking ``providers[seat]`` for every decision."""
    engine.start_hand(seed=seed)
    events = engine.consume_pre_events()
    while not engine.is_hand_complete():
        seat_idx = engine.next_actor()
        if seat_idx is None:
            break
        events.extend(request_action(engine, seat_idx, providers[seat_idx]))
    return events


def play_match(
    engine: GameEngine,
    providers: Mapping[int, ActionProvider],
    max_hands: Optional[int] = None,
    seed: Optional[int] = None,
) -> Dict[str, object]:
    """Play hands until one stack is left (or ``max_hands`` is reached)."""
    hands_played = 0
    while engine.can_start_hand():
        if max_hands is not None and hands_played >= max_hands:
            break
        hand_seed = None if seed is None else seed + hands_played
        play_hand(engine, providers, seed=hand_seed)
        hands_played += 1

    result = engine.match_result()
    result["hands_played"] = hands_played
    LOGGER.info("Match finished after %s hands: winner=%s", hands_played, result["winner"])
    return result
