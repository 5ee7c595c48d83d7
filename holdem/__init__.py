"""Texas Hold'em rules core: cards, hand evaluation, betting engine."""

from .ai import HousePolicy
from .cards import RANKS, SUITS, Card, Deck, build_deck, parse_cards
from .evaluator import HandCategory, HandResult, compare, describe_hand, evaluate
from .game import GameEngine, HandContext, describe_event
from .models import (
    Action,
    ActionType,
    ActionWindow,
    Phase,
    Player,
    Pot,
    TableConfig,
    TableSnapshot,
)
from .pots import build_pots, split_pot
from .runner import ActionProvider, play_hand, play_match, request_action

__all__ = [
    "Card",
    "Deck",
    "RANKS",
    "SUITS",
    "build_deck",
    "parse_cards",
    "HandCategory",
    "HandResult",
    "compare",
    "describe_hand",
    "evaluate",
    "GameEngine",
    "HandContext",
    "describe_event",
    "Action",
    "ActionType",
    "ActionWindow",
    "Phase",
    "Player",
    "Pot",
    "TableConfig",
    "TableSnapshot",
    "build_pots",
    "split_pot",
    "HousePolicy",
    "ActionProvider",
    "play_hand",
    "play_match",
    "request_action",
]
