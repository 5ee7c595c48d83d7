from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from .cards import Card


class Phase(str, Enum):
    PRE_DEAL = "PRE_DEAL"
    PRE_FLOP = "PRE_FLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"


class ActionType(str, Enum):
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    BET = "BET"
    RAISE = "RAISE"
    ALL_IN = "ALL_IN"


@dataclass(frozen=True)
class Action:
    type: ActionType
    # Total round bet after a BET/RAISE ("raise to"); unused otherwise.
    amount: Optional[int] = None


@dataclass
class TableConfig:
    seats: int = 2
    starting_stack: int = 1_000
    sb: int = 10
    bb: int = 20
    move_time_ms: int = 15_000
    max_illegal_actions: int = 3


@dataclass
class Player:
    seat: int
    name: str
    stack: int
    is_human: bool = False
    hole_cards: List[Card] = field(default_factory=list)
    in_hand: bool = False
    current_bet: int = 0
    total_in_pot: int = 0
    is_all_in: bool = False
    connected: bool = False

    def reset_for_hand(self) -> None:
        self.hole_cards.clear()
        self.in_hand = self.stack > 0
        self.current_bet = 0
        self.total_in_pot = 0
        self.is_all_in = False

    def reset_for_round(self) -> None:
        self.current_bet = 0


@dataclass
class Pot:
    amount: int
    eligible: Set[int] = field(default_factory=set)


@dataclass(frozen=True)
class ActionWindow:
    """What a seat may do right now, handed to action providers."""

    seat: int
    legal: Tuple[ActionType, ...]
    to_call: int
    current_bet: int
    min_raise_increment: int
    min_raise_to: Optional[int]
    max_raise_to: Optional[int]

    @property
    def can_raise(self) -> bool:
        return ActionType.BET in self.legal or ActionType.RAISE in self.legal

    @property
    def aggressive_action(self) -> Optional[ActionType]:
        if ActionType.BET in self.legal:
            return ActionType.BET
        if ActionType.RAISE in self.legal:
            return ActionType.RAISE
        return None


@dataclass(frozen=True)
class PlayerView:
    seat: int
    name: str
    is_human: bool
    stack: int
    current_bet: int
    total_in_pot: int
    in_hand: bool
    is_all_in: bool
    connected: bool
    hole: Tuple[str, ...]


@dataclass(frozen=True)
class PotView:
    amount: int
    eligible: Tuple[int, ...]


@dataclass(frozen=True)
class TableSnapshot:
    hand_id: Optional[str]
    phase: Phase
    button: Optional[int]
    community: Tuple[str, ...]
    players: Tuple[PlayerView, ...]
    pots: Tuple[PotView, ...]
    pot_total: int
    current_bet: int
    next_actor: Optional[int]

    def player(self, seat: int) -> PlayerView:
        for view in self.players:
            if view.seat == seat:
                return view
        raise KeyError(seat)

    def to_dict(self) -> Dict[str, object]:
        return {
            "hand_id": self.hand_id,
            "phase": self.phase.value,
            "button": self.button,
            "community": list(self.community),
            "players": [
                {
                    "seat": view.seat,
                    "name": view.name,
                    "stack": view.stack,
                    "current_bet": view.current_bet,
                    "in_hand": view.in_hand,
                    "is_all_in": view.is_all_in,
                    "connected": view.connected,
                    "hole": list(view.hole),
                }
                for view in self.players
            ],
            "pots": [{"amount": pot.amount, "eligible": list(pot.eligible)} for pot in self.pots],
            "pot_total": self.pot_total,
            "current_bet": self.current_bet,
            "next_actor": self.next_actor,
        }
