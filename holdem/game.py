from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Collection, Dict, List, Mapping, Optional, Set, Tuple

from .cards import DECK_SIZE, Card, Deck, build_deck, cards_to_labels
from .evaluator import HandResult, compare, describe_hand, evaluate
from .models import (
    ActionType,
    ActionWindow,
    Phase,
    Player,
    PlayerView,
    Pot,
    PotView,
    TableConfig,
    TableSnapshot,
)
from .pots import build_pots, split_pot

LOGGER = logging.getLogger("holdem")

# GameEngine keeps all table state in memory. No networking or terminal I/O
# lives here, only poker rules, chip accounting, and betting order.

Event = Dict[str, object]
Observer = Callable[[List[Event], TableSnapshot], None]

# Street dealt when the betting on the key phase closes, and how many cards.
NEXT_STREET = {
    Phase.PRE_FLOP: (Phase.FLOP, 3),
    Phase.FLOP: (Phase.TURN, 1),
    Phase.TURN: (Phase.RIVER, 1),
}

# Two hole cards per seat plus five board cards and three burns must fit in one deck.
MAX_SEATS = (DECK_SIZE - 5 - 3) // 2


@dataclass
class HandContext:
    # All mutable info about the current hand (deck, pots, who still owes a decision).
    hand_id: str
    seed: int
    button: int
    deck: Deck
    community: List[Card] = field(default_factory=list)
    phase: Phase = Phase.PRE_DEAL
    pots: List[Pot] = field(default_factory=list)
    current_bet: int = 0
    min_raise_increment: int = 0
    sb_seat: Optional[int] = None
    bb_seat: Optional[int] = None
    current_seat: Optional[int] = None
    # Seats that must still act before the betting round can close.
    pending: Set[int] = field(default_factory=set)
    # Seats that acted since the last full raise; they may not re-raise a short all-in.
    acted: Set[int] = field(default_factory=set)
    results: Dict[int, HandResult] = field(default_factory=dict)
    pre_events: List[Event] = field(default_factory=list)

    @property
    def pot_total(self) -> int:
        return sum(pot.amount for pot in self.pots)


def describe_event(event: Mapping[str, object], names: Mapping[int, str]) -> str:
    """Render an engine event as a human-readable log line."""

    def who(key: str = "seat") -> str:
        seat = event.get(key)
        return names.get(seat, f"Seat {seat}") if isinstance(seat, int) else "?"

    ev = event.get("ev")
    all_in = " and is all-in" if event.get("all_in") else ""
    if ev == "POST_BLINDS":
        return (
            f"{who('sb_seat')} posts small blind {event['sb']}; "
            f"{who('bb_seat')} posts big blind {event['bb']}"
        )
    if ev == "FOLD":
        return f"{who()} folds"
    if ev == "CHECK":
        return f"{who()} checks"
    if ev == "CALL":
        return f"{who()} calls {event['amount']}{all_in}"
    if ev == "BET":
        return f"{who()} bets {event['to']}{all_in}"
    if ev == "RAISE":
        return f"{who()} raises to {event['to']}{all_in}"
    if ev == "ALL_IN":
        return f"{who()} goes all-in for {event['to']}"
    if ev in (Phase.FLOP.value, Phase.TURN.value, Phase.RIVER.value):
        return f"{str(ev).title()}: {' '.join(event['board'])}"  # type: ignore[arg-type]
    if ev == "SHOWDOWN":
        return f"{who()} shows {' '.join(event['hole'])}: {event['description']}"  # type: ignore[arg-type]
    if ev == "POT_AWARD":
        suffix = f" with {event['description']}" if event.get("description") else ""
        return f"{who()} wins {event['amount']}{suffix}"
    if ev == "UNAWARDED":
        return f"Pot of {event['amount']} left unawarded: no players in hand"
    if ev == "ELIMINATED":
        return f"{who()} is eliminated"
    return str(dict(event))


class GameEngine:
    """No-Limit Texas Hold'em engine for a single table."""

    def __init__(self, config: TableConfig) -> None:
        if config.seats < 2 or config.seats > MAX_SEATS:
            raise ValueError(f"Table needs between 2 and {MAX_SEATS} seats")
        self.config = config
        self.seats: List[Optional[Player]] = [None] * config.seats
        self.button: Optional[int] = None
        self.hand_counter = 0
        self.hand: Optional[HandContext] = None
        self.observers: List[Tuple[Observer, Optional[int]]] = []

    # Seat management -------------------------------------------------

    def seat_player(self, name: str, is_human: bool = False, stack: Optional[int] = None) -> Player:
        display = name.strip()
        if not display:
            raise ValueError("NAME_REQUIRED")

        for player in self.players:
            if player.name.casefold() == display.casefold():
                return player

        for idx in range(self.config.seats):
            if self.seats[idx] is None:
                player = Player(
                    seat=idx,
                    name=display,
                    stack=self.config.starting_stack if stack is None else stack,
                    is_human=is_human,
                )
                self.seats[idx] = player
                return player

        raise RuntimeError("Table is full")

    @property
    def players(self) -> List[Player]:
        return [seat for seat in self.seats if seat is not None]

    def set_connected(self, seat_idx: int, connected: bool) -> None:
        seat = self.seats[seat_idx]
        if seat:
            seat.connected = connected

    def add_observer(self, observer: Observer, viewer: Optional[int] = None) -> None:
        """Register ``observer(events, snapshot)``, called after every state change."""
        self.observers.append((observer, viewer))

    # Hand lifecycle --------------------------------------------------

    def can_start_hand(self) -> bool:
        return len(self._funded_seats()) >= 2

    def start_hand(self, seed: Optional[int] = None) -> HandContext:
        if self.hand and not self.is_hand_complete():
            raise RuntimeError("Hand already in progress")
        if not self.can_start_hand():
            raise RuntimeError("Not enough active players to start a hand")

        for player in self.players:
            player.reset_for_hand()
        funded = self._funded_seats()

        if seed is None:
            seed = int(time.time() * 1000) & 0xFFFFFFFF

        # Move button
        if self.button is None:
            self.button = funded[0]
        else:
            self.button = self._seat_after(self.button, funded)

        hand_id = f"H-{time.strftime('%Y%m%d')}-{self.hand_counter:05d}"
        self.hand_counter += 1

        ctx = HandContext(
            hand_id=hand_id,
            seed=seed,
            button=self.button,
            deck=Deck(build_deck(seed)),
            pots=[Pot(amount=0, eligible=set(funded))],
            min_raise_increment=self.config.bb,
        )
        self._deal_hole_cards(ctx)
        self.hand = ctx
        LOGGER.info("Hand %s: button is %s", hand_id, self._name(ctx.button))
        ctx.pre_events.append(self._post_blinds(ctx))
        ctx.phase = Phase.PRE_FLOP
        if len(funded) == 2:
            first = ctx.button
        else:
            first = self._seat_after(ctx.bb_seat, funded)
        ctx.pre_events.extend(self._start_betting_round(ctx, first))
        self._notify(ctx.pre_events)
        return ctx

    def _deal_hole_cards(self, ctx: HandContext) -> None:
        ordered = self._order_after(ctx.button, self._in_hand_seats())
        for _ in range(2):
            for seat_idx in ordered:
                self.seats[seat_idx].hole_cards.extend(ctx.deck.draw(1))

    def _post_blinds(self, ctx: HandContext) -> Event:
        funded = self._in_hand_seats()
        if len(funded) == 2:
            sb_seat = ctx.button
            bb_seat = self._seat_after(ctx.button, funded)
        else:
            sb_seat = self._seat_after(ctx.button, funded)
            bb_seat = self._seat_after(sb_seat, funded)

        sb_paid = self._commit_chips(self.seats[sb_seat], self.config.sb)
        bb_paid = self._commit_chips(self.seats[bb_seat], self.config.bb)

        ctx.sb_seat = sb_seat
        ctx.bb_seat = bb_seat
        ctx.current_bet = self.config.bb
        ctx.min_raise_increment = self.config.bb
        self._refresh_pots(ctx)
        return {"ev": "POST_BLINDS", "sb_seat": sb_seat, "bb_seat": bb_seat, "sb": sb_paid, "bb": bb_paid}

    def _start_betting_round(self, ctx: HandContext, start: int) -> List[Event]:
        live = self._in_hand_seats()
        actionable = self._actionable_seats()
        owing = [seat for seat in actionable if self.seats[seat].current_bet < ctx.current_bet]

        ctx.acted = set()
        if len(live) > 1 and (len(actionable) >= 2 or owing):
            ctx.pending = set(actionable)
        else:
            ctx.pending = set()

        if not ctx.pending:
            # Nobody can bet against anyone: run the board out.
            return self._end_betting_round(ctx)
        ctx.current_seat = self._seat_from(start, ctx.pending)
        return []

    def _commit_chips(self, player: Player, amount: int) -> int:
        amount = min(amount, player.stack)
        player.stack -= amount
        player.current_bet += amount
        player.total_in_pot += amount
        if player.stack == 0:
            player.is_all_in = True
        return amount

    def _refresh_pots(self, ctx: HandContext) -> None:
        live = self._in_hand_seats()
        contributions = {player.seat: player.total_in_pot for player in self.players}
        ctx.pots = build_pots(contributions, live) or [Pot(amount=0, eligible=set(live))]

    # Action handling -------------------------------------------------

    def legal_actions(self, seat_idx: int) -> ActionWindow:
        ctx, player = self._require_active(seat_idx)

        to_call = max(ctx.current_bet - player.current_bet, 0)
        legal: List[ActionType] = [ActionType.FOLD]
        if to_call == 0:
            legal.append(ActionType.CHECK)
        elif player.stack > 0:
            legal.append(ActionType.CALL)

        min_raise_to: Optional[int] = None
        max_raise_to: Optional[int] = None
        can_raise = player.stack > to_call and seat_idx not in ctx.acted
        if can_raise:
            max_raise_to = player.current_bet + player.stack
            # An all-in short of a full raise is always allowed.
            min_raise_to = min(ctx.current_bet + ctx.min_raise_increment, max_raise_to)
            legal.append(ActionType.BET if ctx.current_bet == 0 else ActionType.RAISE)
        if player.stack > 0 and (can_raise or player.stack <= to_call):
            legal.append(ActionType.ALL_IN)

        return ActionWindow(
            seat=seat_idx,
            legal=tuple(legal),
            to_call=min(to_call, player.stack),
            current_bet=ctx.current_bet,
            min_raise_increment=ctx.min_raise_increment,
            min_raise_to=min_raise_to,
            max_raise_to=max_raise_to,
        )

    def apply_action(self, seat_idx: int, action: ActionType, amount: Optional[int] = None) -> List[Event]:
        """Validate and apply one decision; illegal input raises ValueError and changes nothing."""
        ctx, player = self._require_active(seat_idx)
        try:
            action = ActionType(action)
        except ValueError:
            raise ValueError(f"Unsupported action {action}") from None
        if ctx.current_seat != seat_idx:
            raise ValueError("Out of turn")

        window = self.legal_actions(seat_idx)
        if action == ActionType.CHECK and window.to_call > 0:
            raise ValueError("Cannot check when facing a bet")
        if action == ActionType.CALL and window.to_call == 0:
            raise ValueError("Nothing to call")
        if action == ActionType.ALL_IN and ActionType.ALL_IN not in window.legal:
            raise ValueError("Raising is not reopened for this seat")
        target: Optional[int] = None
        if action in (ActionType.BET, ActionType.RAISE):
            target = self._validate_raise(ctx, window, action, amount)

        events: List[Event] = []
        if action == ActionType.FOLD:
            player.in_hand = False
            ctx.pending.discard(seat_idx)
            events.append({"ev": "FOLD", "seat": seat_idx})
        elif action == ActionType.CHECK:
            self._mark_acted(ctx, seat_idx)
            events.append({"ev": "CHECK", "seat": seat_idx})
        elif action == ActionType.CALL:
            paid = self._commit_chips(player, ctx.current_bet - player.current_bet)
            self._mark_acted(ctx, seat_idx)
            events.append({"ev": "CALL", "seat": seat_idx, "amount": paid, "all_in": player.is_all_in})
        elif action == ActionType.ALL_IN:
            target = player.current_bet + player.stack
            if target > ctx.current_bet:
                events.append(self._raise_to(ctx, player, target, ActionType.ALL_IN))
            else:
                paid = self._commit_chips(player, player.stack)
                self._mark_acted(ctx, seat_idx)
                events.append({"ev": "ALL_IN", "seat": seat_idx, "amount": paid, "to": player.current_bet})
        else:
            assert target is not None
            events.append(self._raise_to(ctx, player, target, action))

        self._refresh_pots(ctx)
        events.extend(self._advance_after_action(ctx))
        self._notify(events)
        return events

    def _validate_raise(
        self, ctx: HandContext, window: ActionWindow, action: ActionType, amount: Optional[int]
    ) -> int:
        if action == ActionType.BET and ctx.current_bet > 0:
            raise ValueError("Cannot bet when facing a bet; raise instead")
        if action == ActionType.RAISE and ctx.current_bet == 0:
            raise ValueError("Nothing to raise; bet instead")
        if amount is None or isinstance(amount, bool) or not isinstance(amount, int):
            raise ValueError("Raise requires amount")
        if action not in window.legal:
            raise ValueError("Raising is not reopened for this seat")
        assert window.min_raise_to is not None and window.max_raise_to is not None
        # Anything above the stack is an all-in.
        target = min(amount, window.max_raise_to)
        if target <= ctx.current_bet:
            raise ValueError("Raise must exceed current bet")
        if target < window.min_raise_to:
            raise ValueError("Raise below minimum")
        return target

    def _raise_to(self, ctx: HandContext, player: Player, target: int, kind: ActionType) -> Event:
        previous_bet = ctx.current_bet
        added = self._commit_chips(player, target - player.current_bet)
        increment = target - previous_bet
        if increment >= ctx.min_raise_increment:
            ctx.min_raise_increment = increment
            ctx.acted = {player.seat}
        elif previous_bet == 0:
            # Opening all-in below the big blind: checkers still face their first bet.
            ctx.acted = {player.seat}
        else:
            # Short all-in: callers owe the difference but raising stays closed.
            ctx.acted.add(player.seat)
        ctx.current_bet = target
        ctx.pending = {seat for seat in self._actionable_seats() if seat != player.seat}
        return {"ev": kind.value, "seat": player.seat, "amount": added, "to": target, "all_in": player.is_all_in}

    def _mark_acted(self, ctx: HandContext, seat_idx: int) -> None:
        ctx.pending.discard(seat_idx)
        ctx.acted.add(seat_idx)

    def _advance_after_action(self, ctx: HandContext) -> List[Event]:
        if len(self._in_hand_seats()) <= 1 or not ctx.pending:
            return self._end_betting_round(ctx)
        ctx.current_seat = self._seat_after(ctx.current_seat, ctx.pending)
        return []

    def _end_betting_round(self, ctx: HandContext) -> List[Event]:
        for player in self.players:
            player.reset_for_round()
        ctx.current_bet = 0
        ctx.min_raise_increment = self.config.bb
        ctx.pending.clear()
        ctx.acted.clear()
        ctx.current_seat = None

        if len(self._in_hand_seats()) <= 1 or ctx.phase not in NEXT_STREET:
            return self._resolve_showdown(ctx)

        next_phase, count = NEXT_STREET[ctx.phase]
        ctx.deck.burn()
        cards = ctx.deck.draw(count)
        ctx.community.extend(cards)
        ctx.phase = next_phase
        events: List[Event] = [
            {"ev": next_phase.value, "cards": cards_to_labels(cards), "board": cards_to_labels(ctx.community)}
        ]
        events.extend(self._start_betting_round(ctx, (ctx.button + 1) % self.config.seats))
        return events

    def _resolve_showdown(self, ctx: HandContext) -> List[Event]:
        ctx.phase = Phase.SHOWDOWN
        ctx.current_seat = None
        ctx.pending.clear()
        events: List[Event] = []
        live = self._order_after(ctx.button, self._in_hand_seats())

        if not live:
            LOGGER.warning("Showdown in hand %s with no players in hand; pot not awarded", ctx.hand_id)
            events.append({"ev": "UNAWARDED", "amount": ctx.pot_total})
            return events

        if len(live) == 1:
            winner = self.seats[live[0]]
            amount = ctx.pot_total
            winner.stack += amount
            events.append({"ev": "POT_AWARD", "seat": winner.seat, "amount": amount, "pot": 0})
        else:
            board = list(ctx.community)
            for seat_idx in live:
                player = self.seats[seat_idx]
                result = evaluate(player.hole_cards + board)
                ctx.results[seat_idx] = result
                events.append(
                    {
                        "ev": "SHOWDOWN",
                        "seat": seat_idx,
                        "hole": cards_to_labels(player.hole_cards),
                        "board": cards_to_labels(board),
                        "rank": result.category.label,
                        "description": describe_hand(result),
                        "best_five": cards_to_labels(result.best_five),
                    }
                )
            events.extend(self._award_pots(ctx, live))

        ctx.pots = []
        for player in self.players:
            player.current_bet = 0
            player.total_in_pot = 0
            if player.stack == 0 and player.hole_cards:
                events.append({"ev": "ELIMINATED", "seat": player.seat})
        return events

    def _award_pots(self, ctx: HandContext, order: List[int]) -> List[Event]:
        events: List[Event] = []
        for pot_idx, pot in enumerate(ctx.pots):
            contenders = [seat for seat in order if seat in pot.eligible]
            if pot.amount <= 0:
                continue
            if not contenders:
                LOGGER.warning("Pot %s of %s has no eligible player; not awarded", pot_idx, pot.amount)
                events.append({"ev": "UNAWARDED", "amount": pot.amount})
                continue
            best = max(ctx.results[seat] for seat in contenders)
            winners = [seat for seat in contenders if compare(ctx.results[seat], best) == 0]
            for seat_idx, payout in split_pot(pot.amount, winners).items():
                self.seats[seat_idx].stack += payout
                events.append(
                    {
                        "ev": "POT_AWARD",
                        "seat": seat_idx,
                        "amount": payout,
                        "pot": pot_idx,
                        "description": describe_hand(ctx.results[seat_idx]),
                    }
                )
        return events

    # Public/Snapshot helpers -----------------------------------------

    def next_actor(self) -> Optional[int]:
        if not self.hand or self.is_hand_complete():
            return None
        return self.hand.current_seat

    def consume_pre_events(self) -> List[Event]:
        if not self.hand:
            return []
        events = list(self.hand.pre_events)
        self.hand.pre_events.clear()
        return events

    def snapshot(self, viewer: Optional[int] = None) -> TableSnapshot:
        """Immutable view of the table; ``viewer`` hides other players' hole cards."""
        ctx = self.hand
        revealed = set(ctx.results) if ctx else set()

        def hole(player: Player) -> Tuple[str, ...]:
            if viewer is None or player.seat == viewer or player.seat in revealed:
                return tuple(cards_to_labels(player.hole_cards))
            return tuple("??" for _ in player.hole_cards)

        players = tuple(
            PlayerView(
                seat=player.seat,
                name=player.name,
                is_human=player.is_human,
                stack=player.stack,
                current_bet=player.current_bet,
                total_in_pot=player.total_in_pot,
                in_hand=player.in_hand,
                is_all_in=player.is_all_in,
                connected=player.connected,
                hole=hole(player),
            )
            for player in self.players
        )
        if ctx is None:
            return TableSnapshot(None, Phase.PRE_DEAL, self.button, (), players, (), 0, 0, None)
        return TableSnapshot(
            hand_id=ctx.hand_id,
            phase=ctx.phase,
            button=ctx.button,
            community=tuple(cards_to_labels(ctx.community)),
            players=players,
            pots=tuple(PotView(pot.amount, tuple(sorted(pot.eligible))) for pot in ctx.pots),
            pot_total=ctx.pot_total,
            current_bet=ctx.current_bet,
            next_actor=self.next_actor(),
        )

    def is_hand_complete(self) -> bool:
        return bool(self.hand and self.hand.phase == Phase.SHOWDOWN)

    def is_match_over(self) -> bool:
        return len(self._funded_seats()) <= 1

    def match_result(self) -> Dict[str, object]:
        funded = [player for player in self.players if player.stack > 0]
        winner = funded[0] if len(funded) == 1 else None
        return {
            "winner": {"seat": winner.seat, "name": winner.name} if winner else None,
            "final_stacks": [
                {"seat": player.seat, "name": player.name, "stack": player.stack} for player in self.players
            ],
        }

    def _notify(self, events: List[Event]) -> None:
        names = {player.seat: player.name for player in self.players}
        for event in events:
            LOGGER.info(describe_event(event, names))
        for observer, viewer in self.observers:
            observer(list(events), self.snapshot(viewer))

    def _name(self, seat_idx: Optional[int]) -> str:
        player = self.seats[seat_idx] if seat_idx is not None else None
        return player.name if player else f"Seat {seat_idx}"

    # Seat ordering ---------------------------------------------------

    def _require_active(self, seat_idx: int) -> Tuple[HandContext, Player]:
        if not self.hand or self.is_hand_complete():
            raise RuntimeError("Hand not in progress")
        player = self.seats[seat_idx] if 0 <= seat_idx < len(self.seats) else None
        if player is None or not player.in_hand:
            raise RuntimeError("Seat not active")
        return self.hand, player

    def _funded_seats(self) -> List[int]:
        return [player.seat for player in self.players if player.stack > 0]

    def _in_hand_seats(self) -> List[int]:
        return [player.seat for player in self.players if player.in_hand]

    def _actionable_seats(self) -> List[int]:
        return [player.seat for player in self.players if player.in_hand and not player.is_all_in]

    def _seat_from(self, start: int, candidates: Collection[int]) -> Optional[int]:
        # First candidate at or after ``start``, wrapping around the table.
        for offset in range(self.config.seats):
            idx = (start + offset) % self.config.seats
            if idx in candidates:
                return idx
        return None

    def _seat_after(self, start: Optional[int], candidates: Collection[int]) -> Optional[int]:
        if start is None:
            raise RuntimeError("No start seat defined")
        return self._seat_from(start + 1, candidates)

    def _order_after(self, start: int, candidates: Collection[int]) -> List[int]:
        ordered = []
        for offset in range(1, self.config.seats + 1):
            idx = (start + offset) % self.config.seats
            if idx in candidates:
                ordered.append(idx)
        return ordered
