from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from holdem.ai import HousePolicy
from holdem.game import Event, GameEngine, describe_event
from holdem.models import Action, ActionType, ActionWindow, TableConfig, TableSnapshot
from holdem.runner import ActionProvider, play_match

LOGGER = logging.getLogger("practice_console")

HELP = "f=fold  k=check  c=call  b <to>=bet  r <to>=raise  a=all-in"

COMMANDS = {
    "f": ActionType.FOLD,
    "fold": ActionType.FOLD,
    "k": ActionType.CHECK,
    "check": ActionType.CHECK,
    "c": ActionType.CALL,
    "call": ActionType.CALL,
    "b": ActionType.BET,
    "bet": ActionType.BET,
    "r": ActionType.RAISE,
    "raise": ActionType.RAISE,
    "a": ActionType.ALL_IN,
    "allin": ActionType.ALL_IN,
    "all-in": ActionType.ALL_IN,
}


def parse_command(raw: str, window: ActionWindow) -> Action:
    parts = raw.strip().lower().split()
    if not parts:
        raise ValueError("Enter an action")
    action = COMMANDS.get(parts[0])
    if action is None:
        raise ValueError(f"Unknown command {parts[0]!r}")
    if action not in window.legal:
        raise ValueError(f"{action.value} is not legal now")
    if action in (ActionType.BET, ActionType.RAISE):
        if len(parts) < 2:
            raise ValueError(f"{action.value} needs a total amount, e.g. '{parts[0]} {window.min_raise_to}'")
        try:
            amount = int(parts[1])
        except ValueError:
            raise ValueError(f"Invalid amount {parts[1]!r}") from None
        return Action(action, amount)
    return Action(action)


def render_table(view: TableSnapshot, seat: Optional[int] = None) -> str:
    board = " ".join(view.community) or "-"
    lines = [f"[{view.phase.value}] board: {board}  pot: {view.pot_total}"]
    for player in view.players:
        marker = "*" if player.seat == view.next_actor else " "
        button = " (D)" if player.seat == view.button else ""
        you = " (you)" if player.seat == seat else ""
        status = "" if player.in_hand else " folded"
        if player.is_all_in:
            status = " all-in"
        hole = " ".join(player.hole)
        lines.append(
            f" {marker} {player.name}{you}{button}: stack {player.stack}, bet {player.current_bet}"
            f"{status} [{hole}]"
        )
    return "\n".join(lines)


class ConsolePlayer:
    """Terminal action provider for a local human player."""

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ) -> None:
        self.input_fn = input_fn
        self.output = output

    def __call__(self, window: ActionWindow, view: TableSnapshot) -> Action:
        self.output(render_table(view, window.seat))
        prompt = "/".join(action.value.lower() for action in window.legal)
        if window.to_call:
            prompt += f" (to call {window.to_call})"
        if window.min_raise_to is not None:
            prompt += f" (raise to {window.min_raise_to}-{window.max_raise_to})"
        while True:
            raw = self.input_fn(f"{prompt}> ")
            try:
                return parse_command(raw, window)
            except ValueError as exc:
                self.output(f"{exc}. {HELP}")


def run_console(
    config: TableConfig,
    name: str = "You",
    seed: Optional[int] = None,
    max_hands: Optional[int] = None,
    input_fn: Callable[[str], str] = input,
    output: Callable[[str], None] = print,
) -> Dict[str, object]:
    """Play a local human against house AI opponents until one stack is left."""
    engine = GameEngine(config)
    human = engine.seat_player(name, is_human=True)
    providers: Dict[int, ActionProvider] = {human.seat: ConsolePlayer(input_fn, output)}
    for idx in range(1, config.seats):
        house = engine.seat_player(f"HOUSE-{idx}")
        providers[house.seat] = HousePolicy(None if seed is None else seed + idx)

    def show(events: List[Event], _view: TableSnapshot) -> None:
        names = {player.seat: player.name for player in engine.players}
        for event in events:
            output(describe_event(event, names))

    engine.add_observer(show, viewer=human.seat)
    LOGGER.debug("Console match: %s vs %s house players", name, config.seats - 1)
    result = play_match(engine, providers, max_hands=max_hands, seed=seed)
    winner = result["winner"]
    output(f"Match over after {result['hands_played']} hands. Winner: {winner['name'] if winner else 'none'}")
    return result
