from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import websockets

from holdem.ai import HousePolicy
from holdem.game import Event, GameEngine
from holdem.models import Action, ActionType, ActionWindow, TableConfig
from holdem.runner import fallback_action

LOGGER = logging.getLogger("practice_host")

HELLO_TIMEOUT_S = 5


def _config_payload(config: TableConfig) -> Dict[str, Any]:
    return {
        "seats": config.seats,
        "starting_stack": config.starting_stack,
        "sb": config.sb,
        "bb": config.bb,
        "move_time_ms": config.move_time_ms,
    }


def _window_payload(window: ActionWindow) -> Dict[str, Any]:
    return {
        "legal": [action.value for action in window.legal],
        "to_call": window.to_call,
        "current_bet": window.current_bet,
        "min_raise_increment": window.min_raise_increment,
        "min_raise_to": window.min_raise_to,
        "max_raise_to": window.max_raise_to,
    }


def _decode(raw: Any) -> Dict[str, Any]:
    try:
        message = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return {}
    return message if isinstance(message, dict) else {}


def parse_action(message: Dict[str, Any]) -> Action:
    try:
        action = ActionType(message.get("action"))
    except ValueError:
        raise ValueError("Unknown action") from None
    amount = message.get("amount")
    if amount is not None and (isinstance(amount, bool) or not isinstance(amount, int)):
        raise ValueError("amount must be an integer")
    return Action(action, amount)


async def _send_error(websocket: Any, code: str, msg: str) -> None:
    await websocket.send(json.dumps({"type": "error", "v": 1, "code": code, "msg": msg}))


@dataclass
class RemotePlayer:
    name: str
    websocket: Any
    seat_idx: Optional[int] = None

    async def send_json(self, payload: Dict[str, Any]) -> None:
        await self.websocket.send(json.dumps({"v": 1, **payload}))


# Each incoming connection is coordinated through its own PracticeSession.


class PracticeSession:
    """Handles one practice table: a remote player against the house AI."""

    def __init__(
        self,
        config: TableConfig,
        remote: RemotePlayer,
        house_name: str = "HOUSE",
        seed: Optional[int] = None,
    ) -> None:
        self.config = config
        self.engine = GameEngine(config)
        self.remote = remote
        self.house_name = house_name
        self.house = HousePolicy(seed)
        self.house_seat: Optional[int] = None
        self.seed = seed
        self.hands_played = 0

    async def run(self) -> Dict[str, object]:
        # One practice match = repeated hands until only one stack remains.
        self._assign_seats()
        await self.remote.send_json(
            {"type": "welcome", "seat": self.remote.seat_idx, "config": _config_payload(self.config)}
        )
        try:
            while self.engine.can_start_hand():
                hand_seed = None if self.seed is None else self.seed + self.hands_played
                ctx = self.engine.start_hand(seed=hand_seed)
                await self.remote.send_json(
                    {
                        "type": "start_hand",
                        "hand_id": ctx.hand_id,
                        "button": ctx.button,
                        "stacks": self._stacks(),
                    }
                )
                await self._send_events(self.engine.consume_pre_events())
                await self._play_hand()
                self.hands_played += 1
        except websockets.ConnectionClosed:
            self.engine.set_connected(self.remote.seat_idx, False)
            LOGGER.info("%s disconnected after %s hands", self.remote.name, self.hands_played)
            return self.engine.match_result()

        result = self.engine.match_result()
        await self.remote.send_json({"type": "match_end", **result})
        LOGGER.info("Practice match for %s finished: winner=%s", self.remote.name, result["winner"])
        return result

    def _assign_seats(self) -> None:
        seat = self.engine.seat_player(self.remote.name, is_human=True)
        self.remote.seat_idx = seat.seat
        house_name = self.house_name
        if house_name.casefold() == seat.name.casefold():
            house_name = f"{house_name} (AI)"
        self.house_seat = self.engine.seat_player(house_name).seat
        self.engine.set_connected(seat.seat, True)
        self.engine.set_connected(self.house_seat, True)

    async def _play_hand(self) -> None:
        while not self.engine.is_hand_complete():
            seat_idx = self.engine.next_actor()
            if seat_idx is None:
                break

            if seat_idx == self.remote.seat_idx:
                events = await self._prompt_remote()
            else:
                # House bot is instant and runs locally.
                window = self.engine.legal_actions(seat_idx)
                action = self.house(window, self.engine.snapshot(viewer=seat_idx))
                events = self.engine.apply_action(seat_idx, action.type, action.amount)
            await self._send_events(events)

        assert self.engine.hand is not None
        await self.remote.send_json(
            {"type": "end_hand", "hand_id": self.engine.hand.hand_id, "stacks": self._stacks()}
        )

    async def _prompt_remote(self) -> List[Event]:
        seat_idx = self.remote.seat_idx
        assert seat_idx is not None and self.engine.hand is not None
        attempts = max(self.config.max_illegal_actions, 1)

        for _ in range(attempts):
            window = self.engine.legal_actions(seat_idx)
            await self.remote.send_json(
                {
                    "type": "act",
                    "hand_id": self.engine.hand.hand_id,
                    "seat": seat_idx,
                    "time_ms": self.config.move_time_ms,
                    **_window_payload(window),
                    "table": self.engine.snapshot(viewer=seat_idx).to_dict(),
                }
            )
            message = await self._receive_action()
            if message is None:
                LOGGER.warning("Seat %s ran out of time; folding", seat_idx)
                await self.remote.send_json({"type": "timeout", "seat": seat_idx})
                forced = fallback_action(window)
                return self.engine.apply_action(seat_idx, forced.type, forced.amount)

            try:
                action = parse_action(message)
                return self.engine.apply_action(seat_idx, action.type, action.amount)
            except ValueError as exc:
                LOGGER.warning(
                    "Rejected action seat=%s action=%s amount=%s reason=%s",
                    seat_idx,
                    message.get("action"),
                    message.get("amount"),
                    exc,
                )
                await _send_error(self.remote.websocket, "INVALID_ACTION", str(exc))

        LOGGER.warning("Seat %s sent %s illegal actions; folding", seat_idx, attempts)
        forced = fallback_action(self.engine.legal_actions(seat_idx))
        return self.engine.apply_action(seat_idx, forced.type, forced.amount)

    async def _receive_action(self) -> Optional[Dict[str, Any]]:
        """Wait for an ``action`` message until the move clock runs out (None)."""
        loop = asyncio.get_running_loop()
        timeout = self.config.move_time_ms / 1000 if self.config.move_time_ms > 0 else None
        deadline = loop.time() + timeout if timeout is not None else None
        while True:
            remaining = None if deadline is None else deadline - loop.time()
            if remaining is not None and remaining <= 0:
                return None
            try:
                raw = await asyncio.wait_for(self.remote.websocket.recv(), timeout=remaining)
            except asyncio.TimeoutError:
                return None
            message = _decode(raw)
            if message.get("type") == "action":
                return message
            await _send_error(self.remote.websocket, "UNKNOWN_TYPE", "Expected an action message")

    async def _send_events(self, events: List[Event]) -> None:
        for event in events:
            await self.remote.send_json({"type": "event", **event})
        if events:
            snapshot = self.engine.snapshot(viewer=self.remote.seat_idx)
            await self.remote.send_json({"type": "snapshot", **snapshot.to_dict()})

    def _stacks(self) -> List[Dict[str, int]]:
        return [{"seat": player.seat, "stack": player.stack} for player in self.engine.players]


async def handle_connection(websocket: Any, config: TableConfig, seed: Optional[int] = None) -> None:
    # First message must be "hello" so we know who we are talking to.
    try:
        hello_raw = await asyncio.wait_for(websocket.recv(), timeout=HELLO_TIMEOUT_S)
    except (asyncio.TimeoutError, websockets.ConnectionClosed):
        return
    hello = _decode(hello_raw)
    if hello.get("type") != "hello":
        await _send_error(websocket, "BAD_HELLO", "Expected hello")
        return

    name_raw = hello.get("name")
    name = name_raw.strip() if isinstance(name_raw, str) else ""
    remote = RemotePlayer(name=name or "REMOTE", websocket=websocket)
    LOGGER.info("Practice session opened for %s", remote.name)

    session = PracticeSession(config, remote, seed=seed)
    try:
        await session.run()
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Practice session crashed: %s", exc)


async def run_server(host: str, port: int, config: TableConfig, seed: Optional[int] = None) -> None:
    async def _handler(websocket):
        await handle_connection(websocket, config, seed=seed)

    async with websockets.serve(_handler, host, port):
        LOGGER.info("Practice server listening on %s:%s", host, port)
        await asyncio.Future()
