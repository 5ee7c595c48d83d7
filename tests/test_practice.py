import asyncio
import json

import pytest
import websockets

from holdem.models import ActionType, TableConfig
from practice.server import PracticeSession, RemotePlayer, handle_connection, parse_action


class FakeWebSocket:
    """Scripted stand-in for a websocket connection; ``None`` replies stay silent."""

    def __init__(self, script=(), responder=None):
        self.sent = []
        self.script = list(script)
        self.responder = responder

    async def send(self, raw):
        self.sent.append(json.loads(raw))

    async def recv(self):
        if self.script:
            reply = self.script.pop(0)
        elif self.responder is not None:
            reply = self.responder()
        else:
            reply = None
        if reply is None:
            await asyncio.sleep(3600)
        return reply if isinstance(reply, str) else json.dumps(reply)

    def of_type(self, kind):
        return [message for message in self.sent if message.get("type") == kind]


def make_session(websocket, **config):
    remote = RemotePlayer(name="Alice", websocket=websocket)
    session = PracticeSession(TableConfig(**config), remote, seed=21)
    session._assign_seats()
    session.engine.start_hand(seed=21)
    return session


def test_parse_action_validates_message():
    assert parse_action({"action": "RAISE", "amount": 60}).amount == 60
    assert parse_action({"action": "FOLD"}).type == ActionType.FOLD
    with pytest.raises(ValueError, match="Unknown action"):
        parse_action({"action": "JUMP"})
    with pytest.raises(ValueError, match="integer"):
        parse_action({"action": "BET", "amount": "60"})


def test_remote_timeout_folds_the_hand():
    websocket = FakeWebSocket()
    session = make_session(websocket, move_time_ms=50)
    assert session.engine.next_actor() == session.remote.seat_idx

    events = asyncio.run(session._prompt_remote())

    assert events[0] == {"ev": "FOLD", "seat": 0}
    assert [message["type"] for message in websocket.sent] == ["act", "timeout"]
    act = websocket.sent[0]
    assert act["legal"] == ["FOLD", "CALL", "RAISE", "ALL_IN"]
    assert act["to_call"] == 10
    assert act["table"]["players"][1]["hole"] == ["??", "??"]


def test_illegal_action_gets_error_and_reprompt():
    websocket = FakeWebSocket(
        script=[
            {"type": "action", "action": "CHECK"},
            {"type": "ping"},
            "not json",
            {"type": "action", "action": "CALL"},
        ]
    )
    session = make_session(websocket)

    events = asyncio.run(session._prompt_remote())

    assert events[0]["ev"] == "CALL"
    errors = websocket.of_type("error")
    assert [error["code"] for error in errors] == ["INVALID_ACTION", "UNKNOWN_TYPE", "UNKNOWN_TYPE"]
    assert errors[0]["msg"] == "Cannot check when facing a bet"
    assert len(websocket.of_type("act")) == 2


def test_repeated_illegal_actions_fold():
    websocket = FakeWebSocket(script=[{"type": "action", "action": "CHECK"}] * 2)
    session = make_session(websocket, max_illegal_actions=2)

    events = asyncio.run(session._prompt_remote())

    assert events[0] == {"ev": "FOLD", "seat": 0}
    assert len(websocket.of_type("error")) == 2


def test_session_plays_match_until_house_wins():
    websocket = FakeWebSocket(responder=lambda: {"type": "action", "action": "FOLD"})
    remote = RemotePlayer(name="Alice", websocket=websocket)
    session = PracticeSession(TableConfig(), remote, seed=5)

    result = asyncio.run(session.run())

    assert result["winner"]["name"] == "HOUSE"
    welcome = websocket.sent[0]
    assert welcome["type"] == "welcome"
    assert welcome["seat"] == 0
    assert welcome["config"]["bb"] == 20
    assert websocket.sent[-1]["type"] == "match_end"
    assert len(websocket.of_type("start_hand")) == session.hands_played
    assert len(websocket.of_type("end_hand")) == session.hands_played
    assert websocket.of_type("snapshot")
    assert all(message["v"] == 1 for message in websocket.sent)


def test_house_is_renamed_on_name_collision():
    remote = RemotePlayer(name="house", websocket=FakeWebSocket())
    session = PracticeSession(TableConfig(), remote)
    session._assign_seats()

    names = [player.name for player in session.engine.players]
    assert names == ["house", "HOUSE (AI)"]
    assert session.engine.seats[0].connected


def test_bad_hello_is_rejected():
    websocket = FakeWebSocket(script=[{"type": "join"}])
    asyncio.run(handle_connection(websocket, TableConfig()))

    assert websocket.sent == [{"type": "error", "v": 1, "code": "BAD_HELLO", "msg": "Expected hello"}]


def test_disconnect_ends_session_and_clears_connected_flag():
    def hang_up():
        raise websockets.ConnectionClosed(None, None)

    websocket = FakeWebSocket(responder=hang_up)
    remote = RemotePlayer(name="Alice", websocket=websocket)
    session = PracticeSession(TableConfig(), remote, seed=8)

    result = asyncio.run(session.run())

    act = websocket.of_type("act")[0]
    assert act["table"]["players"][0]["connected"] is True
    assert session.engine.seats[0].connected is False
    view = session.engine.snapshot()
    assert view.player(0).connected is False
    assert view.player(1).connected is True
    assert result["winner"] is None
    assert not websocket.of_type("match_end")
