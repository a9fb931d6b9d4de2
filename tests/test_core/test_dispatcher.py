"""
Unit tests for the action dispatcher (bds_enhancer/core/dispatcher.py).

Tests cover:
- The command emitted for each action
- Player info replies (present and absent)
- Shell execution replies (success, chunking, failure with and without result)
- Command/result correlation, including its positional and overwrite behavior
"""

import pytest

from bds_enhancer.config import ProtocolSettings
from bds_enhancer.core.actions import decode_action
from bds_enhancer.core.dispatcher import CommandStatus, Dispatcher, encode_json
from bds_enhancer.errors import ShellCommandError
from tests.helpers import parse_scriptevent


def _dispatch(dispatcher: Dispatcher, raw: str) -> None:
    action = decode_action(raw)
    assert action is not None
    dispatcher.dispatch(action)


# ============================================================================
# SIMPLE COMMANDS
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('{"action":"reload"}', "reload"),
        ('{"action":"stop"}', "stop"),
        (
            '{"action":"transfer","payload":{"player":"Bob","host":"10.0.0.2","port":19133}}',
            "transfer Bob 10.0.0.2 19133",
        ),
        ('{"action":"kick","payload":{"player":"Bob","reason":"spam"}}', "kick Bob spam"),
        ('{"action":"execute","payload":{"command":"say hi","result":false}}', "say hi"),
    ],
)
def test_action_emits_command(dispatcher, sent, raw, expected):
    _dispatch(dispatcher, raw)
    assert sent == [expected]


@pytest.mark.unit
def test_execute_without_result_does_not_arm(dispatcher):
    _dispatch(dispatcher, '{"action":"execute","payload":{"command":"say hi","result":false}}')
    assert dispatcher.status.waiting is False


# ============================================================================
# GET PLAYER
# ============================================================================


@pytest.mark.unit
class TestGetPlayer:
    def test_known_player_is_reported(self, dispatcher, directory, sent):
        directory.upsert("Alice", "dev-a", "2535400000000001")
        _dispatch(dispatcher, '{"action":"getplayer","payload":{"name":"Alice"}}')

        assert len(sent) == 1
        channel, body = parse_scriptevent(sent[0])
        assert channel == "system:playerinfo"
        assert body == {"name": "Alice", "deviceId": "dev-a", "xuid": "2535400000000001"}

    def test_reply_json_is_compact_and_ordered(self, dispatcher, directory, sent):
        directory.upsert("Alice", "dev-a", "1")
        _dispatch(dispatcher, '{"action":"getplayer","payload":"Alice"}')
        assert sent == ['scriptevent system:playerinfo {"name":"Alice","deviceId":"dev-a","xuid":"1"}']

    def test_unknown_player_emits_nothing(self, dispatcher, sent):
        _dispatch(dispatcher, '{"action":"getplayer","payload":{"name":"Nobody"}}')
        assert sent == []


# ============================================================================
# EXECUTE SHELL
# ============================================================================


@pytest.mark.unit
class TestExecuteShell:
    def test_success_reply(self, dispatcher, sent, shell_calls):
        _dispatch(
            dispatcher,
            '{"action":"executeshell","payload":{"main_command":"echo","args":["a","b"],"result":false}}',
        )

        assert shell_calls == [("echo", ("a", "b"))]
        assert len(sent) == 1
        channel, body = parse_scriptevent(sent[0])
        assert channel == "bds_enhancer:shell_result"
        assert body == {
            "command": "echo a b",
            "result_message": "shell output",
            "count": 0,
            "end": True,
            "err": False,
        }

    def test_long_output_is_chunked(self, sent, directory):
        output = "x" * 3200

        dispatcher = Dispatcher(sent.append, directory, ProtocolSettings(), lambda cmd, args: output)
        _dispatch(dispatcher, '{"action":"executeshell","payload":{"main_command":"cat"}}')

        bodies = [parse_scriptevent(command)[1] for command in sent]
        assert [b["count"] for b in bodies] == [0, 1, 2]
        assert [b["end"] for b in bodies] == [False, False, True]
        assert "".join(b["result_message"] for b in bodies) == output
        assert all(b["err"] is False for b in bodies)

    def test_empty_output_sends_one_empty_chunk(self, sent, directory):
        dispatcher = Dispatcher(sent.append, directory, ProtocolSettings(), lambda cmd, args: "\n")
        _dispatch(dispatcher, '{"action":"executeshell","payload":{"main_command":"true"}}')

        assert len(sent) == 1
        assert parse_scriptevent(sent[0])[1]["result_message"] == ""

    @staticmethod
    def _failing(main_command, args):
        raise ShellCommandError(main_command, FileNotFoundError(2, "No such file or directory"))

    def test_failure_with_result_sends_error(self, sent, directory):
        dispatcher = Dispatcher(sent.append, directory, ProtocolSettings(), self._failing)
        _dispatch(
            dispatcher,
            '{"action":"executeshell","payload":{"main_command":"nope","args":["x"],"result":true}}',
        )

        assert len(sent) == 1
        channel, body = parse_scriptevent(sent[0])
        assert channel == "bds_enhancer:shell_result"
        assert body["command"] == "nope x"
        assert body["err"] is True
        assert body["result_message"].startswith("Error: ")
        assert "No such file or directory" in body["result_message"]
        assert "count" not in body

    def test_failure_without_result_is_silent(self, sent, directory):
        dispatcher = Dispatcher(sent.append, directory, ProtocolSettings(), self._failing)
        _dispatch(dispatcher, '{"action":"executeshell","payload":{"main_command":"nope"}}')
        assert sent == []


# ============================================================================
# CORRELATION
# ============================================================================


@pytest.mark.unit
class TestCorrelation:
    def test_execute_with_result_arms_before_sending(self, directory):
        seen_status: list[bool] = []
        dispatcher: Dispatcher

        def send(command: str) -> None:
            seen_status.append(dispatcher.status.waiting)

        dispatcher = Dispatcher(send, directory)
        _dispatch(dispatcher, '{"action":"execute","payload":{"command":"list","result":true}}')

        assert seen_status == [True]
        assert dispatcher.status == CommandStatus(True, "list", "bds_enhancer:result")

    def test_next_text_becomes_single_chunk_reply(self, dispatcher, sent):
        _dispatch(dispatcher, '{"action":"execute","payload":{"command":"list","result":true}}')
        sent.clear()

        assert dispatcher.capture_result("3 players online") is True

        assert len(sent) == 1
        channel, body = parse_scriptevent(sent[0])
        assert channel == "bds_enhancer:result"
        assert body == {"command": "list", "result_message": "3 players online", "count": 0, "end": True}
        assert dispatcher.status.waiting is False

    def test_capture_without_armed_status_does_nothing(self, dispatcher, sent):
        assert dispatcher.capture_result("3 players online") is False
        assert sent == []

    def test_long_result_is_chunked(self, dispatcher, sent):
        _dispatch(dispatcher, '{"action":"execute","payload":{"command":"help","result":true}}')
        sent.clear()

        dispatcher.capture_result("y" * 1501)

        bodies = [parse_scriptevent(command)[1] for command in sent]
        assert [(b["count"], b["end"]) for b in bodies] == [(0, False), (1, True)]

    def test_rearming_overwrites_pending_command(self, dispatcher, sent):
        # The first caller's reply is lost; the capture answers the second.
        _dispatch(dispatcher, '{"action":"execute","payload":{"command":"list","result":true}}')
        _dispatch(dispatcher, '{"action":"execute","payload":{"command":"time query daytime","result":true}}')
        sent.clear()

        dispatcher.capture_result("Day is 1000")

        assert len(sent) == 1
        assert parse_scriptevent(sent[0])[1]["command"] == "time query daytime"

    def test_custom_result_channel(self, sent, directory):
        protocol = ProtocolSettings(result_channel="custom:result")
        dispatcher = Dispatcher(sent.append, directory, protocol)
        _dispatch(dispatcher, '{"action":"execute","payload":{"command":"list","result":true}}')
        dispatcher.capture_result("ok")
        assert parse_scriptevent(sent[-1])[0] == "custom:result"


@pytest.mark.unit
def test_encode_json_keeps_unicode():
    assert encode_json({"name": "Zoë"}) == '{"name":"Zoë"}'
