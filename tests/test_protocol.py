from __future__ import annotations

import pytest

from diagbridge.errors import ProtocolError
from diagbridge.protocol import DiagnosticsProvider
from diagbridge.protocol.protocol import MessageSequencer
from diagbridge.protocol.protocol import ProtocolFactory
from diagbridge.protocol.protocol import parse_request
from diagbridge.protocol.protocol import serialize


class TestParseRequest:
    def test_valid_request(self):
        request = parse_request('{"seq": 1, "type": "request", "command": "scripts"}')
        assert request["command"] == "scripts"
        assert request["seq"] == 1

    def test_bytes_are_accepted(self):
        assert parse_request(b'{"seq": 1, "command": "threads"}')["command"] == "threads"

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "{",
            "42",
            '["scripts"]',
            '{"seq": 1}',
            '{"seq": 1, "command": 3}',
            '{"seq": 1, "command": "scripts", "arguments": [1]}',
        ],
    )
    def test_invalid_messages(self, text):
        with pytest.raises(ProtocolError):
            parse_request(text)

    def test_error_carries_sequence(self):
        with pytest.raises(ProtocolError) as excinfo:
            parse_request('{"seq": 8, "command": "lookup", "arguments": "x"}')
        assert excinfo.value.sequence == 8
        assert excinfo.value.command == "lookup"


class TestMessageSequencer:
    def test_counts_from_start(self):
        seq = MessageSequencer(5)
        assert seq.peek() == 5
        assert [seq.next(), seq.next()] == [5, 6]
        assert seq.peek() == 7


class TestProtocolFactory:
    def test_create_response(self):
        factory = ProtocolFactory()
        request = {"seq": 3, "type": "request", "command": "threads"}

        response = factory.create_response(request, True, running=True, body={"a": 1})

        assert response == {
            "seq": 0,
            "request_seq": 3,
            "type": "response",
            "command": "threads",
            "success": True,
            "refs": [],
            "running": True,
            "body": {"a": 1},
        }

    def test_failure_message(self):
        factory = ProtocolFactory()
        request = {"seq": 3, "command": "scripts"}

        failed = factory.create_response(request, False, running=False, error_message="nope")
        ok = factory.create_response(request, True, running=False, error_message="ignored")

        assert failed["message"] == "nope"
        assert "body" not in failed
        assert "message" not in ok

    def test_event_and_response_counters_are_separate(self):
        factory = ProtocolFactory(seq_start=10)
        request = {"seq": 1, "command": "threads"}

        assert factory.create_event("break", {})["seq"] == 10
        assert factory.create_event("break", {})["seq"] == 11
        assert factory.create_response(request, True, running=True)["seq"] == 10

    def test_event_extra_fields(self):
        event = ProtocolFactory().create_event("afterCompile", {"script": {}}, success=True, running=True)
        assert event == {
            "seq": 0,
            "type": "event",
            "event": "afterCompile",
            "success": True,
            "running": True,
            "body": {"script": {}},
        }


def test_serialize_is_compact():
    assert serialize({"a": [1, 2], "b": "é"}) == '{"a":[1,2],"b":"é"}'


def test_dummy_provider_satisfies_protocol(provider):
    assert isinstance(provider, DiagnosticsProvider)
