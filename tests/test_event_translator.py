from __future__ import annotations

import pytest

from diagbridge.constants import DebugEvent
from diagbridge.errors import UnrecognizedEventError
from diagbridge.shared.event_translator import EventTranslator


@pytest.fixture
def scripts(provider):
    provider.scripts = [
        {"scriptId": 5, "fileName": "a.js", "lineCount": 10, "sourceLength": 100},
    ]
    return provider


class TestSourceCompile:
    def test_after_compile_event(self, bridge, scripts, emit):
        event = emit(0, {"scriptId": 5, "fileName": "ignored", "lineCount": 10, "sourceLength": 100})

        assert event["type"] == "event"
        assert event["event"] == "afterCompile"
        assert event["success"] is True
        assert event["running"] is True
        script = event["body"]["script"]
        assert script["id"] == 5
        assert script["name"] == "a.js"
        assert script["text"] == "a.js (lines: 10)"
        assert bridge.session.is_at_break is False

    def test_unknown_script_has_empty_name(self, scripts, emit):
        event = emit(0, {"scriptId": 77, "lineCount": 1, "sourceLength": 1})
        assert event["body"]["script"]["name"] == ""

    def test_running_reflects_break_state(self, bridge, scripts, emit):
        emit(2, {"scriptId": 5, "line": 1, "column": 0, "sourceText": ""})
        event = emit(0, {"scriptId": 5, "lineCount": 10, "sourceLength": 100})
        assert event["running"] is False


class TestCompileError:
    def test_produces_nothing(self, bridge, emit):
        assert emit(1, {"scriptId": 5}) is None
        # No event sequence number was consumed.
        assert bridge.factory.event_seq.peek() == 0


class TestBreak:
    @pytest.mark.parametrize("kind", [2, 3, 4])
    def test_break_event(self, bridge, scripts, emit, kind):
        event = emit(kind, {
            "scriptId": 5,
            "line": 3,
            "column": 4,
            "sourceText": "x++;",
            "breakpointId": 7,
        })

        assert event["event"] == "break"
        assert event["body"] == {
            "sourceLine": 3,
            "sourceColumn": 4,
            "sourceLineText": "x++;",
            "script": {"id": 5, "name": "a.js"},
            "breakpoints": [7],
        }
        assert bridge.session.is_at_break is True
        assert bridge.session.break_script_id == 5

    def test_step_without_breakpoint(self, scripts, emit):
        event = emit(3, {"scriptId": 5, "line": 3, "column": 4, "sourceText": "x++;"})
        assert "breakpoints" not in event["body"]

    def test_break_keeps_previous_frames_until_continue(self, bridge, at_break, call, emit):
        call("backtrace")
        emit(3, {"scriptId": 5, "line": 4, "column": 0, "sourceText": ""})
        assert bridge.session.frames.is_cached()


class TestRuntimeException:
    def test_exception_event(self, bridge, scripts, emit):
        scripts.properties[90] = {"properties": [{"name": "message", "handle": 91}]}

        event = emit(6, {
            "scriptId": 5,
            "line": 2,
            "column": 1,
            "sourceText": "throw e;",
            "uncaught": True,
            "exception": {
                "handle": 90,
                "type": "object",
                "display": "Error: bad",
                "propertyAttributes": 1,
            },
        })

        assert event["event"] == "exception"
        body = event["body"]
        assert body["uncaught"] is True
        assert body["sourceLine"] == 2
        assert body["sourceColumn"] == 1
        assert body["sourceLineText"] == "throw e;"
        assert body["script"] == {"id": 5, "name": "a.js"}
        assert body["exception"]["text"] == "Error: bad"
        assert body["exception"]["properties"] == [
            {"name": "message", "propertyType": 0, "ref": 91}
        ]
        assert bridge.session.is_at_break is True
        assert bridge.session.break_script_id == 5


class TestTranslator:
    def test_unknown_kind_raises(self, bridge):
        translator = EventTranslator(bridge)
        with pytest.raises(UnrecognizedEventError) as excinfo:
            translator.translate(7, {})
        assert excinfo.value.event_kind == 7
        assert str(excinfo.value) == "Invalid debugEvent: 7"

    def test_accepts_enum_members(self, bridge, scripts):
        translator = EventTranslator(bridge)
        event = translator.translate(DebugEvent.BREAK, {"scriptId": 5, "line": 0, "column": 0})
        assert event["event"] == "break"
