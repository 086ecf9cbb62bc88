from __future__ import annotations

import logging

import pytest

from diagbridge.errors import BridgeError
from diagbridge.errors import ConfigurationError
from diagbridge.errors import ErrorHandler
from diagbridge.errors import ProtocolError
from diagbridge.errors import StepActionError
from diagbridge.errors import UnrecognizedCommandError
from diagbridge.errors import UnrecognizedEventError
from diagbridge.errors import classify_error
from diagbridge.errors import handle_bridge_errors


class TestHierarchy:
    def test_unrecognized_command(self):
        error = UnrecognizedCommandError("frob", sequence=3)
        assert isinstance(error, ProtocolError)
        assert str(error) == "Unhandled command: frob"
        assert error.to_dict() == {
            "error": "UnrecognizedCommandError",
            "message": "Unhandled command: frob",
            "details": {"command": "frob", "sequence": 3},
        }

    def test_step_action(self):
        error = StepActionError("sideways", sequence=2)
        assert isinstance(error, ProtocolError)
        assert error.details["stepaction"] == "sideways"
        assert error.command == "continue"

    def test_unrecognized_event(self):
        error = UnrecognizedEventError(9)
        assert not isinstance(error, ProtocolError)
        assert error.event_kind == 9

    def test_cause_in_str(self):
        error = BridgeError("failed", cause=ValueError("inner"))
        assert str(error) == "failed (caused by: inner)"

    def test_configuration_key(self):
        error = ConfigurationError("bad", config_key="log_level")
        assert error.details == {"config_key": "log_level"}


class TestClassify:
    def test_bridge_errors_pass_through(self):
        error = ProtocolError("x")
        assert classify_error(error, operation="op") is error

    def test_other_errors_become_provider_errors(self):
        cause = KeyError("k")
        error = classify_error(cause, operation="handle_request")
        assert error.error_code == "ProviderError"
        assert error.cause is cause
        assert error.details == {"operation": "handle_request"}


class TestHandleBridgeErrors:
    def test_returns_value(self):
        @handle_bridge_errors("op")
        def ok():
            return "fine"

        assert ok() == "fine"

    def test_failure_returns_none_and_logs(self, caplog):
        @handle_bridge_errors("op")
        def boom():
            raise RuntimeError("kaput")

        with caplog.at_level(logging.ERROR):
            assert boom() is None
        assert "Error in bridge operation op: kaput" in caplog.text

    def test_protocol_errors_log_warning(self, caplog):
        @handle_bridge_errors("op")
        def bad():
            raise UnrecognizedCommandError("frob")

        with caplog.at_level(logging.WARNING):
            assert bad() is None
        assert [r.levelno for r in caplog.records] == [logging.WARNING]

    def test_reraise(self):
        @handle_bridge_errors("op", reraise=True)
        def boom():
            raise RuntimeError("kaput")

        with pytest.raises(BridgeError) as excinfo:
            boom()
        assert excinfo.value.error_code == "ProviderError"


class TestErrorHandler:
    def test_create_error_body(self):
        handler = ErrorHandler(logging.getLogger("test"))

        message, body = handler.create_error_body(RuntimeError("engine gone"))

        assert message == "engine gone"
        assert body == {"error": "RuntimeError", "details": {}}

    def test_bridge_error_body(self):
        handler = ErrorHandler(logging.getLogger("test"))

        message, body = handler.create_error_body(UnrecognizedEventError(9))

        assert message == "Invalid debugEvent: 9"
        assert body["error"] == "UnrecognizedEventError"
        assert body["details"] == {"event_kind": 9}

    def test_registered_handler_wins(self):
        handler = ErrorHandler(logging.getLogger("test"))
        handler.register_handler(KeyError, lambda e: {"error": "Missing", "message": "gone"})

        info = handler.handle_error(KeyError("k"))

        assert info == {"error": "Missing", "message": "gone"}

    def test_handle_error_includes_traceback_and_context(self):
        handler = ErrorHandler(logging.getLogger("test"))
        try:
            raise ValueError("v")
        except ValueError as e:
            info = handler.handle_error(e, context={"command": "scripts"})

        assert info["context"] == {"command": "scripts"}
        assert "ValueError: v" in info["traceback"]
