"""Core protocol message types.

This module contains the Request/Response/Event TypedDicts exchanged with the
external debugger client. Responses carry the ``refs`` and ``running`` fields
the client protocol expects on every response.
"""

from __future__ import annotations

from typing import Any
from typing import Literal
from typing import TypedDict

from typing_extensions import NotRequired


class Request(TypedDict):
    """A client initiated request."""

    seq: int
    type: Literal["request"]
    command: str
    # Absent for commands such as ``threads`` or ``suspend``.
    arguments: NotRequired[dict[str, Any]]


class Response(TypedDict):
    """Response for a request."""

    seq: int
    request_seq: int
    type: Literal["response"]
    command: str
    success: bool
    refs: list[Any]
    # Mirrors ``not Session.is_at_break`` at construction time.
    running: bool
    body: NotRequired[Any]
    message: NotRequired[str]


class Event(TypedDict):
    """A bridge initiated event."""

    seq: int
    type: Literal["event"]
    event: str
    body: Any
    success: NotRequired[bool]
    running: NotRequired[bool]


class ScriptEntry(TypedDict):
    """Script description as reported by ``scripts`` and ``afterCompile``."""

    type: Literal["script"]
    name: str
    id: int
    lineOffset: int
    columnOffset: int
    lineCount: int
    sourceStart: str
    sourceLength: int
    scriptType: int
    compilationType: int
    text: str
    source: NotRequired[str]


class PropertyRef(TypedDict):
    """A child property surfaced by handle."""

    name: str
    propertyType: int
    ref: Any


class Scope(TypedDict):
    type: int
    index: int
    frameIndex: int
    object: dict[str, int]


class ScopeObject(TypedDict):
    """Synthetic object standing in for one scope bucket."""

    handle: int
    type: Literal["object"]
    className: Literal["Object"]
    constructorFunction: dict[str, int]
    protoObject: dict[str, int]
    prototypeObject: dict[str, int]
    properties: list[PropertyRef]
