"""legal_mcp.mcp.messages

JSON-RPC message framing for the streamable HTTP transport.

A POST body is either a single JSON-RPC object or an array of them. Messages
are classified purely by shape:

- ``method`` (string) and an ``id`` key   -> request
- ``method`` (string) and no ``id`` key   -> notification
- anything else                           -> response / error echo

The classifier is the only place that inspects raw message dicts; everything
downstream works with the typed messages below.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union

INITIALIZE_METHOD = "initialize"


class BatchFramingError(ValueError):
    """The body could not be framed as a JSON-RPC message or batch."""


@dataclass(frozen=True)
class RequestMessage:
    id: Any
    method: str
    params: dict[str, Any] = field(default_factory=dict)
    raw: Any = None

    @property
    def is_handshake(self) -> bool:
        return self.method == INITIALIZE_METHOD


@dataclass(frozen=True)
class NotificationMessage:
    method: str
    params: dict[str, Any] = field(default_factory=dict)
    raw: Any = None


@dataclass(frozen=True)
class ResponseMessage:
    raw: Any = None

    @property
    def id(self) -> Any:
        return self.raw.get("id") if isinstance(self.raw, dict) else None


Message = Union[RequestMessage, NotificationMessage, ResponseMessage]


@dataclass(frozen=True)
class Partition:
    requests: tuple[RequestMessage, ...] = ()
    notifications: tuple[NotificationMessage, ...] = ()
    responses: tuple[ResponseMessage, ...] = ()

    @property
    def has_handshake(self) -> bool:
        return any(request.is_handshake for request in self.requests)

    @property
    def requires_session(self) -> bool:
        return any(not request.is_handshake for request in self.requests)

    def __len__(self) -> int:
        return len(self.requests) + len(self.notifications) + len(self.responses)


def decode_body(raw: bytes | str) -> list[Any]:
    """Parse a raw HTTP body into a list of undecoded JSON-RPC messages."""
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BatchFramingError("Invalid JSON body") from e
    return decode_batch(payload)


def decode_batch(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return list(payload)
    if isinstance(payload, dict):
        return [payload]
    raise BatchFramingError("Invalid JSON-RPC payload")


def _params(message: dict[str, Any]) -> dict[str, Any]:
    params = message.get("params")
    return params if isinstance(params, dict) else {}


def classify(message: Any) -> Message:
    if isinstance(message, dict) and isinstance(message.get("method"), str):
        if "id" in message:
            return RequestMessage(
                id=message["id"],
                method=message["method"],
                params=_params(message),
                raw=message,
            )
        return NotificationMessage(method=message["method"], params=_params(message), raw=message)
    return ResponseMessage(raw=message)


def partition(messages: list[Any]) -> Partition:
    requests: list[RequestMessage] = []
    notifications: list[NotificationMessage] = []
    responses: list[ResponseMessage] = []

    for message in messages:
        classified = classify(message)
        if isinstance(classified, RequestMessage):
            requests.append(classified)
        elif isinstance(classified, NotificationMessage):
            notifications.append(classified)
        else:
            responses.append(classified)

    return Partition(
        requests=tuple(requests),
        notifications=tuple(notifications),
        responses=tuple(responses),
    )
