"""ZMQ multipart framing for publish requests.

Request (DEALER -> ROUTER)
    (optional routing prefix...), version, id, operation, channel, message, query_json, body

Response (ROUTER -> DEALER)
    (optional routing prefix...), version, id, REP, payload_json

A response payload is either ``{"status": <int>, "response": <decoded service
response>}`` or ``{"error": {"type": <str>, "text": <str>}}``.

The client only uses :func:`to_request_frames` and :func:`from_response_frames`.
:func:`from_request_frames` and :func:`to_response_frames` are the gateway
side of the same contract, for use by ROUTER-side gateways that answer
publish requests.
"""

from __future__ import annotations

import itertools
import threading
from typing import Any, Dict, Optional, Sequence, Tuple

from ... import json
from ...protocol import fields
from ...protocol.parameters import RequestParameters

VERSION = b"1"
REP = b"REP"

_id_min = 0
_id_max = 0xFFFFFFFF
_id_lock = threading.Lock()
_id_ticker = itertools.count(_id_min)


def next_id() -> bytes:
    """Return the next locally unique request identification number."""

    global _id_ticker

    with _id_lock:
        msg_id = next(_id_ticker)

        if msg_id >= _id_max:
            _id_ticker = itertools.count(_id_min)

    return b"%08x" % msg_id


def to_request_frames(msg_id: bytes, operation: str, parameters: RequestParameters,
                      body: Optional[bytes]) -> Tuple[bytes, ...]:
    """Encode a request as DEALER multipart frames."""

    components = parameters.path_components
    channel = components.get(fields.CHANNEL, "").encode()
    message = components.get(fields.MESSAGE, "").encode()
    query = json.dumps(parameters.query)

    return (VERSION, msg_id, operation.encode(), channel, message, query, body or b"")


def from_request_frames(parts: Sequence[bytes]) -> Tuple[Tuple[bytes, ...], bytes, str, RequestParameters, bytes]:
    """
    Decode ROUTER parts into (prefix, id, operation, parameters, body).

    ROUTER sockets prepend an identity frame, which is returned as the
    prefix so that the response can be routed back.
    """

    if not parts:
        raise ValueError("empty message")

    if parts[0] == VERSION:
        prefix: Tuple[bytes, ...] = ()
        start = 0
    else:
        prefix = (parts[0],)
        start = 1

    if len(parts) < start + 7:
        raise ValueError(f"expected 7 request frames, received {len(parts) - start}")

    their_version = parts[start]
    if their_version != VERSION:
        raise ValueError(f"request is protocol {their_version!r}, recipient expects {VERSION!r}")

    msg_id = parts[start + 1]
    operation = parts[start + 2].decode()

    parameters = RequestParameters()
    if parts[start + 3]:
        parameters.add_path_component(parts[start + 3].decode(), fields.CHANNEL)
    parameters.add_path_component(parts[start + 4].decode(), fields.MESSAGE)
    for name, value in json.loads(parts[start + 5]).items():
        parameters.add_query_parameter(value, name)

    return prefix, msg_id, operation, parameters, parts[start + 6]


def to_response_frames(msg_id: bytes, payload: Dict[str, Any],
                       prefix: Tuple[bytes, ...] = ()) -> Tuple[bytes, ...]:
    """Encode a gateway response, routed back through *prefix*."""

    return tuple(prefix) + (VERSION, msg_id, REP, json.dumps(payload))


def from_response_frames(parts: Sequence[bytes]) -> Tuple[bytes, Dict[str, Any]]:
    """Decode DEALER parts into (id, payload)."""

    if len(parts) < 4:
        raise ValueError("invalid response")

    their_version = parts[0]
    msg_id = parts[1]

    if their_version != VERSION:
        error = {
            "type": "RuntimeError",
            "text": f"response is protocol {their_version!r}, recipient expects {VERSION!r}",
        }
        return msg_id, {"error": error}

    return msg_id, json.loads(parts[3])
