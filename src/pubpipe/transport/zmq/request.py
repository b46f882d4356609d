"""ZeroMQ request/response transport.

Publish requests are forwarded over a DEALER socket to a gateway listening
on a ROUTER socket, which answers each request with a single REP.
"""

from __future__ import annotations

import atexit
import logging
import queue
import threading
from typing import Any, Dict, Optional, Tuple

import zmq

from ...protocol.parameters import RequestParameters
from ..base import (
    Transport,
    TransportConnectionError,
    TransportResponseError,
    TransportTimeout,
    parse_publish_response,
)
from .framing import from_response_frames, next_id, to_request_frames

logger = logging.getLogger(__name__)

zmq_context = zmq.Context()


class PendingRequest:
    """Client-side helper that provides REP synchronization."""

    def __init__(self, msg_id: bytes, frames: Tuple[bytes, ...]):
        self.id = msg_id
        self.frames = frames
        self.response: Optional[Dict[str, Any]] = None
        self.rep_event = threading.Event()

    def wait(self, timeout: Optional[float] = 60) -> Optional[Dict[str, Any]]:
        self.rep_event.wait(timeout)
        return self.response

    def _complete(self, response: Dict[str, Any]) -> None:
        self.response = response
        self.rep_event.set()


class ZMQTransport(Transport):
    """Issue requests via a ZeroMQ DEALER socket and receive responses."""

    def __init__(self, config, address: Optional[str] = None):
        address = address or config.zmq_address
        if not address:
            raise ValueError("the zmq transport requires a zmq_address")

        self.address = address
        self.timeout = config.request_timeout

        identity = f"pubpipe.ZMQTransport.{id(self)}".encode()

        self.socket = zmq_context.socket(zmq.DEALER)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.identity = identity
        self.socket.connect(address)

        self._outbox: queue.SimpleQueue = queue.SimpleQueue()

        # The DEALER socket is only ever touched by the background thread;
        # other threads wake it up via this PAIR of sockets.

        internal = f"inproc://pubpipe.ZMQTransport:signal:{id(self)}"
        self._signal_rx = zmq_context.socket(zmq.PAIR)
        self._signal_rx.bind(internal)
        self._signal_tx = zmq_context.socket(zmq.PAIR)
        self._signal_tx.connect(internal)
        self._signal_lock = threading.Lock()

        self._pending: Dict[bytes, PendingRequest] = {}
        self.shutdown = False
        self._thread = threading.Thread(target=self.run, daemon=True)
        self._thread.start()

        _transports.add(self)

    def _handle_incoming(self, parts: Tuple[bytes, ...]) -> None:
        try:
            msg_id, payload = from_response_frames(parts)
        except ValueError:
            logger.warning("dropping malformed response from %s", self.address)
            return

        pending = self._pending.pop(msg_id, None)
        if pending is None:
            return

        pending._complete(payload)

    def _handle_outgoing(self) -> None:
        # Clear one signal and send one request.
        self._signal_rx.recv(flags=zmq.NOBLOCK)
        pending: PendingRequest = self._outbox.get(block=False)

        self._pending[pending.id] = pending
        self.socket.send_multipart(pending.frames)

    def run(self) -> None:
        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)
        poller.register(self._signal_rx, zmq.POLLIN)

        while not self.shutdown:
            for active, _flag in poller.poll(1000):
                if active == self._signal_rx:
                    self._handle_outgoing()
                elif active == self.socket:
                    parts = tuple(self.socket.recv_multipart())
                    self._handle_incoming(parts)

        self.socket.close()
        self._signal_rx.close()

    def close(self) -> None:
        with self._signal_lock:
            if self.shutdown:
                return

            self.shutdown = True
            self._signal_tx.close()
        self._thread.join(2)
        _transports.discard(self)

    # --- Transport contract ---
    def estimate_size(self, operation: str, parameters: RequestParameters,
                      body: Optional[bytes]) -> int:
        frames = to_request_frames(next_id(), operation, parameters, body)
        return sum(len(frame) for frame in frames)

    def _request(self, operation: str, parameters: RequestParameters,
                 body: Optional[bytes]) -> Tuple[Dict[str, Any], Optional[int]]:
        msg_id = next_id()
        pending = PendingRequest(msg_id, to_request_frames(msg_id, operation, parameters, body))

        with self._signal_lock:
            if self.shutdown:
                raise TransportConnectionError(f"{operation} @ {self.address}: transport is closed")

            self._outbox.put(pending)
            self._signal_tx.send(b"")

        response = pending.wait(self.timeout)
        if response is None:
            self._pending.pop(msg_id, None)
            raise TransportTimeout(
                f"{operation} @ {self.address}: no response in {self.timeout:.2f} sec"
            )

        try:
            error = response["error"]
        except KeyError:
            pass
        else:
            raise TransportResponseError(f"{operation} @ {self.address}: {error.get('type')}: {error.get('text')}")

        status_code = response.get("status")
        service_response = response.get("response")

        if status_code is not None and status_code >= 400:
            data: Dict[str, Any] = {}
            if isinstance(service_response, list) and len(service_response) > 1:
                data["information"] = service_response[1]
            raise TransportResponseError(f"{operation} @ {self.address}: status {status_code}",
                                         status_code=status_code, data=data)

        try:
            data = parse_publish_response(service_response)
        except TransportResponseError as exc:
            exc.status_code = status_code
            raise

        return data, status_code


_transports: set = set()


def _cleanup() -> None:
    for transport in list(_transports):
        transport.close()


atexit.register(_cleanup)
