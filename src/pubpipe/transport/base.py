"""Transport interface.

This is the (small) contract that transport implementations should follow.
It lives outside :mod:`pubpipe.protocol` so the protocol remains
transport-agnostic: the publish pipeline hands over fully assembled
:class:`~pubpipe.protocol.parameters.RequestParameters` and an optional
body, and receives a :class:`~pubpipe.protocol.status.Status` in return.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from ..errors import DispatchError
from ..protocol import fields
from ..protocol.parameters import RequestParameters
from ..protocol.status import Status

logger = logging.getLogger(__name__)


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""

    status_code: Optional[int] = None


class TransportTimeout(TransportError):
    """A request did not receive a timely response."""


class TransportConnectionError(TransportError):
    """The transport could not establish or maintain a connection."""


class TransportResponseError(TransportError):
    """The service answered, but rejected the request."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.data = data or {}


def parse_publish_response(response: Any) -> Dict[str, Any]:
    """
    Interpret the service response to a publish request.

    A successful publish is acknowledged as ``[1, "Sent", "<timetoken>"]``;
    anything else is treated as a rejection.
    """

    try:
        code, information, timetoken = response
    except (TypeError, ValueError):
        raise TransportResponseError(f"malformed publish response: {response!r}")

    data = {"information": information, "timetoken": timetoken}

    if code != 1:
        raise TransportResponseError(f"publish rejected: {information}", data=data)

    return data


class Transport(ABC):
    """Minimal contract for a request/response transport."""

    @abstractmethod
    def _request(self, operation: str, parameters: RequestParameters,
                 body: Optional[bytes]) -> Tuple[Dict[str, Any], Optional[int]]:
        """
        Execute a request, returning the response data and the transport
        status code, if any. Failures raise :class:`TransportError`.
        """

    @abstractmethod
    def estimate_size(self, operation: str, parameters: RequestParameters,
                      body: Optional[bytes]) -> int:
        """Return the size in bytes of the request, without sending it."""

    def close(self) -> None:
        """Release any connections held by the transport."""

    def send(self, operation: str, parameters: RequestParameters,
             body: Optional[bytes] = None) -> Status:
        """Execute a request; failures are reported in the returned Status."""

        try:
            data, status_code = self._request(operation, parameters, body)
        except TransportError as exc:
            logger.warning("%s request failed: %s", operation, exc)
            error = DispatchError(str(exc))
            error.__cause__ = exc
            status = Status.failure(operation, fields.DISPATCH_ERROR, error,
                                    status_code=exc.status_code)
            if isinstance(exc, TransportResponseError):
                status.data.update(exc.data)
            return status

        return Status(operation, data=data, status_code=status_code)
