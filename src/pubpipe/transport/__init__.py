"""Transport layer implementations."""

from .base import (
    Transport,
    TransportError,
    TransportTimeout,
    TransportConnectionError,
    TransportResponseError,
)
from .http import HTTPTransport
from .zmq import ZMQTransport

backends = {
    "http": HTTPTransport,
    "zmq": ZMQTransport,
}


def create(config) -> Transport:
    """Instantiate the transport backend named by ``config.transport``."""

    try:
        backend = backends[config.transport]
    except KeyError:
        raise ValueError(f"unknown transport backend: {config.transport!r}") from None

    return backend(config)
