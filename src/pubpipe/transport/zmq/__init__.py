from .request import ZMQTransport
