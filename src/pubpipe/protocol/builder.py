from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from .options import PublishOptions


class PublishBuilder:
    """
    Fluent construction of a publish, fire, or size call.

        client.publish_builder().channel("a").message("hi").ttl(5).perform(done)

    Fields that are never set take the defaults documented on
    :class:`~pubpipe.protocol.options.PublishOptions`. A builder performs
    exactly once.
    """

    def __init__(self, execute: Callable, **preset):
        self._execute = execute
        self._performed = False

        self._message: Any = None
        self._channel: Optional[str] = None
        self._payloads: Optional[Dict[str, Any]] = None
        self._metadata: Optional[Dict[str, Any]] = None
        self._options: Dict[str, Any] = dict(preset)

    # Data
    def message(self, value: Any):
        self._message = value
        return self

    def channel(self, name: str):
        self._channel = name
        return self

    def payloads(self, payloads: Optional[Dict[str, Any]]):
        self._payloads = payloads
        return self

    def metadata(self, metadata: Optional[Dict[str, Any]]):
        self._metadata = metadata
        return self

    # Options
    def should_store(self, flag: bool):
        self._options["should_store"] = bool(flag)
        return self

    def ttl(self, hours: Optional[int]):
        self._options["ttl"] = hours
        return self

    def compress(self, flag: bool):
        self._options["compress"] = bool(flag)
        return self

    def replicate(self, flag: bool):
        self._options["replicate"] = bool(flag)
        return self

    # Finalize
    def perform(self, completion: Optional[Callable] = None):

        if self._performed:
            raise RuntimeError("builder has already been performed")

        options = PublishOptions(**self._options)
        self._performed = True

        return self._execute(self._message, self._channel, payloads=self._payloads,
                             options=options, metadata=self._metadata, completion=completion)
