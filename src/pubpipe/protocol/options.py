"""Publish options shared by the publish, fire and size entry points."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PublishOptions:
    """
    Fully resolved options for a single publish.

    should_store:
        With False the message is not kept in channel history.
    ttl:
        Hours the message is kept in history; 0 keeps it forever, None
        defers to the account configuration.
    compress:
        Send the message gzip-compressed in the request body.
    replicate:
        With False the message is not replicated across the network.
    """

    should_store: bool = True
    ttl: Optional[int] = None
    compress: bool = False
    replicate: bool = True

    def __post_init__(self):
        ttl = self.ttl

        if ttl is None:
            return

        if isinstance(ttl, bool) or not isinstance(ttl, int):
            raise TypeError(f"ttl must be an integer, not {type(ttl).__name__}")

        if ttl < 0:
            raise ValueError(f"ttl must be non-negative: {ttl}")

    def resolved(self) -> "PublishOptions":
        """A ttl is meaningless for messages that will not be stored."""

        if not self.should_store and self.ttl is not None:
            return dataclasses.replace(self, ttl=None)
        return self

    def replace(self, **changes) -> "PublishOptions":
        return dataclasses.replace(self, **changes)

