"""Request parameters: the path and query fields of a single request."""

from __future__ import annotations

from typing import Dict, Optional
from urllib.parse import quote

from . import fields
from .options import PublishOptions


def percent_escape(text: str) -> str:
    """Escape everything outside the RFC 3986 unreserved set."""

    return quote(text, safe="~")


class RequestParameters:
    """
    Path components keyed by placeholder, plus ordered query fields.

    Instances are created fresh for every request, and are discarded once
    the request has been dispatched or measured.
    """

    def __init__(self):
        self.path_components: Dict[str, str] = {}
        self.query: Dict[str, str] = {}

    def __repr__(self) -> str:
        return f"RequestParameters(path={self.path_components!r}, query={self.query!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, RequestParameters):
            return NotImplemented
        return (self.path_components == other.path_components
                and list(self.query.items()) == list(other.query.items()))

    def add_path_component(self, value: str, placeholder: str) -> None:
        self.path_components[placeholder] = value

    def add_query_parameter(self, value: str, name: str) -> None:
        self.query[name] = value

    def fill(self, template: str) -> str:
        """Substitute known placeholders into a path *template*."""

        for placeholder, value in self.path_components.items():
            template = template.replace(placeholder, value)
        return template

    def query_string(self) -> str:
        """
        Join the query fields without escaping them again; values that
        need escaping were escaped when they were added.
        """

        return "&".join(f"{name}={value}" for name, value in self.query.items())


def assemble(message: Optional[str], channel: Optional[str], options: PublishOptions,
             metadata: Optional[str], seqn: int) -> RequestParameters:
    """
    Compose the parameters required to publish *message* to *channel*.

    *message* and *metadata* are the final JSON text, after any encryption
    and push payload merging. With ``options.compress`` the message travels
    in the request body, and the message path component is left empty.
    """

    parameters = RequestParameters()

    if channel:
        parameters.add_path_component(percent_escape(channel), fields.CHANNEL)

    if not options.should_store:
        parameters.add_query_parameter("0", fields.STORE)

    if options.ttl is not None:
        parameters.add_query_parameter(str(options.ttl), fields.TTL)

    if not options.replicate:
        parameters.add_query_parameter("true", fields.NOREP)

    if message is not None:
        if options.compress:
            parameters.add_path_component("", fields.MESSAGE)
        else:
            parameters.add_path_component(percent_escape(message), fields.MESSAGE)

    if metadata:
        parameters.add_query_parameter(percent_escape(metadata), fields.META)

    parameters.add_query_parameter(str(seqn), fields.SEQN)

    return parameters
