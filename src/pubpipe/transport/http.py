"""HTTP transport for the REST publish endpoint.

Uncompressed messages travel in the request path of a GET request;
compressed messages are POSTed as a gzip-encoded body.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from .. import json
from ..protocol.parameters import RequestParameters, percent_escape
from .base import (
    Transport,
    TransportConnectionError,
    TransportResponseError,
    TransportTimeout,
    parse_publish_response,
)

logger = logging.getLogger(__name__)

sdk = "PubPipe-Python/0.1.0"

path_template = "/publish/{publish_key}/{subscribe_key}/0/{channel}/0/{message}"


class HTTPTransport(Transport):
    """
    Send publish requests over HTTP(S) with a shared :class:`httpx.Client`.

    A preconfigured *client* may be supplied; otherwise one is created from
    the configuration and closed along with this transport.
    """

    def __init__(self, config, client: Optional[httpx.Client] = None):
        self.config = config
        self._owned = client is None

        if client is None:
            client = httpx.Client(timeout=config.request_timeout)

        self.client = client

    def close(self) -> None:
        if self._owned:
            self.client.close()

    # --- request construction ---
    def url(self, parameters: RequestParameters) -> str:
        config = self.config

        path = path_template.replace("{publish_key}", percent_escape(config.publish_key or ""))
        path = path.replace("{subscribe_key}", percent_escape(config.subscribe_key or ""))
        path = parameters.fill(path)

        # Compressed messages leave the message component empty.
        path = path.replace("{message}", "").rstrip("/")

        query = parameters.query_string()
        common = [f"uuid={percent_escape(config.uuid)}", f"pnsdk={percent_escape(sdk)}"]
        if config.auth_key:
            common.append(f"auth={percent_escape(config.auth_key)}")

        if query:
            query = query + "&" + "&".join(common)
        else:
            query = "&".join(common)

        scheme = "https" if config.secure else "http"
        return f"{scheme}://{config.origin}{path}?{query}"

    def build(self, parameters: RequestParameters, body: Optional[bytes]) -> httpx.Request:
        url = self.url(parameters)

        if body is None:
            return self.client.build_request("GET", url)

        headers = {"Content-Type": "application/json", "Content-Encoding": "gzip"}
        return self.client.build_request("POST", url, content=body, headers=headers)

    # --- Transport contract ---
    def estimate_size(self, operation: str, parameters: RequestParameters,
                      body: Optional[bytes]) -> int:
        request = self.build(parameters, body)

        size = len(request.method) + 1 + len(request.url.raw_path) + len(" HTTP/1.1\r\n")
        for name, value in request.headers.raw:
            size += len(name) + 2 + len(value) + 2
        size += 2

        if body:
            size += len(body)

        return size

    def _request(self, operation: str, parameters: RequestParameters,
                 body: Optional[bytes]) -> Tuple[Dict[str, Any], Optional[int]]:
        request = self.build(parameters, body)
        logger.debug("%s %s", request.method, request.url)

        try:
            response = self.client.send(request)
        except httpx.TimeoutException as exc:
            raise TransportTimeout(f"{operation}: no response in {self.config.request_timeout} sec") from exc
        except httpx.TransportError as exc:
            raise TransportConnectionError(f"{operation}: {exc}") from exc

        try:
            decoded = json.decode(response.content)
        except json.decode_errors:
            decoded = None

        if response.status_code >= 400:
            message = f"{operation}: HTTP {response.status_code}"
            data: Dict[str, Any] = {}

            if isinstance(decoded, list) and len(decoded) > 1:
                message = f"{message}: {decoded[1]}"
                data["information"] = decoded[1]
            elif isinstance(decoded, dict) and "message" in decoded:
                message = f"{message}: {decoded['message']}"
                data["information"] = decoded["message"]

            raise TransportResponseError(message, status_code=response.status_code, data=data)

        try:
            data = parse_publish_response(decoded)
        except TransportResponseError as exc:
            exc.status_code = response.status_code
            raise

        return data, response.status_code
