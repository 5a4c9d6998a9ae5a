"""
URL builder - Domain service turning endpoint requests into daemon URLs.
"""

from __future__ import annotations
from typing import Callable

from ..models.request import EndpointRequest


# Flags sent with every call: stream channel output, JSON encoded replies
DEFAULT_QUERY = "stream-channels=true&json=true&encoding=json"


class UrlBuilder:
    """Builds request URLs, delegating percent-encoding to the transport."""

    def __init__(self, encode: Callable[[str], str]):
        self._encode = encode

    def build(self, request: EndpointRequest) -> str:
        """Render `request` as `<prefix>/<path>?<defaults>[&name=value...][&timeout=...]`."""
        params = list(request.params)
        if request.timeout:
            # Server-side time-out, always the last parameter
            params.append(("timeout", request.timeout))

        url = f"{request.prefix}/{request.path}?{DEFAULT_QUERY}"
        for name, value in params:
            url += f"&{self._encode(name)}={self._encode(value)}"
        return url
