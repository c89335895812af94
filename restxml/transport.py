"""The default HTTP transport, based on the ``requests`` library.

Any object with a ``perform(method, url)`` method (or a plain function with
that signature) can be used instead, as long as it returns the status code and body.
Errors of the ``requests`` library are not translated, these reach the caller as-is.
"""

from __future__ import annotations

import logging

import requests

from restxml import conf

logger = logging.getLogger(__name__)

__all__ = ("RequestsTransport",)


class RequestsTransport:
    """Perform the HTTP call using a :class:`requests.Session`."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ):
        """
        :param session: The session to use, to share connection pools or configure proxies.
        :param timeout: The timeout in seconds, defaults to the ``RESTXML_TIMEOUT`` setting.
        :param headers: Extra headers to send with every request.
        """
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.headers = headers or {}

    def get_headers(self) -> dict[str, str]:
        return {
            "User-Agent": conf.RESTXML_USER_AGENT,
            "Accept": "application/xml, text/xml",
            **self.headers,
        }

    def perform(self, method: str, url: str) -> tuple[int, bytes]:
        """Perform the HTTP request, return the status code and raw response body."""
        timeout = self.timeout if self.timeout is not None else conf.RESTXML_TIMEOUT
        response = self.session.request(method, url, headers=self.get_headers(), timeout=timeout)
        logger.debug(
            "%s %s returned HTTP %d (%d bytes)",
            method,
            url,
            response.status_code,
            len(response.content),
        )
        return response.status_code, response.content

    __call__ = perform
