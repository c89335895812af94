"""The service ties a request, the HTTP call and a response class together.

.. code-block:: python

    flickr = Service("https://api.flickr.com/services/rest/")
    response = flickr.call(PhotoSearch(tags="relax"), PhotoList)
    if response.is_successful():
        ...

Transport and parsing errors are not translated, these reach the caller as-is.
"""

from __future__ import annotations

import logging

from restxml.exceptions import ImproperlyConfigured
from restxml.parsers.xml import parse_xml_from_string
from restxml.requests import BaseRequest, build_url
from restxml.responses import BaseResponse
from restxml.transport import RequestsTransport

logger = logging.getLogger(__name__)

__all__ = ("Service",)


class Service:
    """An API endpoint, and the means to call it."""

    def __init__(self, endpoint: str, transport=None, parse_document=None):
        """
        :param endpoint: The base URL of the API, the query string is added to this.
        :param transport: Object with a ``perform(method, url)`` method, or such a function.
            Defaults to a :class:`~restxml.transport.RequestsTransport`.
        :param parse_document: Function that parses the response body into a tree of nodes.
        """
        self.endpoint = endpoint
        self.transport = transport if transport is not None else RequestsTransport()
        self.parse_document = parse_document or parse_xml_from_string

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.endpoint}>"

    def build_url(self, request: BaseRequest) -> str:
        """Provide the full URL for the request."""
        return build_url(self.endpoint, request.render())

    def call(
        self, request: BaseRequest, response_class: type[BaseResponse], method: str = "GET"
    ) -> BaseResponse:
        """Perform the request, and parse the body into the response class."""
        if not isinstance(response_class, type) or not issubclass(response_class, BaseResponse):
            raise ImproperlyConfigured(f"{response_class!r} is not a BaseResponse subclass.")

        url = self.build_url(request)
        logger.debug("Calling %s %s", method, url)

        perform = getattr(self.transport, "perform", self.transport)
        status_code, body = perform(method, url)

        root = self.parse_document(body)
        return response_class.from_xml(root, status_code=status_code)
