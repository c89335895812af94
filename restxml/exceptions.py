"""Exceptions raised by the request rendering and response parsing.

Errors of the transport (e.g. ``requests.RequestException``) are never wrapped,
these are propagated as-is to the caller of :meth:`Service.call`.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager

from django.core import exceptions as django_exceptions

logger = logging.getLogger(__name__)

__all__ = (
    "RestXmlError",
    "ImproperlyConfigured",
    "ExternalParsingError",
    "ValueCoercionError",
    "MissingParameterValue",
    "wrap_parser_errors",
)


@contextmanager
def wrap_parser_errors(name: str, raw_value: str | None = None):
    """Convert the value into a Python format.
    This catches any typical exceptions and transforms them into a :class:`ValueCoercionError`.
    """
    try:
        yield
    except ValueCoercionError:
        raise
    except ExternalParsingError as e:
        logger.debug("Parsing error for %s=%r: %s", name, raw_value, e)
        raise ValueCoercionError(
            f"Unable to parse '{name}' value: {e}", parameter=name, raw_value=raw_value
        ) from e
    except (TypeError, ValueError, ArithmeticError) as e:
        # ArithmeticError is base of DecimalException
        logger.debug("Parsing error for %s=%r: %s", name, raw_value, e)
        raise ValueCoercionError(
            f"Invalid '{name}' value: {e}", parameter=name, raw_value=raw_value
        ) from e


class RestXmlError(Exception):
    """Base class for all exceptions in this module."""

    text_template = "Error with the '{parameter}' parameter."

    def __init__(self, text=None, parameter=None):
        text = text or self.text_template.format(parameter=parameter)
        super().__init__(text)
        self.text = text
        self.parameter = parameter


class ImproperlyConfigured(RestXmlError, django_exceptions.ImproperlyConfigured):
    """A request or response class is declared in a way that can't work.

    For example, a parameter type that has no parse/format rule,
    or a collection that doesn't point to a response class.
    """

    text_template = "Parameter '{parameter}' is not configured correctly."


class ExternalParsingError(RestXmlError, ValueError):
    """Raise a ValueError for a parsing problem of external data."""

    text_template = "Unable to parse the '{parameter}' value."


class ValueCoercionError(ExternalParsingError):
    """The raw text of a response value could not be converted to its declared type."""

    text_template = "Invalid value for '{parameter}' parameter."

    def __init__(self, text=None, parameter=None, raw_value=None):
        super().__init__(text, parameter=parameter)
        self.raw_value = raw_value


class MissingParameterValue(ExternalParsingError):
    """A required value was not found in the response."""

    text_template = "Missing required '{parameter}' value."
