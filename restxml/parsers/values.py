"""Parsing and formatting of scalar values.

The ``parse_*`` functions translate the raw text of XML attributes and elements
into Python values. The ``format_*`` functions do the reverse for request parameters.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from decimal import Decimal as D
from enum import Enum

from django.utils.dateparse import parse_date, parse_datetime, parse_duration, parse_time
from django.utils.duration import duration_iso_string

from restxml.exceptions import ExternalParsingError, ImproperlyConfigured

TRUE_VALUES = ("true", "1")
FALSE_VALUES = ("false", "0")
RE_INTEGER = re.compile(r"\A[+-]?[0-9]+\Z")
RE_FLOAT = re.compile(r"\A[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?\Z")


def parse_iso_date(raw_value: str) -> date:
    """Translate ISO date into a Python date value."""
    try:
        value = parse_date(raw_value)
    except ValueError as e:
        raise ExternalParsingError(str(e)) from e

    if value is None:
        raise ExternalParsingError("Date must be in YYYY-MM-DD format.")
    return value


def parse_iso_datetime(raw_value: str) -> datetime:
    """Translate ISO datetimes into a Python datetime value."""
    try:
        value = parse_datetime(raw_value)
    except ValueError as e:
        raise ExternalParsingError(str(e)) from e

    if value is None:
        raise ExternalParsingError("Date must be in YYYY-MM-DD HH:MM[:ss[.uuuuuu]][TZ] format.")
    return value


def parse_iso_time(raw_value: str) -> time:
    """Translate ISO times into a Python time value."""
    try:
        value = parse_time(raw_value)
    except ValueError as e:
        raise ExternalParsingError(str(e)) from e

    if value is None:
        raise ExternalParsingError("Time must be in HH:MM[:ss[.uuuuuu]][TZ] format.")
    return value


def parse_iso_duration(raw_value: str) -> timedelta:
    """Translate ISO durations into a Python timedelta value."""
    # The parse_duration() supports multiple formats, including ISO8601.
    # Limit it to only one format.
    if not raw_value.startswith(("P", "-P")):
        raise ExternalParsingError("Duration must be in ISO8601 format (e.g. PT1H).")

    try:
        value = parse_duration(raw_value)
    except ValueError as e:
        raise ExternalParsingError(str(e)) from e

    if value is None:
        raise ExternalParsingError("Duration must be in ISO8601 format (e.g. PT1H).")
    return value


def parse_bool(raw_value: str) -> bool:
    """Translate XML notations of true/1 and false/0 into a boolean."""
    if raw_value in TRUE_VALUES:
        return True
    elif raw_value in FALSE_VALUES:
        return False
    else:
        raise ExternalParsingError(f"Can't cast '{raw_value}' to boolean")


def parse_integer(raw_value: str) -> int:
    """Translate an integer, refusing Python notations such as ``1_000``."""
    if not RE_INTEGER.match(raw_value):
        raise ExternalParsingError(f"Can't cast '{raw_value}' to integer")
    return int(raw_value)


def parse_float(raw_value: str) -> float:
    """Translate a plain or exponent notation number, refusing ``nan`` and ``inf``."""
    if not RE_FLOAT.match(raw_value):
        raise ExternalParsingError(f"Can't cast '{raw_value}' to float")
    return float(raw_value)


def parse_decimal(raw_value: str) -> D:
    """Translate a number into a Decimal, refusing the special values."""
    if not RE_FLOAT.match(raw_value):
        raise ExternalParsingError(f"Can't cast '{raw_value}' to decimal")
    return D(raw_value)


def parse_list(raw_value: str) -> list[str]:
    """Translate a comma-separated value into a list."""
    return [item.strip() for item in raw_value.split(",")] if raw_value else []


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def format_iso(value: date | datetime | time) -> str:
    """Format dates and times in ISO 8601 notation."""
    return value.isoformat()


def format_duration(value: timedelta) -> str:
    """Format a timedelta in ISO 8601 notation (e.g. ``P1DT02H00M00S``)."""
    return duration_iso_string(value)


def format_list(value: list | tuple) -> str:
    """Format a sequence as comma-separated value."""
    return ",".join(format_auto(item) for item in value)


def format_auto(value) -> str:
    """Format any supported Python value for a query string.

    The runtime type decides the notation.
    Unknown types are refused, instead of silently using ``str()``.
    """
    # Note bool is a subclass of int, and datetime of date. Order matters.
    if isinstance(value, str):
        return value
    elif isinstance(value, bool):
        return format_bool(value)
    elif isinstance(value, (int, float, D)):
        return str(value)
    elif isinstance(value, (date, time)):
        return format_iso(value)
    elif isinstance(value, timedelta):
        return format_duration(value)
    elif isinstance(value, Enum):
        return format_auto(value.value)
    elif isinstance(value, (list, tuple)):
        return format_list(value)
    else:
        raise ImproperlyConfigured(f"No formatting rule for {type(value).__name__} value {value!r}")
