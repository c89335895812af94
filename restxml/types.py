"""The value types that parameters can be declared with.

Each :class:`ParamType` member maps to a parse function (raw XML text to Python)
and a format function (Python to query string text). Both tables are complete
for every member; this is checked when the module is loaded, so a missing rule
never surfaces halfway through parsing a response.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal as D
from enum import Enum

from restxml.exceptions import ImproperlyConfigured
from restxml.parsers import values

__all__ = (
    "ParamSource",
    "ParamType",
)


class ParamSource(Enum):
    """Where a response parameter reads its value from."""

    #: The text of the matched element.
    element = "element"

    #: An attribute of the matched element.
    attribute = "attribute"

    def __str__(self):
        return self.value

    @classmethod
    def from_option(cls, value: ParamSource | str) -> ParamSource:
        """Translate the declaration option into the member."""
        try:
            return cls(value)
        except ValueError:
            raise ImproperlyConfigured(
                f"Unknown parameter source {value!r}, expected one of: "
                + ", ".join(member.value for member in cls)
            ) from None


class ParamType(Enum):
    """Brief enumeration of the supported value types."""

    string = "string"
    integer = "integer"
    float = "float"
    decimal = "decimal"
    boolean = "boolean"
    date = "date"
    datetime = "datetime"
    time = "time"
    duration = "duration"
    list = "list"  # comma-separated strings

    def __str__(self):
        return self.value

    @classmethod
    def from_option(cls, value: ParamType | str | type) -> ParamType:
        """Translate the declaration option into the member.

        This accepts the member, its name (``"integer"``), or the Python type (``int``).
        """
        if isinstance(value, cls):
            return value
        elif isinstance(value, type):
            try:
                return PYTHON_TO_TYPES[value]
            except KeyError:
                raise ImproperlyConfigured(
                    f"No parameter type is defined for Python type {value.__name__}."
                ) from None

        try:
            return cls(value)
        except ValueError:
            raise ImproperlyConfigured(
                f"Unknown parameter type {value!r}, expected one of: "
                + ", ".join(member.value for member in cls)
            ) from None

    def to_python(self, raw_value: str):
        """Convert a raw string value to this type representation.

        :raises ValueError: When the value can't be converted to the proper type.
        """
        if isinstance(raw_value, TYPES_AS_PYTHON[self]) and not isinstance(raw_value, str):
            # Detect when the value was already parsed, no need to reparse a date for example.
            return raw_value

        return TYPES_TO_PYTHON[self](raw_value)

    def to_text(self, value) -> str:
        """Format a Python value for this type in a query string.

        :raises ImproperlyConfigured: When the value doesn't match the declared type.
        """
        if self is not ParamType.string:
            expect = TYPES_AS_PYTHON[self]
            if not isinstance(value, expect) or (
                isinstance(value, bool) and self is not ParamType.boolean
            ):
                raise ImproperlyConfigured(
                    f"A {self.value} parameter can't format the"
                    f" {type(value).__name__} value {value!r}."
                )

        return TYPES_TO_TEXT[self](value)


#: Python types that are accepted as already converted values.
TYPES_AS_PYTHON = {
    ParamType.string: str,
    ParamType.integer: int,
    ParamType.float: (float, int, D),
    ParamType.decimal: (D, int),
    ParamType.boolean: bool,
    ParamType.date: date,
    ParamType.datetime: datetime,
    ParamType.time: time,
    ParamType.duration: timedelta,
    ParamType.list: (list, tuple),
}

TYPES_TO_PYTHON = {
    ParamType.string: str,
    ParamType.integer: values.parse_integer,
    ParamType.float: values.parse_float,
    ParamType.decimal: values.parse_decimal,
    ParamType.boolean: values.parse_bool,
    ParamType.date: values.parse_iso_date,
    ParamType.datetime: values.parse_iso_datetime,
    ParamType.time: values.parse_iso_time,
    ParamType.duration: values.parse_iso_duration,
    ParamType.list: values.parse_list,
}

TYPES_TO_TEXT = {
    ParamType.string: values.format_auto,
    ParamType.integer: str,
    ParamType.float: str,
    ParamType.decimal: str,
    ParamType.boolean: values.format_bool,
    ParamType.date: values.format_iso,
    ParamType.datetime: values.format_iso,
    ParamType.time: values.format_iso,
    ParamType.duration: values.format_duration,
    ParamType.list: values.format_list,
}

#: Shortcuts for declaring ``type=int`` instead of ``type=ParamType.integer``.
PYTHON_TO_TYPES = {
    str: ParamType.string,
    int: ParamType.integer,
    float: ParamType.float,
    D: ParamType.decimal,
    bool: ParamType.boolean,
    date: ParamType.date,
    datetime: ParamType.datetime,
    time: ParamType.time,
    timedelta: ParamType.duration,
    list: ParamType.list,
}

for _table in (TYPES_AS_PYTHON, TYPES_TO_PYTHON, TYPES_TO_TEXT):
    _missing = set(ParamType) - set(_table)
    if _missing:
        raise ImproperlyConfigured(
            "No parse/format rule for: " + ", ".join(sorted(map(str, _missing)))
        )
