#!/usr/bin/env python
"""
Typed values stored on a ``CalendarComponent``.

Plain text properties are stored as ``str``.  Everything else is one
of the small classes below.  Consumers are expected to check with
``isinstance`` what they got, i.e. a ``DTSTART`` that could not be
decoded is left as a ``str`` rather than a ``DateValue``.
"""
import datetime
import re
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Iterator
from typing import Optional
from typing import Tuple
from typing import Union

DATE_ONLY = re.compile(r"^(\d{4})(\d{2})(\d{2})$")


class ParameterSet(list):
    """
    Ordered ``(key, value)`` pairs from the parameter part of a
    content line.  Keys may repeat; ``get`` returns the first match.
    """

    def get(self, key: str, default: Any = None) -> Any:
        for k, v in self:
            if k == key:
                return v
        return default

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self)


@dataclass
class Parameterized:
    """A text value that came with parameters, i.e. ``SUMMARY;LANGUAGE=de:...``"""

    params: ParameterSet
    val: Any

    def __str__(self) -> str:
        return str(self.val)


@dataclass
class DateValue:
    """
    A decoded DATE or DATE-TIME.

    ``value`` is a ``datetime.date`` when ``date_only`` is set, an
    aware ``datetime`` in UTC when the source had a trailing ``Z``, and
    a naive ``datetime`` (local civil time) otherwise.  ``tz`` holds
    the TZID parameter verbatim; no conversion is ever done.
    """

    value: Union[datetime.date, datetime.datetime]
    tz: Optional[str] = None
    date_only: bool = False

    @property
    def is_utc(self) -> bool:
        return (
            isinstance(self.value, datetime.datetime)
            and self.value.tzinfo is not None
            and self.value.utcoffset() == datetime.timedelta(0)
        )

    def date_key(self) -> str:
        """The ``yyyy-mm-dd`` key used for exception dates and overrides"""
        if isinstance(self.value, datetime.datetime):
            return self.value.date().isoformat()
        return self.value.isoformat()

    def compact(self) -> str:
        """
        ``yyyymmddThhmmss`` with a trailing ``Z`` for UTC values, as
        used in a DTSTART line.  Date-only values are given at midnight.
        """
        value = self.value
        if not isinstance(value, datetime.datetime):
            value = datetime.datetime(value.year, value.month, value.day)
        ret = "%04i%02i%02iT%02i%02i%02i" % (
            value.year,
            value.month,
            value.day,
            value.hour,
            value.minute,
            value.second,
        )
        if self.is_utc:
            ret += "Z"
        return ret

    @classmethod
    def from_date_string(cls, text: str) -> Optional["DateValue"]:
        """Reads a bare ``yyyymmdd`` string, returns None if it isn't one"""
        if not isinstance(text, str):
            return None
        parts = DATE_ONLY.match(text)
        if not parts:
            return None
        try:
            day = datetime.date(*(int(x) for x in parts.groups()))
        except ValueError:
            return None
        return cls(day, date_only=True)


@dataclass
class GeoValue:
    lat: float
    lon: float
    text: str = ""


@dataclass
class FreeBusyEntry:
    """One FREEBUSY period.  ``end`` may be a duration string"""

    type: str
    start: Any
    end: Any = None


class ExceptionDateSet(dict):
    """EXDATE values keyed by their ``yyyy-mm-dd`` date"""

    def __contains__(self, key: object) -> bool:
        if isinstance(key, DateValue):
            key = key.date_key()
        elif isinstance(key, datetime.date):
            key = key.isoformat()[:10]
        return super().__contains__(key)


@dataclass
class RawRule:
    """The verbatim RRULE content line, as captured while parsing"""

    line: str

    def __str__(self) -> str:
        return self.line


@dataclass
class CompiledRule:
    """
    A recurrence rule handed to the evaluator.  ``text`` is the
    canonical rule string, ``rule`` whatever the evaluator returned
    (by default a ``dateutil.rrule.rrule``).
    """

    text: str
    rule: Any = field(repr=False)

    def occurrences(self) -> Iterator[datetime.datetime]:
        return iter(self.rule)

    def between(
        self, after: datetime.datetime, before: datetime.datetime, inc: bool = False
    ) -> list:
        return self.rule.between(after, before, inc=inc)

    def after(self, dt: datetime.datetime, inc: bool = False):
        return self.rule.after(dt, inc=inc)

    def before(self, dt: datetime.datetime, inc: bool = False):
        return self.rule.before(dt, inc=inc)

    def includes(self, dt: datetime.datetime) -> bool:
        return self.rule.after(dt, inc=True) == dt

    def __str__(self) -> str:
        return self.text


def period(text: str) -> Tuple[str, Optional[str]]:
    """Splits ``start/end`` into its two halves"""
    start, _, end = text.partition("/")
    return start, (end if end else None)
