#!/usr/bin/env python
from typing import Dict
from typing import Optional

from icsparser.values import DateValue
from icsparser.values import Parameterized
from icsparser.values import ParameterSet

## Components that may carry a recurrence rule.  A rule showing up
## anywhere else (STANDARD/DAYLIGHT in a VTIMEZONE) is left as is.
RECURRING_TYPES = ("VEVENT", "VTODO", "VJOURNAL")


def text_of(value) -> Optional[str]:
    """The text of a stored value, looking through parameters and repeats"""
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, Parameterized):
        value = value.val
    if value is None:
        return None
    return str(value)


class CalendarComponent(dict):
    """
    One BEGIN/END block.  The dict holds the decoded properties keyed
    by field name (``summary``, ``start``, ...) and, for containers
    like VCALENDAR or a VEVENT with alarms, the finished children
    keyed by UID.

    ``recurrences`` is None until an override (a component with the
    same UID and a RECURRENCE-ID) is folded into this one; then it
    maps the ``yyyy-mm-dd`` of the recurrence id to the override.
    """

    def __init__(
        self, type: Optional[str] = None, params: Optional[ParameterSet] = None
    ) -> None:
        super().__init__()
        self.type = type
        self.params = params if params is not None else ParameterSet()
        self.recurrences: Optional[Dict[str, "CalendarComponent"]] = None

    def __repr__(self) -> str:
        return "%s(%s, %s)" % (self.__class__.__name__, self.type, dict.__repr__(self))

    @property
    def uid(self) -> Optional[str]:
        return text_of(self.get("uid"))

    @property
    def recurrence_key(self) -> Optional[str]:
        """
        Date key of the RECURRENCE-ID, None if there is none or it
        could not be decoded into a date
        """
        recurrenceid = self.get("recurrenceid")
        if isinstance(recurrenceid, Parameterized):
            recurrenceid = recurrenceid.val
        if isinstance(recurrenceid, str):
            recurrenceid = DateValue.from_date_string(recurrenceid)
        if isinstance(recurrenceid, DateValue):
            return recurrenceid.date_key()
        return None

    @property
    def is_recurring(self) -> bool:
        return self.get("rrule") is not None

    def copy(self) -> "CalendarComponent":
        """Shallow copy of type, params and fields, without recurrences"""
        ret = self.__class__(self.type, self.params)
        ret.update(self)
        return ret

    def drop_strings(self) -> None:
        """Removes bare string fields, leaving children and structured values"""
        for key in [k for k, v in self.items() if isinstance(v, str)]:
            del self[key]


class CalendarDocument(dict):
    """
    The result of a parse: identifier -> CalendarComponent.  Whatever
    non-string values the VCALENDAR block itself carried stay in here
    as well.
    """

    type = "VCALENDAR"
    recurrences = None

    @classmethod
    def from_component(cls, component: CalendarComponent) -> "CalendarDocument":
        component.drop_strings()
        return cls(component)

    def components(self, type: Optional[str] = None):
        """The child components, optionally only those of one type"""
        return [
            v
            for v in self.values()
            if isinstance(v, CalendarComponent) and (type is None or v.type == type)
        ]

    def events(self):
        return self.components("VEVENT")

    def todos(self):
        return self.components("VTODO")

    def journals(self):
        return self.components("VJOURNAL")
