#!/usr/bin/env python
"""
Value decoders, one per property kind.

Every decoder takes the target field name, the ``ContentLine`` and the
component being built, stores the decoded value on the component and
returns the component.  ``decode`` picks the decoder from the closed
``PropertyKind`` enumeration; properties we know nothing about are
``PropertyKind.OTHER`` and stored as text.
"""
import datetime
import enum
import re
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

from icsparser.component import CalendarComponent
from icsparser.contentline import ContentLine
from icsparser.lib.error import log
from icsparser.values import DateValue
from icsparser.values import ExceptionDateSet
from icsparser.values import FreeBusyEntry
from icsparser.values import GeoValue
from icsparser.values import Parameterized
from icsparser.values import ParameterSet
from icsparser.values import period
from icsparser.values import RawRule

DATE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")
DATE_TIME = re.compile(r"^(\d{4})(\d{2})(\d{2})T(\d{2})(\d{2})(\d{2})(Z)?$")
ESCAPE = re.compile(r"\\([,;nN\\])")
UNESCAPED_COMMA = re.compile(r"(?<!\\),")
EXTENSION_PREFIX = "X-"

Decoder = Callable[[str, ContentLine, CalendarComponent], CalendarComponent]

_UNESCAPED = {",": ",", ";": ";", "n": "\n", "N": "\n", "\\": "\\"}


def unescape(text: Optional[str]) -> str:
    """Undoes the TEXT escaping of RFC5545 section 3.3.11"""
    if not text:
        return ""
    return ESCAPE.sub(lambda m: _UNESCAPED[m.group(1)], text)


def store(field: str, value: Any, component: CalendarComponent) -> CalendarComponent:
    """
    Sets the field.  A property showing up a second time turns the
    field into a list, further repeats are appended.
    """
    current = component.get(field)
    if isinstance(current, list):
        current.append(value)
    elif current is not None:
        component[field] = [current, value]
    else:
        component[field] = value
    return component


def text_value(value: str, params: ParameterSet) -> Any:
    if params:
        return Parameterized(params, unescape(value))
    return unescape(value)


def decode_text(
    field: str, line: ContentLine, component: CalendarComponent
) -> CalendarComponent:
    return store(field, text_value(line.value, line.params), component)


def parse_date(value: str, params: ParameterSet) -> Any:
    """
    DATE (only with VALUE=DATE) or DATE-TIME, UTC if there is a
    trailing Z, else local time.  The TZID parameter is carried along
    as is.  Anything else comes back as unescaped text.
    """
    value = (value or "").strip()
    tz = params.get("TZID")
    if params.get("VALUE") == "DATE":
        parts = DATE.match(value)
        if parts:
            try:
                day = datetime.date(*(int(x) for x in parts.groups()))
            except ValueError:
                return unescape(value)
            return DateValue(day, tz=tz, date_only=True)

    parts = DATE_TIME.match(value)
    if not parts:
        return unescape(value)
    try:
        timestamp = datetime.datetime(*(int(x) for x in parts.groups()[:6]))
    except ValueError:
        return unescape(value)
    if parts.group(7) == "Z":
        timestamp = timestamp.replace(tzinfo=datetime.timezone.utc)
    return DateValue(timestamp, tz=tz)


def decode_date(
    field: str, line: ContentLine, component: CalendarComponent
) -> CalendarComponent:
    return store(field, parse_date(line.value, line.params), component)


## RANGE=THISANDFUTURE / THISANDPRIOR is not interpreted
decode_recurrence_id = decode_date


def decode_geo(
    field: str, line: ContentLine, component: CalendarComponent
) -> CalendarComponent:
    text = unescape(line.value)
    lat, _, lon = line.value.partition(";")
    try:
        geo = GeoValue(float(lat), float(lon), text)
    except ValueError:
        log.debug(f"GEO value {line.value!r} is not a coordinate pair")
        return decode_text(field, line, component)
    component[field] = geo
    return component


def split_list(value: str) -> List[str]:
    """Comma separated TEXT list, each entry trimmed and unescaped"""
    if not value or not value.strip():
        return []
    return [unescape(x.strip()) for x in UNESCAPED_COMMA.split(value)]


def decode_categories(
    field: str, line: ContentLine, component: CalendarComponent
) -> CalendarComponent:
    categories = component.get(field)
    if not isinstance(categories, list):
        categories = component[field] = []
    categories.extend(split_list(line.value))
    return component


def decode_exdate(
    field: str, line: ContentLine, component: CalendarComponent
) -> CalendarComponent:
    """
    EXDATE values are indexed by date only, time of day is ignored.
    Floating times make a time lookup unreliable, and producers
    regularly emit exception times that don't match the rule times.
    """
    exdates = component.get(field)
    if not isinstance(exdates, ExceptionDateSet):
        exdates = component[field] = ExceptionDateSet()
    for token in (line.value or "").split(","):
        token = token.strip()
        if not token:
            continue
        exdate = parse_date(token, line.params)
        if isinstance(exdate, str):
            exdate = DateValue.from_date_string(exdate)
        if exdate is None:
            log.warning(f"EXDATE entry {token!r} is not a date, ignored")
            continue
        exdates[exdate.date_key()] = exdate
    return component


def decode_freebusy(
    field: str, line: ContentLine, component: CalendarComponent
) -> CalendarComponent:
    busy = component.get(field)
    if not isinstance(busy, list):
        busy = component[field] = []
    fbtype = line.params.get("FBTYPE", "BUSY")
    for value in (line.value or "").split(","):
        start, end = period(value.strip())
        busy.append(
            FreeBusyEntry(
                fbtype,
                parse_date(start, line.params),
                parse_date(end, line.params) if end is not None else None,
            )
        )
    return component


def capture_rule(
    field: str, line: ContentLine, component: CalendarComponent
) -> CalendarComponent:
    """The rule is compiled when the component is closed"""
    component[field] = RawRule(line.line)
    return component


class PropertyKind(enum.Enum):
    """Every property with a dedicated field name, plus OTHER"""

    SUMMARY = "summary"
    DESCRIPTION = "description"
    URL = "url"
    UID = "uid"
    LOCATION = "location"
    CLASS = "class"
    TRANSP = "transparency"
    PERCENT_COMPLETE = "completion"
    DTSTART = "start"
    DTEND = "end"
    COMPLETED = "completed"
    DTSTAMP = "dtstamp"
    CREATED = "created"
    LAST_MODIFIED = "lastmodified"
    RECURRENCE_ID = "recurrenceid"
    GEO = "geo"
    CATEGORIES = "categories"
    EXDATE = "exdate"
    FREEBUSY = "freebusy"
    RRULE = "rrule"
    OTHER = None

    @property
    def field(self) -> Optional[str]:
        return self.value

    @classmethod
    def lookup(cls, name: str) -> "PropertyKind":
        return _KIND_BY_NAME.get(name.upper(), cls.OTHER)


_KIND_BY_NAME: Dict[str, PropertyKind] = {
    kind.name.replace("_", "-"): kind for kind in PropertyKind if kind.field
}

DECODERS: Dict[PropertyKind, Decoder] = {
    PropertyKind.SUMMARY: decode_text,
    PropertyKind.DESCRIPTION: decode_text,
    PropertyKind.URL: decode_text,
    PropertyKind.UID: decode_text,
    PropertyKind.LOCATION: decode_text,
    PropertyKind.CLASS: decode_text,
    PropertyKind.TRANSP: decode_text,
    PropertyKind.PERCENT_COMPLETE: decode_text,
    PropertyKind.DTSTART: decode_date,
    PropertyKind.DTEND: decode_date,
    PropertyKind.COMPLETED: decode_date,
    PropertyKind.DTSTAMP: decode_date,
    PropertyKind.CREATED: decode_date,
    PropertyKind.LAST_MODIFIED: decode_date,
    PropertyKind.RECURRENCE_ID: decode_recurrence_id,
    PropertyKind.GEO: decode_geo,
    PropertyKind.CATEGORIES: decode_categories,
    PropertyKind.EXDATE: decode_exdate,
    PropertyKind.FREEBUSY: decode_freebusy,
    PropertyKind.RRULE: capture_rule,
    PropertyKind.OTHER: decode_text,
}


def field_name(line: ContentLine, nested: bool) -> str:
    """
    Field name for a property without a dedicated kind.  Extension
    properties inside a component lose their ``X-`` prefix, all other
    names are lower-cased.
    """
    if nested and line.key.startswith(EXTENSION_PREFIX):
        return line.name[len(EXTENSION_PREFIX) :]
    return line.name.lower()


def decode(
    line: ContentLine, component: CalendarComponent, nested: bool = True
) -> CalendarComponent:
    """
    Decodes one content line onto the component.  ``nested`` tells
    whether we are inside a BEGIN/END block.
    """
    kind = PropertyKind.lookup(line.name)
    field = kind.field if kind.field else field_name(line, nested)
    return DECODERS[kind](field, line, component)
