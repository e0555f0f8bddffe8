#!/usr/bin/env python
"""
Turning the captured RRULE line of a closed component into something
that can be evaluated.

The rule is rewritten into the canonical two-line form::

  DTSTART:20200101T090000Z
  RRULE:FREQ=WEEKLY;COUNT=10

and handed to a rule factory, ``dateutil.rrule.rrulestr`` unless
something else is given.  The factory result is stored as a
``CompiledRule``.  Problems are logged, never raised: a component
whose start cannot be formatted gets a rule without DTSTART, and a
rule the factory rejects stays a ``RawRule``.
"""
import datetime
import re
from typing import Any
from typing import Callable
from typing import Optional
from zoneinfo import ZoneInfo
from zoneinfo import ZoneInfoNotFoundError

from dateutil.rrule import rrulestr

from icsparser.component import CalendarComponent
from icsparser.component import RECURRING_TYPES
from icsparser.lib.error import log
from icsparser.lib.error import RuleFormatError
from icsparser.values import CompiledRule
from icsparser.values import DateValue
from icsparser.values import Parameterized
from icsparser.values import RawRule

RuleFactory = Callable[[str], Any]

DTSTART_CLAUSE = re.compile(r"(?:^|;)DTSTART=([^;]*)", re.IGNORECASE)
UNTIL_UTC = re.compile(r"(UNTIL=)(\d{8}T\d{6})Z", re.IGNORECASE)
COMPACT = "%Y%m%dT%H%M%S"


def format_dtstart(start: Any) -> str:
    """
    The compact ``yyyymmddThhmmss[Z]`` form of a component start.
    Raises RuleFormatError if the start is not something we can format.
    """
    if isinstance(start, Parameterized):
        start = start.val
    if not isinstance(start, DateValue):
        raise RuleFormatError(reason=f"start is not a date: {start!r}")
    try:
        return start.compact()
    except (AttributeError, TypeError, ValueError) as e:
        raise RuleFormatError(reason=str(e)) from e


def strip_rule_name(line: str) -> str:
    """``RRULE;X-FOO=bar:FREQ=DAILY`` -> ``FREQ=DAILY``"""
    if line.upper().startswith("RRULE") and ":" in line:
        return line.split(":", 1)[1]
    return line


def canonical_rule(rule: str, dtstart: Optional[str]) -> str:
    """
    Builds the string for the rule factory.  A ``DTSTART=`` clause
    inside the rule itself takes precedence over the given dtstart.
    """
    embedded = DTSTART_CLAUSE.search(rule)
    if embedded:
        dtstart = embedded.group(1)
        rule = DTSTART_CLAUSE.sub("", rule).lstrip(";")
    if dtstart:
        return f"DTSTART:{dtstart}\nRRULE:{rule}"
    return f"RRULE:{rule}"


def localize_until(rule: str, tzid: Optional[str] = None) -> str:
    """
    RFC5545 wants UNTIL in UTC when DTSTART has a TZID, but a UTC UNTIL
    can't be combined with the naive DTSTART we hand to the evaluator.
    UNTIL is moved to the wall clock of the TZID zone.  Floating starts
    and zones we don't know keep the UNTIL digits, minus the ``Z``.
    """
    zone = None
    if tzid:
        try:
            zone = ZoneInfo(str(tzid))
        except (ZoneInfoNotFoundError, ValueError):
            log.debug(f"unknown TZID {tzid!r}, UNTIL taken as wall clock time")

    def local(match):
        if zone is None:
            return match.group(1) + match.group(2)
        try:
            until = datetime.datetime.strptime(match.group(2), COMPACT)
        except ValueError:
            return match.group(0)
        until = until.replace(tzinfo=datetime.timezone.utc).astimezone(zone)
        return match.group(1) + until.strftime(COMPACT)

    return UNTIL_UTC.sub(local, rule)


def dateutil_rule(text: str) -> Any:
    return rrulestr(text)


class RecurrenceNormalizer:
    """Compiles the RRULE of VEVENT, VTODO and VJOURNAL components"""

    def __init__(self, rule_factory: Optional[RuleFactory] = None) -> None:
        self.rule_factory = rule_factory or dateutil_rule

    def __call__(self, component: CalendarComponent) -> CalendarComponent:
        if component.type not in RECURRING_TYPES:
            return component
        rule = component.get("rrule")
        if not isinstance(rule, RawRule):
            return component

        text = strip_rule_name(rule.line)
        dtstart = None
        if not DTSTART_CLAUSE.search(text):
            dtstart = self._dtstart(component)
        if dtstart and not dtstart.endswith("Z"):
            start = component.get("start")
            if isinstance(start, Parameterized):
                start = start.val
            text = localize_until(text, getattr(start, "tz", None))
        canonical = canonical_rule(text, dtstart)

        try:
            compiled = self.rule_factory(canonical)
        except (ValueError, TypeError, KeyError):
            log.error(
                f"could not evaluate recurrence rule {canonical!r} of {component.uid}",
                exc_info=True,
            )
            return component
        component["rrule"] = CompiledRule(canonical, compiled)
        return component

    def _dtstart(self, component: CalendarComponent) -> Optional[str]:
        start = component.get("start")
        ## DTSTART:20200101 without VALUE=DATE is kept as text by the
        ## date decoder
        if isinstance(start, str):
            as_date = DateValue.from_date_string(start)
            if as_date is not None:
                component["start"] = start = as_date
        try:
            return format_dtstart(start)
        except RuleFormatError as e:
            log.error(
                f"could not format the start of {component.uid} for its recurrence rule: {e}"
            )
            return None
