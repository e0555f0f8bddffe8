#!/usr/bin/env python
"""
Entry points for turning iCalendar text into a ``CalendarDocument``.

The parser is tolerant: lines it cannot make sense of are skipped,
values it cannot decode are kept as text, and unknown properties are
stored under their lower-cased name.  Each call works on its own
frame stack, so parsing in several threads at once is fine.
"""
from typing import Optional
from typing import Union

from icsparser.assembler import ComponentStack
from icsparser.component import CalendarDocument
from icsparser.contentline import ContentLine
from icsparser.lexer import unfold_lines
from icsparser.lib.error import log
from icsparser.recurrence import RecurrenceNormalizer
from icsparser.recurrence import RuleFactory


def parse_ics(
    text: Union[str, bytes], rule_factory: Optional[RuleFactory] = None
) -> CalendarDocument:
    """
    Parses calendar data.

    Args:
      text: the calendar data, str or UTF-8 encoded bytes
      rule_factory: callable turning a canonical ``DTSTART:...\\nRRULE:...``
        string into an evaluable rule.  Defaults to dateutil's rrulestr.

    Returns:
      A CalendarDocument mapping UIDs (or generated keys for
      components without one) to CalendarComponents.
    """
    stack = ComponentStack(RecurrenceNormalizer(rule_factory))
    skipped = 0
    for logical_line in unfold_lines(text):
        line = ContentLine.parse(logical_line)
        if line is None:
            skipped += 1
            continue
        stack.feed(line)
    if skipped:
        log.debug(f"{skipped} line(s) without a name/value separator skipped")
    return stack.finish()


def parse_file(
    filename: str,
    encoding: str = "utf-8",
    rule_factory: Optional[RuleFactory] = None,
) -> CalendarDocument:
    """Reads the whole file and parses it"""
    with open(filename, "r", encoding=encoding, newline="") as f:
        return parse_ics(f.read(), rule_factory=rule_factory)
