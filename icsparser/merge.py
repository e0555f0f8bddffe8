#!/usr/bin/env python
"""
Folding a finished component into its parent.

Several components may share one UID.  Without a RECURRENCE-ID the
later one is a new revision of the item and its fields win.  With a
RECURRENCE-ID it overrides a single occurrence of a recurring item and
ends up in ``recurrences`` of the stored record, keyed by the date of
the recurrence id.  Looking up ``recurrences`` while walking the dates
of a rule tells whether an occurrence should be taken from the
override instead of the base record.

Overrides sometimes come before the item carrying the RRULE.  The
override is then stored as the record itself (and in its own
``recurrences``), and when the base arrives it overwrites the fields
and the leftover recurrence id is removed.
"""
import uuid
from typing import Callable

from icsparser.component import CalendarComponent
from icsparser.lib.error import log


class KeyGenerator:
    """
    Keys for components without a UID.  Random UUIDs, so that a UID
    showing up later in the same document does not clash with one of
    them.  A key already used in the parent is skipped.
    """

    def __call__(self, parent: CalendarComponent) -> str:
        while True:
            key = str(uuid.uuid4())
            if key not in parent:
                return key


def add_recurrence(record: CalendarComponent, override: CalendarComponent) -> None:
    """Stores a shallow copy of the override in the record's recurrences"""
    key = override.recurrence_key
    if key is None:
        log.warning(
            f"RECURRENCE-ID {override.get('recurrenceid')!r} of {override.uid} "
            "is not a date, override not indexed"
        )
        return
    if record.recurrences is None:
        record.recurrences = {}
    record.recurrences[key] = override.copy()


def merge_component(
    parent: CalendarComponent,
    child: CalendarComponent,
    keygen: Callable[[CalendarComponent], str],
) -> CalendarComponent:
    """Stores the child in the parent and returns the parent"""
    uid = child.uid
    if uid is None:
        parent[keygen(parent)] = child
        return parent

    record = parent.get(uid)
    is_override = child.get("recurrenceid") is not None

    if not isinstance(record, CalendarComponent):
        if record is not None:
            log.debug(f"UID {uid} shadows a field of {parent.type}")
        parent[uid] = record = child
        if is_override:
            add_recurrence(record, child)
    elif is_override:
        add_recurrence(record, child)
    else:
        record.update(child)
        if child.recurrences:
            if record.recurrences is None:
                record.recurrences = {}
            record.recurrences.update(child.recurrences)

    if record.is_recurring and "recurrenceid" in record:
        del record["recurrenceid"]
    return parent
