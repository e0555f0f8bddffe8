#!/usr/bin/env python
"""
Building the component tree from BEGIN/END markers.

Frames are kept in a list and point to their parent by index.  Frame 0
is the root and collects whatever appears outside BEGIN/END blocks.
Each BEGIN opens a frame on top of the current one; each END closes
the current frame, folds the finished component into its parent (see
``icsparser.merge``) and makes the parent current again.  END:VCALENDAR
is special: the calendar frame is turned into the document and becomes
the one and only frame.

Nesting is not validated.  An END does not have to name the component
it closes.
"""
from dataclasses import dataclass
from typing import List
from typing import Optional
from typing import Union

from icsparser.component import CalendarComponent
from icsparser.component import CalendarDocument
from icsparser.contentline import ContentLine
from icsparser.decoders import decode
from icsparser.lib.error import log
from icsparser.lib.error import weirdness
from icsparser.merge import KeyGenerator
from icsparser.merge import merge_component
from icsparser.recurrence import RecurrenceNormalizer

CALENDAR = "VCALENDAR"


@dataclass
class Frame:
    component: Union[CalendarComponent, CalendarDocument]
    parent: Optional[int] = None


class ComponentStack:
    def __init__(self, normalizer: Optional[RecurrenceNormalizer] = None) -> None:
        self.normalizer = normalizer or RecurrenceNormalizer()
        self.keygen = KeyGenerator()
        self.frames: List[Frame] = [Frame(CalendarComponent())]
        self.current = 0

    @property
    def component(self) -> CalendarComponent:
        return self.frames[self.current].component

    @property
    def depth(self) -> int:
        """Number of open BEGIN blocks"""
        depth = 0
        frame = self.frames[self.current]
        while frame.parent is not None:
            depth += 1
            frame = self.frames[frame.parent]
        return depth

    def feed(self, line: ContentLine) -> None:
        key = line.key
        if key == "BEGIN":
            self.begin(line.value.strip().upper(), line)
        elif key == "END":
            self.end(line.value.strip().upper())
        else:
            frame = self.frames[self.current]
            frame.component = decode(
                line, frame.component, nested=frame.parent is not None
            )

    def begin(self, type: str, line: Optional[ContentLine] = None) -> None:
        params = line.params if line is not None else None
        self.frames.append(Frame(CalendarComponent(type, params), self.current))
        self.current = len(self.frames) - 1

    def end(self, type: str) -> None:
        closing = self.frames[self.current]
        if type == CALENDAR:
            self.frames = [Frame(CalendarDocument.from_component(closing.component))]
            self.current = 0
            return

        if closing.parent is None:
            weirdness(f"END:{type} without a matching BEGIN, ignored")
            return

        component = self.normalizer(closing.component)
        parent = self.frames[closing.parent]
        parent.component = merge_component(parent.component, component, self.keygen)
        del self.frames[self.current]
        self.current = closing.parent

    def finish(self) -> CalendarDocument:
        """
        The document.  Normally END:VCALENDAR has produced it already;
        if not, whatever the current frame holds is returned instead.
        """
        if self.depth:
            log.warning(
                f"input ended with {self.depth} unclosed component(s), "
                f"innermost {self.component.type}"
            )
        component = self.component
        if isinstance(component, CalendarDocument):
            return component
        return CalendarDocument.from_component(component)
