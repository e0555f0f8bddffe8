#!/usr/bin/env python
"""
Splitting of raw calendar text into logical content lines.

RFC5545 section 3.1 allows a long content line to be "folded" into
several physical lines, every continuation line starting with a single
space or horizontal tab.  ``unfold_lines`` undoes that.  Nothing else
is interpreted here, escapes included.
"""
import re
from typing import Iterator
from typing import Union

from icsparser.lib.python_utilities import to_normal_str

NEWLINE = re.compile(r"\r?\n")
FOLD_CHARS = (" ", "\t")


def split_lines(text: Union[str, bytes]) -> list:
    """Physical lines of the text, CRLF and LF both accepted"""
    text = to_normal_str(text)
    if not text:
        return []
    return NEWLINE.split(text)


def unfold_lines(text: Union[str, bytes]) -> Iterator[str]:
    """
    Yields the logical lines of the text.  A physical line starting
    with a space or tab is appended to the current logical line with
    that one leading character removed.
    """
    current = None
    for line in split_lines(text):
        if current is not None and line.startswith(FOLD_CHARS):
            current += line[1:]
            continue
        if current is not None:
            yield current
        current = line
    if current is not None:
        yield current
