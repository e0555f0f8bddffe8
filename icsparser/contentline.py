#!/usr/bin/env python
"""
Splitting one logical line into property name, parameters and value.

  name *(";" param) ":" value

Real-world data is sloppy, so this is tolerant rather than strict: a
line without a colon is not an error, it is just not a content line.
Colons and semicolons inside double-quoted parameter values
(``ALTREP="cid:..."``, ``CN="Doe, John; Jr."``) do not split.
"""
import re
from dataclasses import dataclass
from typing import Any
from typing import List
from typing import Optional
from typing import Tuple

from icsparser.lib.error import log
from icsparser.values import ParameterSet

NUMBER = re.compile(r"^[+-]?\d+(\.\d+)?$")
UTF8_ONLY = "CHARSET=UTF-8"


def parse_value(val: str) -> Any:
    """Coerces a parameter value: booleans, numbers, else the text"""
    if val == "TRUE":
        return True
    if val == "FALSE":
        return False
    if NUMBER.match(val):
        return float(val) if "." in val else int(val)
    if len(val) > 1 and val.startswith('"') and val.endswith('"'):
        return val[1:-1]
    return val


def parse_params(params: List[str]) -> ParameterSet:
    """
    ``KEY=VALUE`` strings to a ParameterSet.  Entries without ``=``
    are dropped.  A lone ``CHARSET=utf-8`` counts as no parameters at
    all, so that such text properties are stored as plain strings.
    """
    if len(params) == 1 and params[0].upper() == UTF8_ONLY:
        return ParameterSet()
    ret = ParameterSet()
    for param in params:
        if "=" not in param:
            continue
        key, value = param.split("=", 1)
        ret.append((key, parse_value(value)))
    return ret


def _split_unquoted(text: str, sep: str, maxsplit: int = -1) -> List[str]:
    """str.split, except separators inside double quotes are ignored"""
    ret = []
    start = 0
    quoted = False
    for i, char in enumerate(text):
        if char == '"':
            quoted = not quoted
        elif char == sep and not quoted:
            ret.append(text[start:i])
            start = i + 1
            if maxsplit > 0 and len(ret) == maxsplit:
                break
    ret.append(text[start:])
    return ret


def split_line(line: str) -> Optional[Tuple[str, List[str], str]]:
    """
    Returns ``(name, raw_params, value)`` or None if the line has no
    name/value separator.  Further colons are part of the value.
    """
    parts = _split_unquoted(line, ":", maxsplit=1)
    if len(parts) < 2:
        ## unbalanced quote, fall back to the first colon
        parts = line.split(":", 1)
        if len(parts) < 2:
            return None
    head, value = parts
    segments = _split_unquoted(head, ";")
    return segments[0], segments[1:], value


@dataclass
class ContentLine:
    name: str
    params: ParameterSet
    value: str
    line: str

    @property
    def key(self) -> str:
        """The name as used for looking up a decoder"""
        return self.name.upper()

    @classmethod
    def parse(cls, line: str) -> Optional["ContentLine"]:
        split = split_line(line)
        if split is None:
            if line.strip():
                log.debug(f"skipping line without a value: {line!r}")
            return None
        name, raw_params, value = split
        return cls(name.strip(), parse_params(raw_params), value, line)
