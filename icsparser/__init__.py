#!/usr/bin/env python
import logging

__version__ = "0.9.0"

from .component import CalendarComponent
from .component import CalendarDocument
from .parser import parse_file
from .parser import parse_ics
from .client import ICSClient
from .client import from_url
from .client import get_client

# Silence notification of no default logging handler
log = logging.getLogger("icsparser")
log.addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "CalendarComponent",
    "CalendarDocument",
    "ICSClient",
    "from_url",
    "get_client",
    "parse_file",
    "parse_ics",
]
