#!/usr/bin/env python
import logging
from collections import defaultdict
from typing import Dict
from typing import Optional
from typing import Type

from icsparser import __version__

try:
    import os

    ## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
    debugmode = os.environ["PYTHON_ICSPARSER_DEBUGMODE"]
except KeyError:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("icsparser")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def errmsg(r) -> str:
    """Utility for formatting a failed HTTP response to an error string"""
    return "%s %s\n\n%s" % (r.status_code, r.reason, r.text)


def weirdness(*reasons) -> None:
    reason = " : ".join([str(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


class ICSError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class FetchError(ICSError):
    """
    Retrieving calendar data failed, either because the server
    answered with a non-successful status code or because the
    transport itself failed.  No parsing is attempted.
    """

    status: Optional[int] = None

    def __init__(
        self,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(url, reason)
        if status is not None:
            self.status = status


class AuthorizationError(FetchError):
    """
    The server answered 401 or 403.  The url property will contain
    the url in question, the reason property will contain the excuse
    the server sent.
    """

    pass


class NotFoundError(FetchError):
    pass


class RuleFormatError(ICSError):
    """
    The start of a recurring component could not be turned into a
    DTSTART value for its recurrence rule.  Never escapes the parser.
    """

    pass


exception_by_status: Dict[int, Type[FetchError]] = defaultdict(lambda: FetchError)
for status, exception in (
    (401, AuthorizationError),
    (403, AuthorizationError),
    (404, NotFoundError),
    (410, NotFoundError),
):
    exception_by_status[status] = exception
