"""
flagstaff faults (parse errors) and their rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing fault.
- SchemaException: base type carrying a message plus read-only options (code, title,
  hint, and context such as the option name or offending value). It knows how to
  render itself with rich and how to surface itself (raise, or print and exit).
- ParseExit: exception group bundling every fault collected by a deferred parse.
- trigger(): merge runtime options into a fault and surface it.
- getdoc(): optional description lookup for a code from the host application.

Surfacing
- Outside shell mode faults are raised, so library callers can catch them.
- In shell mode they are printed on stderr through rich and the process exits with 1.
  Only the outermost caller (Schema.invoke) turns shell mode on.

Host hooks (read from __main__)
- __prog__: program name shown in headers.
- __styles__: palette overrides.
- __codes__: FaultCode -> label remapping.
- __docs__: FaultCode -> documentation string.
"""
import copy
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - user input (2110x): TYPE_MISMATCH, MISSING_REQUIRED
    - schema authoring (2120x): UNSUPPORTED_TYPE
    """
    # --- user input ---
    TYPE_MISMATCH    = 21101
    MISSING_REQUIRED = 21102

    # --- schema authoring ---
    UNSUPPORTED_TYPE = 21201

    def normalize(self):
        """
        return the host label for this code, or the numeric value as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _program(options):
    main = __import__("__main__")
    try:
        return getattr(main, "__prog__", options["schema"].name)
    except KeyError:
        return getattr(main, "__prog__", os.path.basename(sys.argv[0] if sys.argv else "") or "flagstaff")


class SchemaException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(__import__("__main__"), "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            text(_program(self.options), "prog-name"),
            " — ",
            text(code.normalize() if code else "", "code"),
            " | ",
            text(self.options.get("title", type(self).__name__).title(), "error-title"),
            " ]"
        )
        message = text(coalesce(self.message, ""), "error-message")

        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class TypeMismatchError(SchemaException): ...
class MissingRequiredError(SchemaException): ...
class UnsupportedTypeError(SchemaException): ...


class ParseExit(ExceptionGroup[SchemaException]):
    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad input", tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__("bad input", tuple(exceptions))
        self.options = MappingProxyType(options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",
            "title": "bold #FF4DA6",
        } | getattr(__import__("__main__"), "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        header = Text.assemble(
            "[ ", text(_program(self.options), "prog-name"), " — ", text(self.message.title(), "title"), " ]"
        )
        # Children inherit the group's presentation but never panel themselves.
        renders = [copy.replace(exception, **{**self.options, "fancy": False}) for exception in self.exceptions]

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see SchemaException, ParseExit).
    - options are merged through copy.replace(fault, **options) before triggering.
    - shell=True prints through rich and exits; otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    documentation for a fault code from a __docs__ mapping in __main__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "SchemaException",
    "TypeMismatchError",
    "MissingRequiredError",
    "UnsupportedTypeError",
    "ParseExit",
    "FaultCode",
    "trigger",
    "getdoc",
)
