"""
Argot faults (errors) and rendering.

Scope
- SpecificationError: raised while declaring descriptors or building a
  specification. It signals a bug in the calling program, never bad user input.
- ConversionError: raised by converters when a raw string cannot become a
  typed value. The parser catches it and rewraps it as a usage fault.
- UsageError and subclasses: user-facing parse failures. They carry a message
  plus an immutable options mapping (code, title, hint, usage, ...) and know how
  to render themselves with rich.
- FaultCode: canonical, stable numeric identifiers for every usage fault.
- trigger(): central entry point to surface a usage fault (raise, or print and
  exit when running in shell mode).

Flow
- The parser never raises usage faults; it returns them. The caller decides
  whether to raise them, print them, or hand them to trigger().
- The parser attaches the fully rendered usage text under the "usage" option
  before returning a fault, so str(fault.usage) is ready to print.
"""
import copy
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
    canonical fault codes for usage errors (stable identifiers).

    grouping
    - options (1111x): UNKNOWN_OPTION, OPTION_VALUE_REQUIRED
    - values (1112x): INVALID_VALUE
    - parameters (1113x): MISSING_PARAMETERS, TOO_MANY_PARAMETERS
    - delegated (1114x): DELEGATED_ERROR (raised by a custom converter)
    """
    UNKNOWN_OPTION              = 11111
    OPTION_VALUE_REQUIRED       = 11112
    INVALID_VALUE               = 11121
    MISSING_PARAMETERS          = 11131
    TOO_MANY_PARAMETERS         = 11132
    DELEGATED_ERROR             = 11141

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class SpecificationError(Exception):
    """
    Raised when an argument specification is malformed.

    This is a programmer error (duplicate names, empty names, names starting
    with '-', bad parameter ordering, overlapping flag names, ...). Well-formed
    programs never catch it.
    """

    def __init__(self, message, /):
        super().__init__(message)
        self.message = message


class ConversionError(Exception):
    """
    Raised by a converter that cannot turn a raw string into a value.
    """

    def __init__(self, message, /):
        super().__init__(message)
        self.message = message


class UsageError(Exception):
    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", FaultCode.DELEGATED_ERROR)

    @property
    def usage(self):
        """
        The rendered usage text (message included), or the bare message when
        the fault was never attached to a parser.
        """
        return self.options.get("usage", self.message)

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "usage": "#9CA3AF",  # muted usage block
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(self.options.get("name", getattr(main, "__prog__", "argot")), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), styler("code")),
            " | ",
            text(self.options.get("title", "usage error").title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))
        # The usage text already opens with the message; show only what follows it.
        if (usage := self.options.get("usage")) and usage != self.message:
            renders.append(Text(""))
            renders.append(text(usage.removeprefix(self.message + "\n"), styler("usage")))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionError(UsageError): ...
class MissingValueError(UsageError): ...
class InvalidValueError(UsageError): ...
class MissingParametersError(UsageError): ...
class TooManyParametersError(UsageError): ...


def trigger(fault, /, **options):
    """
    surface a usage fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see UsageError).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode the fault is printed with rich and the process exits with
      status 1; otherwise the fault is raised.

    typical options
    - name, shell, fancy, colorful, title, code, hint, usage.
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
    optional documentation lookup for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return coalesce(getattr(__import__("__main__"), "__docs__", {}).get(code, Unset))


__all__ = (
    "FaultCode",
    "SpecificationError",
    "ConversionError",
    "UsageError",
    "UnknownOptionError",
    "MissingValueError",
    "InvalidValueError",
    "MissingParametersError",
    "TooManyParametersError",
    "trigger",
    "getdoc",
)
