"""
Helmsman faults (errors raised while configuring or dispatching) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault.
  Codes are grouped by domain (routing, flags, slots) so logs and docs stay searchable.
- CommandException: base type for user-input faults. Carries a message plus options
  and knows how to render itself with rich (header, one-sentence body, single hint).
- ArgumentError: aggregate of every binding fault of one call, with per-slot outcome.
- DispatchError: base type for configuration-time misuse (PathNotFoundError,
  IndexOutOfRangeError). These are plain exceptions raised to the configuring caller.
- trigger(): central entry point to surface a fault with runtime options merged in.
- getdoc(): optional description lookup for a code from the host application.

Integration
- The dispatcher catches user-input faults at the dispatch boundary and calls
  trigger(fault, **ctx); the fault prints itself on the console found in its options.
- Host applications may tune rendering through __main__: __prog__, __styles__, __codes__
  and __docs__.
"""
import copy
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
    canonical fault codes used across the dispatcher (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, HANDLER_MISSING
    - flags (1111x)
      • UNKNOWN_FLAG, MISSING_FLAG_VALUE
    - slots (1112x)
      • ARITY_MISMATCH, CONVERSION_FAILURE
    - aggregate (1114x)
      • INVALID_ARGUMENTS
    """
    # --- routing errors ---
    UNKNOWN_COMMAND             = 11101
    HANDLER_MISSING             = 11102

    # --- flag errors ---
    UNKNOWN_FLAG                = 11112
    MISSING_FLAG_VALUE          = 11117

    # --- slot errors ---
    ARITY_MISMATCH              = 11125
    CONVERSION_FAILURE          = 11126

    # --- aggregate ---
    INVALID_ARGUMENTS           = 11141

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _styling(options, defaults):
    """
    build the (styler, text) helpers shared by every renderer.

    styles are the renderer defaults overridden by __main__.__styles__; when the
    'colorful' option is off every fragment is emitted as plain text.
    """
    styles = defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))
    colorful = options.get("colorful", False)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        if not colorful:
            return Text(str(fragment))
        return Text(str(fragment), style)

    return styler, text


def _program(options):
    main = __import__("__main__")
    tool = options.get("tool")
    return getattr(main, "__prog__", getattr(tool, "name", None) or "helmsman")


class CommandException(Exception):
    """
    base for every user-input fault.

    options commonly carried
    - title, code, hint: header/footer copy.
    - tool: the dispatcher that surfaced the fault (program name).
    - console, colorful, fancy: rendering controls.
    - input, index, slot, suggestions, tokens: context for the message and for callbacks.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def hint(self):
        return self.options.get("hint")

    def __rich__(self):
        styler, text = _styling(self.options, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

        message = text(coalesce(self.message, ""), styler("error-message"))
        renders = [message]
        if self.hint:
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.hint, styler("hint"))))

        if self.options.get("nested"):
            return Group(*renders)

        parts = ["[ ", text(_program(self.options), styler("prog-name"))]
        if isinstance(self.code, FaultCode):
            parts += [" — ", text(self.code.normalize(), styler("code"))]
        if title := self.options.get("title"):
            parts += [" | ", text(title.title(), styler("error-title"))]
        header = Text.assemble(*parts, " ]")

        if self.options.get("fancy"):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownCommandError(CommandException): ...
class HandlerMissingError(CommandException): ...
class UnknownFlagError(CommandException): ...
class MissingFlagValueError(CommandException): ...
class ArityMismatchError(CommandException): ...
class ConversionError(CommandException): ...


class ArgumentError(CommandException):
    """
    every binding fault of one call, reported together.

    options
    - faults: tuple of the individual faults (flags, arity, conversions) in discovery order.
    - bindings: the per-slot SlotBinding tuple; each one tells whether its conversion succeeded.
    """

    @property
    def faults(self):
        return self.options.get("faults", ())

    @property
    def bindings(self):
        return self.options.get("bindings", ())

    @property
    def converted(self):
        """per-slot conversion outcome (True, False, or None when the slot never reached conversion)."""
        return tuple(binding.converted for binding in self.bindings)

    def __rich__(self):
        styler, text = _styling(self.options, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
        })

        parts = ["[ ", text(_program(self.options), styler("prog-name"))]
        if isinstance(self.code, FaultCode):
            parts += [" — ", text(self.code.normalize(), styler("code"))]
        parts += [" | ", text(self.options.get("title", "invalid arguments").title(), styler("title")), " ]"]
        header = Text.assemble(*parts)

        renders = [text(coalesce(self.message, ""), styler("error-message"))]
        for fault in self.faults:
            renders.append(copy.replace(
                fault,
                nested=True,
                colorful=self.options.get("colorful", False),
            ))

        if self.options.get("fancy"):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)


class DispatchError(Exception):
    """configuration-time misuse of the dispatcher (a setup bug, never user input)."""


class PathNotFoundError(DispatchError, LookupError):
    def __init__(self, path, /, segment=Unset):
        self.path = tuple(path)
        self.segment = segment
        if segment is Unset:
            super().__init__("path %r does not resolve to a command" % " ".join(self.path))
        else:
            super().__init__("path %r does not resolve to a command (no segment %r)" % (" ".join(self.path), segment))


class IndexOutOfRangeError(DispatchError, IndexError):
    def __init__(self, path, index, arity, /):
        self.path = tuple(path)
        self.index = index
        self.arity = arity
        super().__init__("slot index %d is out of range for %r (arity %d)" % (index, " ".join(self.path), arity))


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via copy.replace() before triggering.
    - rendering happens on options["console"] (or the module stderr console).
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
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "CommandException",
    "UnknownCommandError",
    "HandlerMissingError",
    "UnknownFlagError",
    "MissingFlagValueError",
    "ArityMismatchError",
    "ConversionError",
    "ArgumentError",
    "DispatchError",
    "PathNotFoundError",
    "IndexOutOfRangeError",
    "trigger",
    "getdoc",
)
