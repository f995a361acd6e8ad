"""
Argosy faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves with rich.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).

Severity
- Parse-time structural faults (unknown modifier) and explicit failures raised by
  provider logic are exceptions: fatal, exit status 1 in shell mode.
- Dispatch-time policy faults (no action, invalid action, missing arguments) are
  warnings: they are shown and the provider degrades to its help action.

Integration
- Providers call trigger(fault, **ctx) through Provider.trigger(), which merges
  their runtime options (console, shell, fancy, colorful).
- In non-shell mode, exceptions are raised and warnings go through warnings.warn;
  in shell mode, both are rendered via rich and exceptions end the process.
"""
import copy
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping
    - parsing errors (1111x): UNKNOWN_MODIFIER
    - delegated errors (1113x): COMMAND_FAILURE
    - dispatch warnings (1210x): NO_ACTION, INVALID_ACTION, MISSING_ARGUMENT
    """
    # --- parsing errors (11xxx) ---
    UNKNOWN_MODIFIER            = 11112

    # --- delegated errors (11xxx) ---
    COMMAND_FAILURE             = 11131

    # --- dispatch warnings (12xxx) ---
    NO_ACTION                   = 12101
    INVALID_ACTION              = 12102
    MISSING_ARGUMENT            = 12103

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette):
    main = __import__("__main__")
    options = fault.options
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if options.get("colorful", False) else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    message = text(fault.message, styler("message"))
    if "code" not in options:
        return message

    prog = text(getattr(main, "__prog__", options.get("prog", "")), styler("prog-name"))
    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(options["code"].normalize(), styler("code")),
        " | ",
        text(options.get("title", "").title(), styler("title")),
        " ]"
    )
    parts = [message]
    if options.get("hint"):
        parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(options["hint"], styler("hint"))))

    if options.get("fancy", False):
        return Panel(Group(*parts), title=header, title_align="left")
    return Group(header, *parts)


class CommandException(Exception):
    """
    base class for fatal faults.

    the message is the plain, user-facing sentence (e.g. 'Unknown modifier "--nope"');
    options carry rendering context (code, title, hint) and runtime flags merged in by
    trigger() (console, shell, fancy, colorful).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        self.options.get("console", console).print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownModifierError(CommandException): ...
class CommandFailure(CommandException): ...


class CommandWarning(ABC, Warning):
    """
    base class for recoverable faults: shown to the user, then execution continues.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class NoActionWarning(CommandWarning): ...
class InvalidActionWarning(CommandWarning): ...
class MissingArgumentWarning(CommandWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise, exceptions
      are raised and warnings are emitted through the warnings module.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "CommandException",
    "UnknownModifierError",
    "CommandFailure",
    "CommandWarning",
    "NoActionWarning",
    "InvalidActionWarning",
    "MissingArgumentWarning",
    "FaultCode",
    "trigger",
)
