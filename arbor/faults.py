"""
Arbor faults and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues.
  Codes are grouped by domain to keep copy consistent and make logs/searches predictable.
- CommandException: base type that carries message + options and knows how to
  render itself in a friendly, lowercased, and actionable way.
- Registration faults (raised while building the tree, fatal to setup), resolution
  faults (one per bad line, recoverable) and handler faults (recoverable).
- trigger(): central entry point to surface any fault on a console.

UX goals
- Position-first messages: resolution faults name the ordinal position of the
  offending token (“at second position”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).

Integration
- The shell raises resolution/handler faults from eval() and renders them via
  trigger(fault, **ctx) inside its loop; registration faults propagate to the host.
"""
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .diagnostics import diagnose
from .utils import Unset, palette, ordinal

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the shell (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, UNKNOWN_SUBCOMMAND, INCOMPLETE_COMMAND
    - delegated errors (11131)
      • HANDLER_ERROR
    - registration (1310x)
      • DUPLICATED_COMMAND, RESERVED_NAME

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND             = 11101
    UNKNOWN_SUBCOMMAND          = 11102
    INCOMPLETE_COMMAND          = 11103

    # --- delegated errors (11xxx) ---
    HANDLER_ERROR               = 11131

    # --- registration errors (13xxx) ---
    DUPLICATED_COMMAND          = 13101
    RESERVED_NAME               = 13102

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    Base fault: a message plus rendering options.

    Options
    - title, code, hint: the header title, FaultCode and the arrow hint (hint may be None).
    - prog: program name shown in the header (overridden by __prog__ in __main__).
    - colorful, fancy: styled output and panel chrome.
    - console: where __trigger__ prints (defaults to the module stderr console).
    Subclasses provide defaults for title/code/hint through __defaults__.
    """
    __defaults__ = {
        "title": "command error",
        "code": FaultCode.HANDLER_ERROR,
        "hint": None,
    }

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*((message,) if message is not Unset else ()))
        self.message = message
        self.options = MappingProxyType(type(self).__defaults__ | options)

    def _text(self, fragment, style=""):
        if not fragment:
            return Text("")
        if not self.options.get("colorful", False):
            return Text(fragment.plain if isinstance(fragment, Text) else str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), palette()[style])

    def _body(self):
        body = [self._text(self.message, "error-message")]
        if self.options["hint"]:
            body.append(Text.assemble(self._text(" → ", "hint-arrow"), self._text(self.options["hint"], "hint")))
        return body

    def __rich__(self):
        prog = getattr(__import__("__main__"), "__prog__", self.options.get("prog", "arbor"))
        header = Text.assemble(
            "[ ",
            self._text(prog, "prog-name"),
            " — ",
            self._text(self.options["code"].normalize(), "code"),
            " | ",
            self._text(self.options["title"].title(), "error-title"),
            " ]"
        )

        if self.options.get("fancy", False):
            return Panel(Group(*self._body()), title=header, title_align="left")

        return Group(header, *self._body())

    def __trigger__(self) -> None:
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replaced = type(self)(self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class RegistrationError(CommandException, ValueError):
    """raised while building a command tree; never recoverable at runtime."""
    __defaults__ = CommandException.__defaults__ | {
        "title": "invalid registration",
        "code": FaultCode.DUPLICATED_COMMAND,
    }


class DuplicateCommandError(RegistrationError):
    __defaults__ = RegistrationError.__defaults__ | {
        "title": "duplicated command",
        "code": FaultCode.DUPLICATED_COMMAND,
        "hint": "sibling commands must have distinct names",
    }


class ReservedNameError(RegistrationError):
    __defaults__ = RegistrationError.__defaults__ | {
        "title": "reserved name",
        "code": FaultCode.RESERVED_NAME,
        "hint": "top-level commands cannot reuse a builtin name",
    }


class UnresolvedCommandError(CommandException):
    """
    A line that did not resolve to a leaf.

    Options (in addition to the base ones)
    - line: the raw input line.
    - resolution: the ResolveError value describing the failure.

    Rendering embeds the full diagnostic (echo, caret, expectations and hints).
    """
    __defaults__ = CommandException.__defaults__ | {
        "title": "unresolved command",
        "code": FaultCode.UNKNOWN_COMMAND,
    }

    @property
    def line(self):
        return self.options["line"]

    @property
    def resolution(self):
        return self.options["resolution"]

    def _body(self):
        return [
            self._text(self.message, "error-message"),
            diagnose(self.line, self.resolution, colorful=self.options.get("colorful", False)),
        ]


class UnknownCommandError(UnresolvedCommandError):
    __defaults__ = UnresolvedCommandError.__defaults__ | {
        "title": "unknown command",
        "code": FaultCode.UNKNOWN_COMMAND,
    }


class UnknownSubcommandError(UnresolvedCommandError):
    __defaults__ = UnresolvedCommandError.__defaults__ | {
        "title": "unknown subcommand",
        "code": FaultCode.UNKNOWN_SUBCOMMAND,
    }


class IncompleteCommandError(UnresolvedCommandError):
    __defaults__ = UnresolvedCommandError.__defaults__ | {
        "title": "incomplete command",
        "code": FaultCode.INCOMPLETE_COMMAND,
    }


class HandlerError(CommandException):
    """
    raised by a command handler to report a failure; the shell prints it and keeps running.

    any other exception escaping a handler is wrapped into a HandlerError by the shell.
    """
    __defaults__ = CommandException.__defaults__ | {
        "title": "command failed",
        "code": FaultCode.HANDLER_ERROR,
    }


def unresolved(line, resolution, /, **options):
    """
    build the resolution fault matching a ResolveError value.

    the message is position-first: it names the offending token and its ordinal
    position in the line, or the command left without a subcommand.
    """
    position = ordinal(len(resolution.path) + 1)
    match resolution.code:
        case FaultCode.INCOMPLETE_COMMAND:
            cls = IncompleteCommandError
            message = f"at {position} position: {' '.join(resolution.path)!r} needs a subcommand"
        case FaultCode.UNKNOWN_SUBCOMMAND:
            cls = UnknownSubcommandError
            message = f"at {position} position: unknown subcommand {resolution.token.text!r}"
        case _:
            cls = UnknownCommandError
            message = f"at {position} position: unknown command {resolution.token.text!r}"
    return cls(message, line=line, resolution=resolution, **options)


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via __replace__(**options) before triggering.

    typical options
    - prog, fancy, colorful, console.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "CommandException",
    "RegistrationError",
    "DuplicateCommandError",
    "ReservedNameError",
    "UnresolvedCommandError",
    "UnknownCommandError",
    "UnknownSubcommandError",
    "IncompleteCommandError",
    "HandlerError",
    "FaultCode",
    "unresolved",
    "trigger",
)
