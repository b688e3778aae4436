"""
Arbor shell driver: read a line, resolve it, run it, print the result, repeat.

What this module provides
- Shell: owns the user command tree, the builtin tree, the history and the
  termination flag; eval() runs one line, run() loops until exit or end of input.

Dispatch order
- The user tree is tried first. Only when its very first token matches nothing
  is the builtin tree tried; a failure deeper in the user tree is reported as is.
- When both trees reject the first token, the report lists the names of both.
- "<path> help" on a matched group prints that group's listing.

Faults
- eval() raises UnresolvedCommandError (bad line) and HandlerError (handler
  failure, including wrapped unexpected exceptions); run() prints both and continues.
- Registration faults (DuplicateCommandError, ReservedNameError) are raised to
  the caller of register()/command()/group().
"""
import logging
import os
import sys

from rich.console import Console

from . import builtin
from .commands import Command, Parent
from .completion import complete
from .editor import LineEditor
from .faults import CommandException, HandlerError, unresolved, trigger
from .resolver import Dispatch, ResolveError, resolve
from .tokens import tokenize
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


class Shell:
    """
    An interactive, tree-structured command shell.

    Parameters
    - prompt: text shown before each line (default "| ").
    - state: object handed to every user handler as its first argument.
    - name: program name used in fault headers (defaults to the script name).
    - colorful / fancy: styled output and panel chrome for faults.
    - console: rich Console used for output and faults (defaults to stdout/stderr consoles).
    """

    def __init__(self, prompt="| ", state=None, /, *, name=Unset, colorful=False, fancy=False, console=Unset):
        if not isinstance(prompt, str):
            raise TypeError("shell prompt must be a string")
        self._prompt = prompt
        self._state = state
        self._name = coalesce(name, os.path.basename(sys.argv[0]) or "arbor")
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._stdout = coalesce(console, Console())
        self._stderr = coalesce(console, Console(stderr=True))

        self._builtins = builtin.tree()
        self._commands = Parent("commands")
        self._commands._reserved = frozenset(self._builtins._children)
        self._history = []
        self._terminated = False

    def __repr__(self):
        return f"shell(prompt={self._prompt!r}, commands={tuple(self._commands._children)!r})"

    @property
    def prompt(self):
        return self._prompt

    @property
    def state(self):
        return self._state

    @property
    def commands(self):
        """the root of the user tree (a Parent named "commands")."""
        return self._commands

    @property
    def builtins(self):
        """the root of the builtin tree (a Parent named "builtins")."""
        return self._builtins

    @property
    def history(self):
        """lines evaluated so far, oldest first."""
        return tuple(self._history)

    @property
    def terminated(self):
        return self._terminated

    def terminate(self):
        """ask run() to stop after the current line."""
        self._terminated = True

    def register(self, *commands):
        """
        Attach top-level commands (Leaf or Parent) in order; returns the last one.

        Raises
        - ReservedNameError: a name collides with a builtin.
        - DuplicateCommandError: a name is already registered.
        """
        if not commands:
            raise TypeError("register() takes at least one command")
        for command in commands:
            if not isinstance(command, Command):
                raise TypeError("register() arguments must be commands")
            self._commands.attach(command)
            logger.debug("registered %r", command.name)
        return commands[-1]

    def command(self, source=Unset, /, *args, **kwargs):
        """create a top-level Leaf; usable as @shell.command or @shell.command(name=...)."""
        return self._commands.command(source, *args, **kwargs)

    def group(self, name, /, *children, help=Unset):
        """create a top-level Parent and return it."""
        return self._commands.group(name, *children, help=help)

    def _route(self, tokens):
        """
        Resolve against the user tree, falling back to builtins at depth 0.

        Returns (outcome, state): the state the dispatched handler receives.
        """
        outcome = resolve(self._commands, tokens)
        if isinstance(outcome, Dispatch):
            return outcome, self._state
        if outcome.path or outcome.exhausted:
            return outcome, None

        fallback = resolve(self._builtins, tokens)
        if isinstance(fallback, Dispatch):
            return fallback, self
        return outcome._replace(expected=outcome.expected + fallback.expected), None

    def eval(self, line, /):
        """
        Process one line.

        Returns
        - the handler's output (a string), or None for a blank line or a handler
          that printed nothing.

        Raises
        - UnresolvedCommandError: the line does not reach a command.
        - HandlerError: the handler failed; other exceptions are wrapped into it.

        Every non-blank line is appended to the history once processed, whatever the outcome.
        """
        if not isinstance(line, str):
            raise TypeError("eval() argument must be a string")
        if not (tokens := tokenize(line)):
            return None

        try:
            outcome, state = self._route(tokens)
            if isinstance(outcome, ResolveError):
                if outcome.path and outcome.token.text == "help" and outcome.token == tokens[-1]:
                    return builtin.listing(builtin.descend(self._commands, outcome.path), outcome.path)
                logger.debug("unresolved line %r: %s", line, outcome.code.name)
                raise unresolved(line, outcome)

            logger.debug("dispatching %r with %d argument(s)", outcome.leaf.name, len(outcome.args))
            try:
                output = outcome.leaf(state, outcome.args)
            except CommandException:
                raise
            except Exception as error:
                logger.debug("handler %r raised", outcome.leaf.name, exc_info=True)
                raise HandlerError(f"{outcome.leaf.name!r} failed: {error}") from error
            return None if output is None else str(output)
        finally:
            self._history.append(line)

    def complete(self, line, cursor=Unset, /):
        """
        Candidates for line with the cursor at cursor (default: end of line).

        Builtin names join the user ones at the top level. After "help" the
        rest of the line completes as a path, like the top level does.
        """
        candidates = complete(self._commands, line, cursor) + complete(self._builtins, line, cursor)
        before = line[:coalesce(cursor, len(line))].lstrip()
        if before.split()[:1] == ["help"] and before != "help":
            path = before[len("help"):]
            candidates += complete(self._commands, path) + complete(self._builtins, path)
        return tuple(dict.fromkeys(candidates))

    def trigger(self, fault, /):
        """print a fault with this shell's rendering options."""
        trigger(fault, prog=self._name, colorful=self._colorful, fancy=self._fancy, console=self._stderr)

    def run(self, reader=Unset, /):
        """
        Loop until the exit builtin runs or the reader signals end of input.

        Parameters
        - reader: callable taking the prompt and returning a line, raising EOFError
          (or KeyboardInterrupt) at end of input. Defaults to a prompt_toolkit
          session with completion (see arbor.editor.LineEditor).
        """
        if reader is Unset:
            reader = LineEditor(self).readline

        self._terminated = False
        while not self._terminated:
            try:
                line = reader(self._prompt)
            except (EOFError, KeyboardInterrupt):
                logger.debug("end of input")
                break

            try:
                output = self.eval(line)
            except CommandException as fault:
                self.trigger(fault)
                continue
            if output:
                self._stdout.print(output, markup=False, highlight=False)


__all__ = (
    "Shell",
)
