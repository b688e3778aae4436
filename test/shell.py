"""
Shell behavioral tests (dispatch order, builtins, history, faults, the loop).

Scope
- Validate user-first dispatch with builtin fallback at the top level only.
- Validate the builtins (help, helptree, history, exit) and the "<group> help" shortcut.
- Validate registration faults, handler faults and history recording.
- Validate run() with a scripted reader and a captured console.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Shell, HandlerError and the fault types).
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from arbor import Leaf, Shell
from arbor.faults import (
    DuplicateCommandError,
    HandlerError,
    IncompleteCommandError,
    ReservedNameError,
    UnknownCommandError,
    UnknownSubcommandError,
)


def scripted(*lines):
    """a reader returning the given lines, then signalling end of input."""
    queue = iter(lines)

    def reader(prompt):
        try:
            return next(queue)
        except StopIteration:
            raise EOFError from None

    return reader


def zoo(**options):
    shell = Shell("| ", {"visits": 0}, name="zoo", **options)

    @shell.command(help="a loyal friend")
    def dog(state, args):
        state["visits"] += 1
        return "woof"

    felid = shell.group("felid", help="cats and such")
    felid.command(lambda state, args: "roar", name="panther", help="a big cat")
    felinae = felid.group("felinae", help="the small cats")
    felinae.command(lambda state, args: "meow", name="domestic-cat")
    felinae.command(lambda state, args: "grr", name="dangerous-tiger")
    return shell


class TestShellEval(TestCase):
    """Behavioral tests for Shell.eval()."""

    def setUp(self):
        self.shell = zoo()

    def testLeafReceivesStateAndArgs(self):
        self.shell.command(lambda state, args: " ".join(map(str, args)), name="say")
        self.assertEqual(self.shell.eval("dog"), "woof")
        self.assertEqual(self.shell.state, {"visits": 1})
        self.assertEqual(self.shell.eval("  say  hello   there "), "hello there")

    def testBlankLineIsIgnored(self):
        self.assertIsNone(self.shell.eval("   "))
        self.assertEqual(self.shell.history, ())

    def testUnknownSubcommandRaises(self):
        with self.assertRaises(UnknownSubcommandError) as context:
            self.shell.eval("felid DNE")
        self.assertEqual(context.exception.resolution.expected, ("panther", "felinae"))
        self.assertEqual(context.exception.line, "felid DNE")

    def testUnknownCommandListsBuiltinsToo(self):
        with self.assertRaises(UnknownCommandError) as context:
            self.shell.eval("cat")
        self.assertEqual(
            context.exception.resolution.expected,
            ("dog", "felid", "help", "helptree", "history", "exit"),
        )

    def testGroupAloneIsIncomplete(self):
        with self.assertRaises(IncompleteCommandError) as context:
            self.shell.eval("felid felinae")
        self.assertEqual(context.exception.resolution.expected, ("domestic-cat", "dangerous-tiger"))

    def testNestedFailureIsNotRetriedAgainstBuiltins(self):
        with self.assertRaises(UnknownSubcommandError):
            self.shell.eval("felid exit")
        self.assertFalse(self.shell.terminated)

    def testHandlerErrorPropagates(self):
        def grumpy(state, args):
            raise HandlerError("not today")

        self.shell.register(Leaf(grumpy))
        with self.assertRaises(HandlerError) as context:
            self.shell.eval("grumpy")
        self.assertEqual(context.exception.message, "not today")

    def testUnexpectedExceptionIsWrapped(self):
        self.shell.command(lambda state, args: 1 / 0, name="divide")
        with self.assertRaises(HandlerError) as context:
            self.shell.eval("divide")
        self.assertIsInstance(context.exception.__cause__, ZeroDivisionError)

    def testNoneOutputBecomesNone(self):
        self.shell.command(lambda state, args: None, name="noop")
        self.assertIsNone(self.shell.eval("noop"))

    def testHistoryRecordsEveryProcessedLine(self):
        self.shell.eval("dog")
        with self.assertRaises(UnknownCommandError):
            self.shell.eval("  cat ")
        self.assertEqual(self.shell.eval("history"), "dog\n  cat ")
        self.assertEqual(self.shell.history, ("dog", "  cat ", "history"))

    def testExitTerminates(self):
        self.assertEqual(self.shell.eval("exit"), "bye")
        self.assertTrue(self.shell.terminated)


class TestShellRegistration(TestCase):
    """Registration faults surface to the host."""

    def testBuiltinNamesAreReserved(self):
        shell = Shell()
        with self.assertRaises(ReservedNameError):
            shell.command(lambda state, args: None, name="help")
        with self.assertRaises(ReservedNameError):
            shell.group("exit")

    def testBuiltinNamesAreFineDeeper(self):
        shell = Shell()
        tools = shell.group("tools")
        tools.command(lambda state, args: "custom", name="history")
        self.assertEqual(shell.eval("tools history"), "custom")

    def testDuplicateTopLevelRaises(self):
        shell = zoo()
        with self.assertRaises(DuplicateCommandError):
            shell.register(Leaf(lambda state, args: None, name="dog"))

    def testRegisterReturnsLastCommand(self):
        shell = Shell()
        one = Leaf(lambda state, args: "1", name="one")
        two = Leaf(lambda state, args: "2", name="two")
        self.assertIs(shell.register(one, two), two)
        self.assertEqual(shell.eval("two"), "2")
        with self.assertRaises(TypeError):
            shell.register("three")  # type: ignore[arg-type]


class TestBuiltins(TestCase):
    """Behavioral tests for help, helptree and the help shortcut."""

    def setUp(self):
        self.shell = zoo()

    def testHelpListsCommandsThenBuiltins(self):
        lines = self.shell.eval("help").splitlines()
        self.assertEqual(lines[:3], ["commands:", "    'dog' - a loyal friend", "    'felid' - cats and such"])
        self.assertEqual(lines[3], "builtins:")
        self.assertEqual([line.split()[0] for line in lines[4:]], ["'help'", "'helptree'", "'history'", "'exit'"])

    def testHelpWithGroupPath(self):
        expected = "\n".join((
            "subcommands of 'felid':",
            "    'panther' - a big cat",
            "    'felinae' - the small cats",
        ))
        self.assertEqual(self.shell.eval("help felid"), expected)
        self.assertEqual(self.shell.eval("felid help"), expected)

    def testHelpWithLeafPath(self):
        self.assertEqual(self.shell.eval("help felid panther"), "'felid panther' - a big cat")
        self.assertEqual(self.shell.eval("help felid felinae domestic-cat"), "'felid felinae domestic-cat' - no description")

    def testHelpForBuiltin(self):
        self.assertTrue(self.shell.eval("help exit").startswith("'exit' - "))

    def testHelpWithUnknownPathRaises(self):
        with self.assertRaises(HandlerError):
            self.shell.eval("help felid lion")

    def testHelpTree(self):
        self.assertEqual(self.shell.eval("helptree"), "\n".join((
            "commands",
            "├── dog",
            "└── felid",
            "    ├── panther",
            "    └── felinae",
            "        ├── domestic-cat",
            "        └── dangerous-tiger",
            "",
            "builtins",
            "├── help",
            "├── helptree",
            "├── history",
            "└── exit",
        )))

    def testHelptreeRejectsArguments(self):
        with self.assertRaises(HandlerError) as context:
            self.shell.eval("helptree felid")
        self.assertEqual(context.exception.message, "'helptree' takes no arguments")

    def testHistoryRejectsArguments(self):
        with self.assertRaises(HandlerError):
            self.shell.eval("history 5")

    def testExitRejectsArguments(self):
        with self.assertRaises(HandlerError) as context:
            self.shell.eval("exit now")
        self.assertEqual(context.exception.options["hint"], "run 'exit' on its own")
        self.assertFalse(self.shell.terminated)


class TestShellRun(TestCase):
    """Behavioral tests for the read-eval-print loop."""

    def setUp(self):
        self.output = io.StringIO()
        self.shell = zoo(console=Console(file=self.output, width=120, color_system=None))

    def testLoopStopsAtExit(self):
        self.shell.run(scripted("dog", "felid DNE", "exit", "dog"))
        text = self.output.getvalue()
        self.assertEqual(text.count("woof"), 1)
        self.assertIn("failed to parse fully:", text)
        self.assertIn("[ zoo — 11102 | Unknown Subcommand ]", text)
        self.assertTrue(text.rstrip().endswith("bye"))
        self.assertEqual(self.shell.history, ("dog", "felid DNE", "exit"))

    def testLoopStopsAtEndOfInput(self):
        self.shell.run(scripted("dog", "", "dog"))
        self.assertEqual(self.output.getvalue().count("woof"), 2)
        self.assertEqual(self.shell.state, {"visits": 2})
        self.assertFalse(self.shell.terminated)

    def testHandlerFaultDoesNotStopTheLoop(self):
        self.shell.command(lambda state, args: 1 / 0, name="divide")
        self.shell.run(scripted("divide", "dog"))
        text = self.output.getvalue()
        self.assertIn("[ zoo — 11131 | Command Failed ]", text)
        self.assertIn("woof", text)

    def testKeyboardInterruptEndsTheLoop(self):
        def reader(prompt):
            raise KeyboardInterrupt

        self.shell.run(reader)
        self.assertEqual(self.output.getvalue(), "")

    def testFancyFaultsUsePanels(self):
        output = io.StringIO()
        shell = zoo(console=Console(file=output, width=120, color_system=None), fancy=True)
        shell.run(scripted("cat"))
        self.assertIn("╭", output.getvalue())
        self.assertIn("Unknown Command", output.getvalue())


if __name__ == "__main__":
    unittest.main()
