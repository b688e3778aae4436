"""
Commands module behavioral tests (tree building, names, ownership, traversal).

Scope
- Validate leaf construction from callbacks (names, help, signatures).
- Validate duplicate, reserved and re-attachment faults.
- Validate registration order and depth-first traversal.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Leaf, Parent, command, echo).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from arbor import Leaf, Parent, command, echo, tokenize
from arbor.faults import DuplicateCommandError, HandlerError, RegistrationError


class TestLeaf(TestCase):
    """Behavioral tests for Leaf construction."""

    def testNameAndHelpComeFromCallback(self):
        @command
        def domestic_cat(state, args):
            """a small cat

            more details that listings never show
            """
            return "meow"

        self.assertIsInstance(domestic_cat, Leaf)
        self.assertEqual(domestic_cat.name, "domestic-cat")
        self.assertEqual(domestic_cat.help, "a small cat")
        self.assertEqual(domestic_cat(None, ()), "meow")

    def testExplicitNameAndHelpWin(self):
        @command(name="dog", help="a loyal friend")
        def anything(state, args):
            pass

        self.assertEqual((anything.name, anything.help), ("dog", "a loyal friend"))

    def testMissingHelpIsNone(self):
        leaf = Leaf(lambda state, args: None, name="quiet")
        self.assertIsNone(leaf.help)

    def testInvalidNamesRaise(self):
        with self.assertRaises(ValueError):
            Leaf(lambda state, args: None, name="two words")
        with self.assertRaises(ValueError):
            Parent("")
        with self.assertRaises(TypeError):
            Parent(7)  # type: ignore[arg-type]

    def testLambdaWithoutNameRaises(self):
        with self.assertRaises(ValueError):
            Leaf(lambda state, args: None)
        with self.assertRaises(ValueError):
            command(lambda state, args: None)

    def testCallbackMustAcceptStateAndArgs(self):
        with self.assertRaises(TypeError):
            Leaf(lambda: None, name="nullary")
        with self.assertRaises(TypeError):
            command(42)  # type: ignore[arg-type]

    def testEchoHandler(self):
        self.assertEqual(echo(None, tokenize("hello  world")), "ECHO: hello world")
        with self.assertRaises(HandlerError):
            echo(None, ())


class TestParent(TestCase):
    """Behavioral tests for Parent composition."""

    def testChildrenKeepRegistrationOrder(self):
        felid = Parent("felid", help="cats and such")
        felid.command(lambda state, args: "roar", name="panther")
        felinae = felid.group("felinae")
        self.assertEqual(list(felid.children), ["panther", "felinae"])
        self.assertIs(felid.children["felinae"], felinae)
        self.assertIn("panther", felid)
        self.assertEqual(len(felid), 2)

    def testDuplicateSiblingRaises(self):
        felid = Parent("felid")
        felid.command(lambda state, args: None, name="panther")
        with self.assertRaises(DuplicateCommandError):
            felid.command(lambda state, args: None, name="panther")
        # also a plain ValueError for callers that do not know the fault types
        with self.assertRaises(ValueError):
            felid.group("panther")

    def testSameNameUnderDifferentParentsIsAllowed(self):
        one, two = Parent("one"), Parent("two")
        one.command(lambda state, args: None, name="run")
        two.command(lambda state, args: None, name="run")
        self.assertIn("run", one)
        self.assertIn("run", two)

    def testNodeCannotHaveTwoParents(self):
        leaf = Leaf(lambda state, args: None, name="shared")
        Parent("first", leaf)
        with self.assertRaises(ValueError) as context:
            Parent("second", leaf)
        self.assertNotIsInstance(context.exception, RegistrationError)

    def testNodeCannotBeItsOwnDescendant(self):
        outer = Parent("outer")
        inner = outer.group("inner")
        with self.assertRaises(ValueError):
            outer.attach(outer)
        wrapper = inner.attach(Parent("wrapper"))
        with self.assertRaises(ValueError):
            wrapper.attach(outer)

    def testChildrenViewIsACopy(self):
        felid = Parent("felid")
        felid.children["fake"] = None
        self.assertNotIn("fake", felid)

    def testWalkIsDepthFirstWithLastFlags(self):
        root = Parent("commands")
        root.command(lambda state, args: None, name="dog")
        felid = root.group("felid")
        felid.command(lambda state, args: None, name="panther")
        felinae = felid.group("felinae")
        felinae.command(lambda state, args: None, name="domestic-cat")
        felinae.command(lambda state, args: None, name="dangerous-tiger")

        walked = [(node.name, lasts) for node, lasts in root.walk()]
        self.assertEqual(walked, [
            ("dog", (False,)),
            ("felid", (True,)),
            ("panther", (True, False)),
            ("felinae", (True, True)),
            ("domestic-cat", (True, True, False)),
            ("dangerous-tiger", (True, True, True)),
        ])

    def testReprNamesTheType(self):
        self.assertEqual(repr(Parent("felid", help="cats")), "parent(name='felid', help='cats', children={})")


if __name__ == "__main__":
    unittest.main()
