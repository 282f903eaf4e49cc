"""
Command descriptor and utility tests.

Scope
- Command metadata: class attributes vs. constructor arguments, validation.
- Topic semantics and the command() builder (direct and decorator forms).
- Helpers from cmdhost.utils used across the package.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from cmdhost import CallbackCommand, Command, FlagSet, InvalidCommandError, Topic, command
from cmdhost.utils import Unset, UnsetType, capitalize, coalesce, mirror, rename


class Build(Command):
    name = "build"
    synopsis = "  [-o <file>] <source>...  "
    short = " compiles sources "

    def run(self, args, flags):
        return 0


class TestCommand(TestCase):

    def testClassAttributesAreSanitized(self):
        build = Build()
        self.assertEqual(build.name, "build")
        self.assertEqual(build.synopsis, "[-o <file>] <source>...")
        self.assertEqual(build.short, "compiles sources")
        self.assertTrue(build.runnable)
        self.assertFalse(build.hidden)
        self.assertFalse(build.deprecated)

    def testConstructorArgumentsWin(self):
        build = Build("compile", short="compiles things", deprecated=True)
        self.assertEqual(build.name, "compile")
        self.assertEqual(build.short, "compiles things")
        self.assertTrue(build.deprecated)
        self.assertEqual(Build.name, "build")

    def testLongKeepsItsLayout(self):
        build = Build(long="\nFirst line.\n\n    indented\n")
        self.assertEqual(build.long, "\nFirst line.\n\n    indented\n")

    def testInvalidNamesRejected(self):
        for name in ("", "two words", "-x", "1st", "a/b"):
            with self.subTest(name=name):
                with self.assertRaises(InvalidCommandError):
                    Build(name)

    def testDottedAndHyphenatedNamesAccepted(self):
        self.assertEqual(Build("mod.tidy").name, "mod.tidy")
        self.assertEqual(Build("dry-run").name, "dry-run")

    def testShortIsRequired(self):
        with self.assertRaises(InvalidCommandError):
            Build(short="   ")

    def testAbstractRun(self):
        class Incomplete(Command):
            name = "incomplete"
            short = "does nothing"

        with self.assertRaises(TypeError):
            Incomplete()

    def testRegisterDefaultsToNoSwitches(self):
        flags = FlagSet("tool build")
        Build().register(flags)
        self.assertEqual(len(flags), 0)

    def testRepr(self):
        self.assertEqual(repr(Build()), "Build(name='build', short='compiles sources', runnable=True)")


class TestTopic(TestCase):

    def testTopicIsNotRunnable(self):
        topic = Topic("workflow", short="describes the build workflow", long="Text.")
        self.assertFalse(topic.runnable)
        self.assertIsNone(topic.run([], FlagSet("tool workflow")))


class TestCommandBuilder(TestCase):

    def testDirectForm(self):
        def build_all(args, flags):
            """Build compiles every source file."""
            return len(args)

        built = command(build_all, short="compiles everything")
        self.assertIsInstance(built, CallbackCommand)
        self.assertEqual(built.name, "build-all")
        self.assertEqual(built.long, "Build compiles every source file.")
        self.assertEqual(built.run(["a", "b"], FlagSet("tool build-all")), 2)

    def testDecoratorForm(self):
        received = []

        @command(name="ship", synopsis="<target>", short="ships artifacts",
                 register=lambda flags: flags.flag("-f", "--force"))
        def ship(args, flags):
            received.append((args, flags.force))

        self.assertEqual(ship.synopsis, "<target>")
        flags = FlagSet("tool ship")
        ship.register(flags)
        ship.run(["prod"], flags)
        self.assertEqual(received, [(["prod"], False)])

    def testBuilderRejectsNonCallables(self):
        with self.assertRaises(TypeError):
            command(42)
        with self.assertRaises(TypeError):
            command(lambda args, flags: None, name="x", short="x", register="no")


class TestUtils(TestCase):

    def testUnsetIsFalseySingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})

    def testUnsetInUnions(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertIsNone(coalesce(None, 5))

    def testRename(self):
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")
        with self.assertRaises(TypeError):
            rename(1, 2, 3)

    def testMirrorReturnsImmutableCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = ["a", {"b": [1]}]

        holder = Holder()
        self.assertEqual(holder.items, ("a", {"b": (1,)}))
        with self.assertRaises(AttributeError):
            holder.items = []

    def testCapitalize(self):
        self.assertEqual(capitalize("compiles sources"), "Compiles sources")
        self.assertEqual(capitalize("  compiles C sources"), "  Compiles C sources")
        self.assertEqual(capitalize("élan"), "Élan")
        self.assertEqual(capitalize(""), "")
        with self.assertRaises(TypeError):
            capitalize(None)


if __name__ == "__main__":
    unittest.main()
