"""
Shell behavioral tests (registry, dispatch steps, builtins).

Scope
- Validate the end-to-end path from a raw line to a handler call.
- Validate arity wording, the usage shortcut and the help flag.
- Validate fault isolation around handlers.
- Validate the builtin commands (echo, set, log, help, time, clear, noop).

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Shell, command, Command) and inspect the log.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from conch import Command, CommandException, FaultCode, Severity, Shell, command


class ShellTestCase(TestCase):
    def setUp(self):
        self.calls = []

        @command(name="add", min_args=2, max_args=2, help="Adds two integers")
        def add(context):
            self.calls.append(list(context.arguments))
            left = context.parse_argument(0, "left", int)
            right = context.parse_argument(1, "right", int)
            if not context.has_errors:
                context.log(left + right)

        self.shell = Shell(commands=[add])
        self.log = self.shell.log

    def register(self, name, min_args=0, max_args=-1, **options):
        def handler(context):
            self.calls.append(list(context.arguments))

        return self.shell.register(Command(handler, name, min_args, max_args, **options))


class TestDispatch(ShellTestCase):
    """Behavioral tests for Shell.dispatch()."""

    def testAddEndToEnd(self):
        self.assertTrue(self.shell.dispatch("add 1 2"))
        self.assertEqual(self.log.last.text, "3")
        self.assertEqual(self.calls, [["1", "2"]])

    def testNamesAreCaseInsensitive(self):
        self.shell.dispatch("ADD 2 2")
        self.assertEqual(self.log.last.text, "4")

    def testTooFewArguments(self):
        self.assertFalse(self.shell.dispatch("add 1"))
        self.assertEqual(self.log.last.text, "Command 'add' expects exactly 2 arguments, got 1.")
        self.assertEqual(self.log.last.code, FaultCode.ARITY_MISMATCH)
        self.assertEqual(self.calls, [])

    def testTooManyArguments(self):
        self.assertFalse(self.shell.dispatch("add 1 2 3"))
        self.assertEqual(self.log.last.text, "Command 'add' expects exactly 2 arguments, got 3.")
        self.assertEqual(self.calls, [])

    def testAtLeastWording(self):
        self.register("many", 2)
        self.shell.dispatch("many a")
        self.assertEqual(self.log.last.text, "Command 'many' expects at least 2 arguments, got 1.")

    def testAtMostWording(self):
        self.register("few", 0, 1)
        self.shell.dispatch("few a b")
        self.assertEqual(self.log.last.text, "Command 'few' expects at most 1 argument, got 2.")

    def testUsageShortcut(self):
        self.assertTrue(self.shell.dispatch("add"))
        self.assertEqual(self.log.last.severity, Severity.MESSAGE)
        self.assertIn("Usage: add", self.log.last.text)
        self.assertEqual(self.calls, [])

    def testOptionsDisableUsageShortcut(self):
        self.assertFalse(self.shell.dispatch("add -x=1"))
        self.assertEqual(self.log.last.code, FaultCode.ARITY_MISMATCH)

    def testHelpFlag(self):
        self.assertTrue(self.shell.dispatch("add 1 2 -HELP"))
        self.assertTrue(self.log.last.text.startswith("add: Adds two integers"))
        self.assertEqual(self.calls, [])

    def testUnknownCommand(self):
        self.assertFalse(self.shell.dispatch("nope 1"))
        self.assertEqual(self.log.last.text, "Command 'nope' could not be found.")
        self.assertEqual(self.log.last.code, FaultCode.UNKNOWN_COMMAND)

    def testUnknownCommandSuggestion(self):
        self.shell.dispatch("ad 1 2")
        self.assertIn("'add'", self.log.last.hint)

    def testEmptyLineIsIgnored(self):
        self.assertTrue(self.shell.dispatch("   "))
        self.assertEqual(len(self.log), 0)

    def testUnboundVariableAbortsDispatch(self):
        self.assertFalse(self.shell.dispatch("add 1 $missing"))
        self.assertEqual(self.log.last.text, "No variable named missing")
        self.assertEqual(self.calls, [])

    def testVariableSubstitution(self):
        self.shell.context.variables["world"] = "earth"
        self.register("greet", 1, 1)
        self.shell.dispatch("greet $world")
        self.assertEqual(self.calls, [["earth"]])

    def testTypeMismatchInsideHandler(self):
        self.assertFalse(self.shell.dispatch("add 1 two"))
        self.assertEqual(
            self.log.last.text,
            "Error while parsing 2nd argument 'right': Expected input compatible with type int, got 'two'.",
        )

    def testTolerantCommandWarnsAboutExtras(self):
        self.register("loose", 0, 1, tolerant=True)
        self.shell.dispatch("loose a b c")
        self.assertEqual(self.log.texts()[-2:], [
            "Extra argument 'b' at position 1.",
            "Extra argument 'c' at position 2.",
        ])
        self.assertEqual(self.log.last.severity, Severity.WARNING)
        self.assertEqual(self.calls, [["a", "b", "c"]])

    def testHandlerFaultIsLogged(self):
        @command(name="boom")
        def boom(context):
            raise ValueError("kaboom")

        self.shell.register(boom)
        self.assertFalse(self.shell.dispatch("boom"))
        self.assertEqual(self.log.last.text, "kaboom")
        self.assertEqual(self.log.last.severity, Severity.ERROR)
        self.assertEqual(self.log.last.code, FaultCode.HANDLER_FAULT)
        self.assertIn("ValueError", self.log.last.trace)

    def testHandlerFaultWithoutMessage(self):
        @command(name="boom")
        def boom(context):
            raise KeyError

        self.shell.register(boom)
        self.shell.dispatch("boom")
        self.assertEqual(self.log.last.text, "KeyError")

    def testHandlerCommandException(self):
        @command(name="refuse")
        def refuse(context):
            raise CommandException("not today", hint="try tomorrow")

        self.shell.register(refuse)
        self.assertFalse(self.shell.dispatch("refuse"))
        self.assertEqual(self.log.last.text, "not today")
        self.assertEqual(self.log.last.hint, "try tomorrow")
        self.assertEqual(self.log.last.trace, "")

    def testInterceptedHandlerFaultIsLogged(self):
        @command(intercepted=True, name="raw")
        def raw(context, remainder):
            raise ValueError(f"cannot take {remainder}")

        self.shell.register(raw)
        self.assertFalse(self.shell.dispatch("raw  anything  else"))
        self.assertEqual(self.log.last.text, "cannot take anything  else")
        self.assertEqual(self.log.last.code, FaultCode.HANDLER_FAULT)
        self.assertIn("ValueError", self.log.last.trace)

    def testInterceptedHandlerCommandException(self):
        @command(intercepted=True, name="raw")
        def raw(context, remainder):
            raise CommandException("refused", hint="not now")

        self.shell.register(raw)
        self.assertFalse(self.shell.dispatch("raw x"))
        self.assertEqual(self.log.last.text, "refused")
        self.assertEqual(self.log.last.hint, "not now")

    def testWarningsAsErrorsDisabled(self):
        shell = Shell(warnings_as_errors=False)

        @command(name="strict")
        def strict(context):
            context.end_parsing()

        shell.register(strict)
        self.assertTrue(shell.dispatch("strict -unknown"))
        self.assertEqual(shell.log.last.text, "Unknown argument: unknown.")


class TestRegistry(ShellTestCase):
    """Behavioral tests for registration and the help listing."""

    def testDuplicateNameRejected(self):
        with self.assertRaises(ValueError):
            self.register("ADD")

    def testRegisterRejectsOtherValues(self):
        with self.assertRaises(TypeError):
            self.shell.register(lambda context: None)

    def testRegisterRows(self):
        seen = []
        shell = Shell(builtins=False, commands=[
            ("ping", 0, 0, "Reply with pong", None, lambda context: context.log("pong")),
            ("note", 1, -1, None, "note TEXT...", seen.append),
        ])
        shell.dispatch("ping")
        self.assertEqual(shell.log.last.text, "pong")
        shell.dispatch("note")
        self.assertEqual(shell.log.last.text, "note TEXT...")
        self.assertEqual(list(shell.commands), ["echo", "ping", "note"])

    def testBuiltinsCanBeDisabled(self):
        shell = Shell(builtins=False)
        self.assertEqual(list(shell.commands), ["echo"])

    def testListingIsInvalidatedOnRegister(self):
        listing = self.shell.listing()
        self.assertIs(self.shell.listing(), listing)
        self.assertNotIn("later", listing)
        self.register("later", help="Registered late")
        self.assertIn("later", self.shell.listing())
        self.assertIn("Registered late", self.shell.listing())

    def testListingKeepsBrackets(self):
        self.register("wrap", help="Wrap [bold]text[/bold] in [/x]")
        self.assertIn("Wrap [bold]text[/bold] in [/x]", self.shell.listing())

    def testMatchingWords(self):
        self.register("hello")
        self.assertEqual(list(self.shell.matching_words("HE")), ["help", "hello"])

    def testMatchingWordsVariablesOnly(self):
        self.shell.context.variables["help_text"] = "x"
        self.assertEqual(list(self.shell.matching_words("$h")), ["$help_text"])

    def testMatchingWordsEmptyPartial(self):
        self.shell.context.variables["v"] = "x"
        words = list(self.shell.matching_words(""))
        self.assertEqual(words[0], "$v")
        self.assertIn("add", words)
        self.assertIn("echo", words)


class TestBuiltins(ShellTestCase):
    """Behavioral tests for the builtin commands."""

    def testEchoKeepsRawRemainder(self):
        self.shell.dispatch('echo  "quoted"  -opt=$x  tail')
        self.assertEqual(self.log.last.text, '"quoted"  -opt=$x  tail')
        self.assertEqual(self.log.last.severity, Severity.MESSAGE)

    def testSetAndLog(self):
        self.shell.dispatch("set world earth")
        self.shell.dispatch("log $world")
        self.assertEqual(self.log.last.text, "earth")

    def testSetShowsOneVariable(self):
        self.shell.dispatch("set world earth")
        self.shell.dispatch("set world")
        self.assertEqual(self.log.last.text, "world = earth")

    def testSetUnknownVariable(self):
        self.assertFalse(self.shell.dispatch("set nothing"))
        self.assertEqual(self.log.last.text, "No variable named nothing")

    def testSetListsVariables(self):
        self.shell.dispatch('set greeting "hello there"')
        self.shell.dispatch("set")
        self.assertIn("hello there", self.log.last.text)

    def testHelpListsCommands(self):
        self.shell.dispatch("help")
        self.assertEqual(self.log.last.severity, Severity.SHELL)
        self.assertIn("Adds two integers", self.log.last.text)
        self.assertIn("clear", self.log.last.text)

    def testHelpForOneCommand(self):
        self.shell.dispatch("help add")
        self.assertEqual(self.log.last.text, self.shell.find("add").extended_help)

    def testHelpForUnknownCommand(self):
        self.assertFalse(self.shell.dispatch("help nope"))
        self.assertEqual(self.log.last.text, "Command 'nope' could not be found.")

    def testTimeRunsTheCommand(self):
        self.shell.dispatch("time add 1 2")
        self.assertEqual(self.log.texts()[-2], "3")
        self.assertTrue(self.log.last.text.startswith("The command add took "))
        self.assertTrue(self.log.last.text.endswith(" ms."))

    def testSetListsBracketedValues(self):
        self.shell.dispatch('set a "[bold]x[/bold]"')
        self.shell.dispatch('set b "[red]"')
        self.shell.dispatch('set c "[/x]"')
        self.assertTrue(self.shell.dispatch("set"))
        listing = self.log.last.text
        for value in ("[bold]x[/bold]", "[red]", "[/x]"):
            self.assertIn(value, listing)

    def testTimeKeepsEchoRemainder(self):
        self.shell.dispatch('time echo  "hi"  -x')
        self.assertEqual(self.log.texts()[-2], '"hi"  -x')
        self.assertTrue(self.log.last.text.startswith("The command echo took "))

    def testTimeNested(self):
        self.shell.dispatch("time time add 1 2")
        self.assertEqual(self.log.texts()[-3], "3")
        self.assertTrue(self.log.texts()[-2].startswith("The command add took "))
        self.assertTrue(self.log.last.text.startswith("The command time took "))

    def testTimeReportsNestedErrors(self):
        self.assertFalse(self.shell.dispatch("time add 1"))
        self.assertIn("Command 'add' expects exactly 2 arguments, got 1.", self.log.texts())

    def testClearEmptiesTheLog(self):
        self.shell.dispatch("add 1 2")
        self.shell.dispatch("clear")
        self.assertEqual(len(self.log), 0)

    def testNoop(self):
        self.assertTrue(self.shell.dispatch("noop"))
        self.assertEqual(len(self.log), 0)

    def testLogArityUsage(self):
        self.shell.dispatch("log")
        self.assertIn("Usage: log", self.log.last.text)


if __name__ == '__main__':
    unittest.main()
