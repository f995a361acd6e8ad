"""
Faults behavioral tests (raising, warning, shell rendering).

Scope
- Validate trigger() contract and option merging.
- Validate exceptions: raised outside shell mode, printed + exit 1 in shell mode.
- Validate warnings: python warnings outside shell mode, printed in shell mode.

Conventions
- Test method names follow CamelCase per project convention.
- Shell output is captured with a file-backed rich Console.
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console

from argosy.faults import (
    CommandFailure,
    FaultCode,
    MissingArgumentWarning,
    UnknownModifierError,
    trigger,
)


def _console():
    return Console(file=io.StringIO(), width=200, color_system=None)


class TestTrigger(TestCase):
    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))

    def testExceptionRaisedOutsideShell(self):
        with self.assertRaises(UnknownModifierError) as context:
            trigger(UnknownModifierError('Unknown modifier "--nope"', code=FaultCode.UNKNOWN_MODIFIER))
        self.assertEqual(str(context.exception), 'Unknown modifier "--nope"')

    def testOptionsAreMerged(self):
        with self.assertRaises(CommandFailure) as context:
            trigger(CommandFailure("boom"), title="command failed", prog="tool")
        self.assertEqual(context.exception.options["title"], "command failed")
        self.assertEqual(context.exception.options["prog"], "tool")

    def testExceptionExitsInShell(self):
        console = _console()
        with self.assertRaises(SystemExit) as context:
            trigger(
                UnknownModifierError('Unknown modifier "--nope"', code=FaultCode.UNKNOWN_MODIFIER, title="unknown modifier"),
                shell=True,
                console=console,
                prog="tool",
            )
        self.assertEqual(context.exception.code, 1)
        output = console.file.getvalue()
        self.assertIn('Unknown modifier "--nope"', output)
        self.assertIn("11112", output)
        self.assertIn("Unknown Modifier", output)

    def testFancyRenderingInShell(self):
        console = _console()
        with self.assertRaises(SystemExit):
            trigger(CommandFailure("boom", code=FaultCode.COMMAND_FAILURE, title="failed"), shell=True, fancy=True, console=console)
        self.assertIn("boom", console.file.getvalue())

    def testWarningOutsideShell(self):
        with self.assertWarns(MissingArgumentWarning):
            trigger(MissingArgumentWarning('Missing argument "tables"', code=FaultCode.MISSING_ARGUMENT))

    def testWarningPrintedInShell(self):
        console = _console()
        trigger(
            MissingArgumentWarning('Missing argument "tables"', code=FaultCode.MISSING_ARGUMENT, title="missing argument"),
            shell=True,
            console=console,
        )
        self.assertIn('Missing argument "tables"', console.file.getvalue())


class TestFaultCode(TestCase):
    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.UNKNOWN_MODIFIER.normalize(), "11112")

    def testCodesAreUnique(self):
        self.assertEqual(len({code.value for code in FaultCode}), len(FaultCode))


if __name__ == "__main__":
    unittest.main()
