"""
Pipeline module behavioral tests.

Scope
- Validate the resolve flow: options and tokens, signature selection, handler call.
- Validate the fault boundary: resolution faults never call the handler;
  handler failures surface as CommandExecutionError with their cause.
- Validate the async entry point and concurrent use of one descriptor.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest import IsolatedAsyncioTestCase, TestCase

from signet.commands import Command, command
from signet.faults import (
    CommandExecutionError,
    DuplicateOptionError,
    NoSignatureMatchedError,
    ResolutionError,
    UnknownOptionError,
)
from signet.options import FORCE, NAME
from signet.pipeline import Invocation, Outcome, aresolve, prepare, resolve


def build():
    calls = []
    echo = command("echo", options=(FORCE, NAME))

    @echo.pattern("INTEGER")
    def number(context, value, *, options):
        calls.append(("number", context, value, options))
        return value * 2

    @echo.pattern("'fail'")
    def fail(context, _):
        raise RuntimeError("boom")

    @echo.pattern("WORD...")
    def words(context, *values):
        calls.append(("words", context, values))
        return " ".join(values)

    return echo.build(), calls


class TestResolve(TestCase):

    def setUp(self):
        self.echo, self.calls = build()

    def testOutcome(self):
        outcome = resolve(self.echo, "-f 21", "ctx")
        self.assertIsInstance(outcome, Outcome)
        self.assertEqual(outcome.result, 42)
        self.assertIs(outcome.command, self.echo)
        self.assertIs(outcome.signature, self.echo.signatures[0])
        self.assertEqual(outcome.arguments, (21,))
        self.assertTrue(outcome.options.has(FORCE))

    def testContextAndOptionsReachTheHandler(self):
        context = object()
        resolve(self.echo, "--name bob 3", context)
        (kind, received, value, options), = self.calls
        self.assertEqual(kind, "number")
        self.assertIs(received, context)
        self.assertEqual(value, 3)
        self.assertEqual(options[NAME], "bob")

    def testRepeatableValuesAreSpread(self):
        self.assertEqual(resolve(self.echo, "a b c").result, "a b c")
        self.assertEqual(self.calls, [("words", None, ("a", "b", "c"))])

    def testQuotedTokensArePositional(self):
        self.assertEqual(resolve(self.echo, '"-f"').result, "-f")

    def testEmptyTailMatchesTheRepeatablePattern(self):
        self.assertEqual(resolve(self.echo).result, "")

    def testUnknownOptionDoesNotCallTheHandler(self):
        with self.assertRaises(UnknownOptionError):
            resolve(self.echo, "--loud 3")
        self.assertEqual(self.calls, [])

    def testDuplicateOptionDoesNotCallTheHandler(self):
        with self.assertRaises(DuplicateOptionError):
            resolve(self.echo, "-f -f 3")
        self.assertEqual(self.calls, [])

    def testNoMatch(self):
        with self.assertRaises(NoSignatureMatchedError) as context:
            resolve(self.echo, '"a b"')
        self.assertIsInstance(context.exception, ResolutionError)
        self.assertIs(context.exception.options["command"], self.echo)
        self.assertEqual(len(context.exception.reasons), 3)

    def testHandlerFailureIsWrapped(self):
        with self.assertLogs("signet.pipeline", "WARNING"):
            with self.assertRaises(CommandExecutionError) as context:
                resolve(self.echo, "fail")
        self.assertNotIsInstance(context.exception, ResolutionError)
        self.assertIsInstance(context.exception.cause, RuntimeError)
        self.assertIs(context.exception.__cause__, context.exception.cause)
        self.assertIn("boom", context.exception.message)
        self.assertIsInstance(context.exception.options["invocation"], Invocation)

    def testPrepareDoesNotInvoke(self):
        invocation = prepare(self.echo, "-f x y", "ctx")
        self.assertEqual(self.calls, [])
        self.assertEqual(invocation.tokens, ("x", "y"))
        self.assertEqual(invocation.arguments, (("x", "y"),))
        self.assertEqual(invocation.context, "ctx")
        self.assertEqual(invocation.tail, "-f x y")

    def testAwaitableIsReturnedUntouched(self):
        async def later(context):
            return "later"

        coroutine = resolve(Command("wait", [([], later)])).result
        self.addCleanup(coroutine.close)
        self.assertTrue(hasattr(coroutine, "__await__"))

    def testArgumentTypes(self):
        with self.assertRaises(TypeError):
            resolve("echo", "x")
        with self.assertRaises(TypeError):
            resolve(self.echo, ["x"])
        with self.assertRaises(TypeError):
            prepare(self.echo, "x", None, {"prefix": "+"})

    def testConcurrentResolutions(self):
        with ThreadPoolExecutor(8) as executor:
            results = list(executor.map(lambda index: resolve(self.echo, str(index)).result, range(200)))
        self.assertEqual(results, [index * 2 for index in range(200)])


class TestAsyncResolve(IsolatedAsyncioTestCase):

    async def testAwaitsCoroutineHandlers(self):
        async def later(context, value):
            return value + 1

        outcome = await aresolve(Command("wait", [(["INTEGER"], later)]), "1")
        self.assertEqual(outcome.result, 2)

    async def testPlainHandlers(self):
        echo, _ = build()
        self.assertEqual((await aresolve(echo, "4")).result, 8)

    async def testAwaitedFailureIsWrapped(self):
        async def later(context):
            raise LookupError("gone")

        with self.assertLogs("signet.pipeline", "WARNING"):
            with self.assertRaises(CommandExecutionError) as context:
                await aresolve(Command("wait", [([], later)]))
        self.assertIsInstance(context.exception.cause, LookupError)

    async def testResolutionFaultsPropagate(self):
        echo, calls = build()
        with self.assertRaises(UnknownOptionError):
            await aresolve(echo, "--loud")
        self.assertEqual(calls, [])


if __name__ == "__main__":
    unittest.main()
