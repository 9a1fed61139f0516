"""
Catalog module behavioral tests.

Scope
- Validate message splitting (prefix, alias, tail).
- Validate the alias index: add, lookup, duplicates, iteration.
- Validate isolation of rejected declarations and module discovery.
- Validate dispatch, synchronous and asynchronous.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import sys
import types
import unittest
from unittest import IsolatedAsyncioTestCase, TestCase

from signet.catalog import Catalog, split_invocation
from signet.commands import Command, command
from signet.config import Config
from signet.faults import DuplicateCommandError, NoSignatureMatchedError
from signet.options import FORCE


def ping(context):
    return "pong"


def echo(context, *words):
    return " ".join(words)


class TestSplitInvocation(TestCase):

    def testAliasAndTail(self):
        self.assertEqual(split_invocation("!Echo  hello world"), ("echo", "hello world"))
        self.assertEqual(split_invocation("  !ping"), ("ping", ""))
        self.assertEqual(split_invocation("!say a\nb"), ("say", "a\nb"))

    def testNotAnInvocation(self):
        self.assertIsNone(split_invocation("hello"))
        self.assertIsNone(split_invocation("!"))
        self.assertIsNone(split_invocation("! ping"))

    def testCustomPrefix(self):
        self.assertEqual(split_invocation("$$ping now", "$$"), ("ping", "now"))
        self.assertIsNone(split_invocation("!ping", "$$"))

    def testArgumentTypes(self):
        with self.assertRaises(TypeError):
            split_invocation(None)
        with self.assertRaises(ValueError):
            split_invocation("!ping", "")


class TestIndex(TestCase):

    def setUp(self):
        self.catalog = Catalog((Command(("ping", "p"), [([], ping)]),))

    def testLookupByEveryAlias(self):
        self.assertIs(self.catalog["ping"], self.catalog["P"])
        self.assertIn("p", self.catalog)
        self.assertNotIn("pin", self.catalog)
        self.assertIsNone(self.catalog.get("pin"))
        with self.assertRaises(KeyError):
            self.catalog["pin"]

    def testTakenAliasRejected(self):
        with self.assertRaises(DuplicateCommandError):
            self.catalog.add(Command(("pong", "p")))
        self.assertNotIn("pong", self.catalog)

    def testOnlyCommands(self):
        with self.assertRaises(TypeError):
            self.catalog.add("ping")

    def testIterationYieldsEachCommandOnce(self):
        self.catalog.add(Command("echo", [(["WORD"], echo)]))
        self.assertEqual([item.name for item in self.catalog], ["ping", "echo"])
        self.assertEqual(len(self.catalog), 2)
        self.assertEqual(repr(self.catalog), "catalog(ping, echo)")

    def testSettings(self):
        with self.assertRaises(ValueError):
            Catalog(prefix=" ")
        with self.assertRaises(TypeError):
            Catalog(config={"prefix": "+"})
        self.assertEqual(Catalog(prefix="?").prefix, "?")


class TestDeclare(TestCase):

    def testDeclaredCommandIsAdded(self):
        catalog = Catalog()
        declared = catalog.declare("echo", [(["WORD"], echo)], options=(FORCE,))
        self.assertIs(catalog["echo"], declared)
        self.assertEqual(declared.options, (FORCE,))

    def testRejectionIsIsolated(self):
        catalog = Catalog()
        catalog.declare("ping", [([], ping)])
        with self.assertLogs("signet.catalog", "WARNING"):
            self.assertIsNone(catalog.declare("bad", [(["NOPE"], echo)]))
            self.assertIsNone(catalog.declare("ping", [([], ping)]))
        self.assertEqual(len(catalog), 1)
        self.assertNotIn("bad", catalog)

    def testIncludeModule(self):
        module = types.ModuleType("signet_test_commands")
        module.PING = Command("ping", [([], ping)])
        builder = module.ECHO = command("echo")
        builder.add(["WORD"], echo)
        module.BROKEN = command("broken").add(["NOPE"], echo)
        module.OTHER = "not a command"
        sys.modules[module.__name__] = module
        self.addCleanup(sys.modules.pop, module.__name__)

        catalog = Catalog()
        with self.assertLogs("signet.catalog", "WARNING"):
            added = catalog.include(module.__name__)
        self.assertEqual([item.name for item in added], ["ping", "echo"])
        self.assertEqual(len(catalog), 2)

    def testIncludeSurvivesMalformedDeclarations(self):
        def unparsable(context, value):
            pass

        unparsable.__annotations__ = {"value": "list["}

        module = types.ModuleType("signet_test_malformed")
        module.A_UNTYPED = command("untyped").add(None, echo)
        module.B_UNPARSABLE = command("unparsable").add([], unparsable)
        module.C_GOOD = command("good").add(["WORD"], echo)
        module.D_PING = Command("ping", [([], ping)])
        sys.modules[module.__name__] = module
        self.addCleanup(sys.modules.pop, module.__name__)

        catalog = Catalog()
        with self.assertLogs("signet.catalog", "WARNING") as logs:
            added = catalog.include(module.__name__)
        self.assertEqual([item.name for item in added], ["good", "ping"])
        self.assertEqual(len(logs.records), 2)

    def testDeclareRejectsMalformedTables(self):
        catalog = Catalog()
        with self.assertLogs("signet.catalog", "WARNING"):
            self.assertIsNone(catalog.declare("echo", None))
            self.assertIsNone(catalog.declare("echo", [(None, echo)]))
            self.assertIsNone(catalog.declare(42, [([], ping)]))
        self.assertEqual(len(catalog), 0)


class TestDispatch(TestCase):

    def setUp(self):
        self.catalog = Catalog()
        self.catalog.declare("ping", [([], ping)])
        self.catalog.declare("echo", [(["WORD..."], echo)], options=(FORCE,))

    def testDispatch(self):
        self.assertEqual(self.catalog.dispatch("!ping").result, "pong")
        self.assertEqual(self.catalog.dispatch("!ECHO -f a b").result, "a b")

    def testNotACommand(self):
        self.assertIsNone(self.catalog.dispatch("hello"))
        self.assertIsNone(self.catalog.dispatch("!unknown"))

    def testPrefixOverride(self):
        self.assertEqual(self.catalog.dispatch("?ping", None, "?").result, "pong")

    def testFaultsPropagate(self):
        with self.assertRaises(NoSignatureMatchedError):
            self.catalog.dispatch("!ping extra")

    def testConfigIsUsed(self):
        catalog = Catalog(prefix="/", config=Config("+"))
        catalog.declare("echo", [(["WORD..."], echo)], options=(FORCE,))
        self.assertEqual(catalog.dispatch("/echo +f -f").result, "-f")

    def testLookup(self):
        found, tail = self.catalog.lookup("!echo a b")
        self.assertIs(found, self.catalog["echo"])
        self.assertEqual(tail, "a b")


class TestAsyncDispatch(IsolatedAsyncioTestCase):

    async def testAwaitsHandlers(self):
        async def later(context):
            return context

        catalog = Catalog()
        catalog.declare("later", [([], later)])
        self.assertEqual((await catalog.adispatch("!later", "ctx")).result, "ctx")
        self.assertIsNone(await catalog.adispatch("later"))


if __name__ == "__main__":
    unittest.main()
