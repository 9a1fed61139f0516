"""
Config module behavioral tests.

Scope
- Validate defaults, validation rules and read-only fields.
- Validate construction from mappings and replace().

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from signet.config import DEFAULT, Config


class TestConfig(TestCase):

    def testDefaults(self):
        self.assertEqual(DEFAULT.prefix, "-")
        self.assertTrue(DEFAULT.quoting)
        self.assertTrue(DEFAULT.escapes)
        self.assertFalse(DEFAULT.case_sensitive)
        self.assertFalse(DEFAULT.duplicates)

    def testPrefixValidation(self):
        for prefix in ("", "--", " ", "'", '"', "\\"):
            with self.subTest(prefix=prefix):
                with self.assertRaises(ValueError):
                    Config(prefix)
        with self.assertRaises(TypeError):
            Config(1)

    def testSwitchesMustBeBooleans(self):
        with self.assertRaises(TypeError):
            Config(quoting="yes")

    def testFromMapping(self):
        config = Config.from_mapping({"prefix": "+", "duplicates": True})
        self.assertEqual(config.prefix, "+")
        self.assertTrue(config.duplicates)
        with self.assertRaises(ValueError):
            Config.from_mapping({"prefx": "+"})
        with self.assertRaises(TypeError):
            Config.from_mapping([("prefix", "+")])

    def testReplace(self):
        config = DEFAULT.replace(case_sensitive=True)
        self.assertTrue(config.case_sensitive)
        self.assertFalse(DEFAULT.case_sensitive)
        self.assertEqual(config.prefix, DEFAULT.prefix)

    def testFold(self):
        self.assertEqual(DEFAULT.fold("Force"), "force")
        self.assertEqual(Config(case_sensitive=True).fold("Force"), "Force")

    def testEquality(self):
        self.assertEqual(Config(), DEFAULT)
        self.assertEqual(hash(Config()), hash(DEFAULT))
        self.assertNotEqual(Config("+"), DEFAULT)

    def testReadOnlyAndSealed(self):
        with self.assertRaises(AttributeError):
            DEFAULT.prefix = "+"  # type: ignore[misc]
        with self.assertRaises(TypeError):
            class Derived(Config):  # NOQA: F-841
                pass

    def testRepr(self):
        self.assertEqual(
            repr(DEFAULT),
            "config(prefix='-', quoting=True, escapes=True, case_sensitive=False, duplicates=False, ignore_values=False)",
        )


if __name__ == "__main__":
    unittest.main()
