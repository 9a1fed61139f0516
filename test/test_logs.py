"""
Logs module behavioral tests.

Scope
- Validate setup_logging(): one RichHandler per logger, level resolution.
- Validate the library stays silent by default (NullHandler on "signet").

Conventions
- Test method names follow CamelCase per project convention.
- Every test configures its own logger name so global state is not shared.
"""

from __future__ import annotations

import logging
import os
import unittest
from unittest import TestCase, mock

from rich.logging import RichHandler

from signet.logs import setup_logging


class TestSetupLogging(TestCase):

    def logger(self, name):
        logger = logging.getLogger(name)
        self.addCleanup(logger.handlers.clear)
        return logger

    def testSingleHandler(self):
        logger = self.logger("signet-test-single")
        self.assertIs(setup_logging(logger.name), logger)
        setup_logging(logger.name, level="debug")
        self.assertEqual(sum(isinstance(handler, RichHandler) for handler in logger.handlers), 1)
        self.assertEqual(logger.level, logging.DEBUG)

    def testEnvironmentLevel(self):
        logger = self.logger("signet-test-env")
        with mock.patch.dict(os.environ, {"SIGNET_LOG_LEVEL": "warning"}):
            setup_logging(logger.name)
        self.assertEqual(logger.level, logging.WARNING)

    def testExplicitLevelWins(self):
        logger = self.logger("signet-test-explicit")
        with mock.patch.dict(os.environ, {"SIGNET_LOG_LEVEL": "warning"}):
            setup_logging(logger.name, level="ERROR")
        self.assertEqual(logger.level, logging.ERROR)

    def testUnknownLevelFallsBackToInfo(self):
        logger = self.logger("signet-test-unknown")
        setup_logging(logger.name, level="chatty")
        self.assertEqual(logger.level, logging.INFO)

    def testLibraryIsSilentByDefault(self):
        import signet  # NOQA: F-401

        self.assertTrue(any(isinstance(handler, logging.NullHandler) for handler in logging.getLogger("signet").handlers))


if __name__ == "__main__":
    unittest.main()
