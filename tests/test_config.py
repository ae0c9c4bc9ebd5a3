"""Tests for Settings and the package logger."""

from __future__ import annotations

import logging
import os
import sys
import unittest
from unittest import mock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from stens import Settings
from stens._config import MAX_DEPTH_ENV
from stens._logging import LOG_LEVEL_ENV, get_logger


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        s = Settings()
        self.assertIsNone(s.max_depth)
        self.assertEqual(s.log_level, "WARNING")

    def test_from_env(self):
        s = Settings.from_env({MAX_DEPTH_ENV: "8", LOG_LEVEL_ENV: "debug"})
        self.assertEqual(s.max_depth, 8)
        self.assertEqual(s.log_level, "debug")

    def test_from_empty_env(self):
        self.assertEqual(Settings.from_env({}), Settings())

    def test_non_integer_depth(self):
        with self.assertRaises(ValueError) as ctx:
            Settings.from_env({MAX_DEPTH_ENV: "deep"})
        self.assertIn(MAX_DEPTH_ENV, str(ctx.exception))

    def test_non_positive_depth(self):
        with self.assertRaises(ValueError):
            Settings(max_depth=0)

    def test_unknown_level(self):
        with self.assertRaises(ValueError):
            Settings(log_level="LOUD")

    def test_frozen(self):
        with self.assertRaises(AttributeError):
            Settings().max_depth = 3


class TestLogger(unittest.TestCase):
    def test_single_handler(self):
        first = get_logger("stens.test.single")
        second = get_logger("stens.test.single")
        self.assertIs(first, second)
        self.assertEqual(len(second.handlers), 1)

    def test_library_default_level(self):
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop(LOG_LEVEL_ENV, None)
            self.assertEqual(get_logger("stens.test.lib").level, logging.WARNING)
            self.assertEqual(get_logger("stens.test._cli").level, logging.INFO)

    def test_level_from_env(self):
        with mock.patch.dict(os.environ, {LOG_LEVEL_ENV: "debug"}):
            self.assertEqual(get_logger("stens.test.env").level, logging.DEBUG)

    def test_bad_level_falls_back(self):
        with mock.patch.dict(os.environ, {LOG_LEVEL_ENV: "chatty"}):
            self.assertEqual(get_logger("stens.test.bad").level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
