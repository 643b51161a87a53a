"""
Tests for CompilerOptions.
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from serqlane.config import CompilerOptions


class TestCompilerOptions(unittest.TestCase):

    def test_defaults(self):
        options = CompilerOptions()
        self.assertFalse(options.keep_comments)
        self.assertEqual(options.keyword_strategy, "perfect_hash")
        self.assertEqual(options.integer_bits, 64)
        self.assertFalse(options.allow_trailing_comma)
        self.assertEqual(options.max_nesting_depth, 128)
        self.assertEqual(options.max_integer, 18446744073709551615)

    def test_max_integer(self):
        self.assertEqual(CompilerOptions(integer_bits=8).max_integer, 255)
        self.assertEqual(CompilerOptions(integer_bits=1).max_integer, 1)

    def test_validation(self):
        with self.assertRaises(ValueError):
            CompilerOptions(keyword_strategy="trie")
        with self.assertRaises(ValueError):
            CompilerOptions(integer_bits=0)
        with self.assertRaises(ValueError):
            CompilerOptions(integer_bits=65)
        with self.assertRaises(ValueError):
            CompilerOptions(max_nesting_depth=0)


class TestFromEnv(unittest.TestCase):

    def test_empty_environment(self):
        self.assertEqual(CompilerOptions.from_env({}), CompilerOptions())

    def test_all_variables(self):
        options = CompilerOptions.from_env({
            "SERQLANE_KEEP_COMMENTS": "yes",
            "SERQLANE_ALLOW_TRAILING_COMMA": "On",
            "SERQLANE_KEYWORD_STRATEGY": " ladder ",
            "SERQLANE_INTEGER_BITS": "32",
            "SERQLANE_MAX_NESTING_DEPTH": "64",
            "UNRELATED": "1",
        })
        self.assertEqual(options, CompilerOptions(
            keep_comments=True,
            keyword_strategy="ladder",
            integer_bits=32,
            allow_trailing_comma=True,
            max_nesting_depth=64,
        ))

    def test_false_values(self):
        for raw in ("0", "false", "NO", "off", ""):
            with self.subTest(raw=raw):
                options = CompilerOptions.from_env({"SERQLANE_KEEP_COMMENTS": raw})
                self.assertFalse(options.keep_comments)

    def test_bad_boolean(self):
        with self.assertRaises(ValueError) as cm:
            CompilerOptions.from_env({"SERQLANE_KEEP_COMMENTS": "maybe"})
        self.assertIn("SERQLANE_KEEP_COMMENTS", str(cm.exception))

    def test_bad_integer(self):
        with self.assertRaises(ValueError) as cm:
            CompilerOptions.from_env({"SERQLANE_INTEGER_BITS": "wide"})
        self.assertIn("SERQLANE_INTEGER_BITS", str(cm.exception))

    def test_out_of_range_integer(self):
        with self.assertRaises(ValueError):
            CompilerOptions.from_env({"SERQLANE_INTEGER_BITS": "128"})

    def test_bad_strategy(self):
        with self.assertRaises(ValueError):
            CompilerOptions.from_env({"SERQLANE_KEYWORD_STRATEGY": "regex"})


if __name__ == '__main__':
    unittest.main()
