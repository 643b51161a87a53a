"""
Tests for byte-offset spans and positions.
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from serqlane.lexer.span import SourcePosition, SourceSpan, MAX_SOURCE_LEN, utf8_width


class TestSourcePosition(unittest.TestCase):

    def test_rejects_out_of_range_offsets(self):
        with self.assertRaises(ValueError):
            SourcePosition(-1)
        with self.assertRaises(ValueError):
            SourcePosition(MAX_SOURCE_LEN + 1)
        self.assertEqual(SourcePosition(MAX_SOURCE_LEN).offset, MAX_SOURCE_LEN)

    def test_line_column_is_one_based(self):
        source = "ab\ncd"
        self.assertEqual(SourcePosition(0).line_column(source), (1, 1))
        self.assertEqual(SourcePosition(1).line_column(source), (1, 2))
        self.assertEqual(SourcePosition(3).line_column(source), (2, 1))
        self.assertEqual(SourcePosition(4).line_column(source), (2, 2))

    def test_line_column_counts_characters_not_bytes(self):
        source = "öx\nÿ"
        # ö is two bytes, so x starts at byte 2 but column 2
        self.assertEqual(SourcePosition(2).line_column(source), (1, 2))
        self.assertEqual(SourcePosition(4).line_column(source), (2, 1))

    def test_line_column_accepts_bytes(self):
        source = "a\nbc".encode("utf-8")
        self.assertEqual(SourcePosition(3).line_column(source), (2, 2))

    def test_utf8_width(self):
        self.assertEqual(utf8_width("a"), 1)
        self.assertEqual(utf8_width("ö"), 2)
        self.assertEqual(utf8_width("€"), 3)
        self.assertEqual(utf8_width("\U0001F600"), 4)


class TestSourceSpan(unittest.TestCase):

    def test_start_must_not_exceed_end(self):
        with self.assertRaises(ValueError):
            SourceSpan.new(2, 1)

    def test_len(self):
        span = SourceSpan.new(1, 4)
        self.assertEqual(span.len(), 3)
        self.assertEqual(len(span), 3)
        self.assertTrue(SourceSpan.empty(7).is_empty())
        self.assertEqual(SourceSpan.empty(7).len(), 0)

    def test_text(self):
        source = "hello world"
        self.assertEqual(SourceSpan.new(6, 11).text(source), "world")
        self.assertEqual(SourceSpan.new(0, 0).text(source), "")
        self.assertEqual(SourceSpan.empty(11).text(source), "")

    def test_text_out_of_range(self):
        self.assertIsNone(SourceSpan.new(3, 12).text("hello world"))
        self.assertIsNone(SourceSpan.empty(12).text("hello world"))

    def test_text_requires_character_boundaries(self):
        source = "größe"
        self.assertEqual(SourceSpan.new(2, 4).text(source), "ö")
        self.assertIsNone(SourceSpan.new(2, 3).text(source))
        self.assertIsNone(SourceSpan.new(3, 4).text(source))
        self.assertIsNone(SourceSpan.empty(3).text(source))

    def test_text_from_bytes(self):
        source = "let größe".encode("utf-8")
        self.assertEqual(SourceSpan.new(4, 11).text(source), "größe")

    def test_join(self):
        a = SourceSpan.new(2, 4)
        b = SourceSpan.new(7, 9)
        self.assertEqual(a.join(b), SourceSpan.new(2, 9))
        self.assertEqual(b.join(a), SourceSpan.new(2, 9))

    def test_spans_are_values(self):
        self.assertEqual(SourceSpan.new(1, 2), SourceSpan.new(1, 2))
        self.assertEqual(len({SourceSpan.new(1, 2), SourceSpan.new(1, 2)}), 1)
        self.assertEqual(str(SourceSpan.new(1, 2)), "1..2")


if __name__ == '__main__':
    unittest.main()
