"""
Tests for keyword recognition: the perfect hash, the first-byte ladder and
the offline table generator.
"""

import itertools
import random
import string
import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from serqlane.config import CompilerOptions
from serqlane.lexer.lexer import Lexer
from serqlane.lexer.tokens import KEYWORDS, MAX_KEYWORD_LEN, TokenKind
from serqlane.lexer.keywords import (
    KEYWORD_ORDER, KEYWORD_TABLE, NG, generate_tables, keyword_slot, ladder_keyword,
    lookup_keyword, perfect_hash_keyword, render_tables
)

STRATEGY_NAMES = ("perfect_hash", "ladder")


class TestKeywordLookup(unittest.TestCase):
    """Both recognizers classify words exactly like the keyword table."""

    def test_every_keyword_is_recognized(self):
        for strategy in STRATEGY_NAMES:
            for word, kind in KEYWORDS.items():
                with self.subTest(strategy=strategy, word=word):
                    self.assertIs(lookup_keyword(word, strategy), kind)

    def test_longest_keyword(self):
        self.assertEqual(len("continue"), MAX_KEYWORD_LEN)
        self.assertIs(lookup_keyword("continue"), TokenKind.CONTINUE)
        self.assertIs(lookup_keyword("continue", "ladder"), TokenKind.CONTINUE)

    def test_all_short_words(self):
        letters = string.ascii_lowercase
        for length in range(1, 4):
            for chars in itertools.product(letters, repeat=length):
                word = "".join(chars)
                expected = KEYWORDS.get(word)
                self.assertIs(lookup_keyword(word, "perfect_hash"), expected, word)
                self.assertIs(lookup_keyword(word, "ladder"), expected, word)

    def test_random_longer_words(self):
        rng = random.Random(20240601)
        letters = string.ascii_lowercase
        for _ in range(20000):
            length = rng.randint(4, MAX_KEYWORD_LEN)
            word = "".join(rng.choice(letters) for _ in range(length))
            expected = KEYWORDS.get(word)
            self.assertIs(lookup_keyword(word, "perfect_hash"), expected, word)
            self.assertIs(lookup_keyword(word, "ladder"), expected, word)

    def test_near_misses(self):
        for word in KEYWORDS:
            variants = {word[:-1], word + "s", word[1:], word.upper(), word.capitalize()}
            for i in range(len(word)):
                variants.add(word[:i] + "z" + word[i + 1:])
            variants.discard(word)
            for variant in variants:
                if variant in KEYWORDS:
                    continue
                self.assertIsNone(lookup_keyword(variant), variant)
                self.assertIsNone(lookup_keyword(variant, "ladder"), variant)

    def test_non_candidates(self):
        for word in ("", "continues", "fn_", "_if", "if2", "größe"):
            self.assertIsNone(lookup_keyword(word), word)

    def test_padding_must_be_zero(self):
        # The whole fixed width buffer takes part in the comparison.
        self.assertIs(perfect_hash_keyword(b"if\0\0\0\0\0\0", 2), TokenKind.IF)
        self.assertIsNone(perfect_hash_keyword(b"if\0\0\0\0\0x", 2))
        self.assertIs(ladder_keyword(bytearray(b"if\0\0\0\0\0\0"), 2), TokenKind.IF)
        self.assertIsNone(ladder_keyword(b"if\0\0\0\0\0x", 2))

    def test_length_bounds(self):
        self.assertIsNone(perfect_hash_keyword(bytes(8), 0))
        self.assertIsNone(perfect_hash_keyword(b"continue", 9))
        self.assertIsNone(ladder_keyword(bytes(8), 0))


class TestHashTables(unittest.TestCase):

    def test_baked_tables_map_each_keyword_to_its_index(self):
        self.assertEqual(len(KEYWORD_TABLE), len(KEYWORDS))
        for index, (entry, kind) in enumerate(KEYWORD_TABLE):
            length = len(entry.rstrip(b"\0"))
            self.assertEqual(keyword_slot(entry, length), index, kind)

    def test_table_follows_generation_order(self):
        words = [entry.rstrip(b"\0").decode("ascii") for entry, _ in KEYWORD_TABLE]
        self.assertEqual(tuple(words), KEYWORD_ORDER)
        self.assertEqual(set(words), set(KEYWORDS))

    def test_neighbouring_f_keywords_get_their_own_slots(self):
        self.assertEqual(lookup_keyword("for"), TokenKind.FOR)
        self.assertEqual(lookup_keyword("fn"), TokenKind.FN)
        self.assertEqual(keyword_slot(KEYWORD_TABLE[6][0], 3), 6)
        self.assertEqual(keyword_slot(KEYWORD_TABLE[7][0], 2), 7)

    def test_generated_tables_are_perfect(self):
        keywords = list(KEYWORD_ORDER)
        tables = generate_tables(keywords, seed=7)
        self.assertEqual(tables.size, NG)
        self.assertEqual(len(tables.g), NG)
        self.assertEqual(len(tables.s1), MAX_KEYWORD_LEN)
        for index, word in enumerate(keywords):
            self.assertEqual(tables.slot(word), index, word)

    def test_generation_is_reproducible(self):
        keywords = list(KEYWORD_ORDER)
        self.assertEqual(generate_tables(keywords, seed=3), generate_tables(keywords, seed=3))

    def test_other_keyword_lists(self):
        keywords = ["do", "loop", "match", "struct", "yield"]
        tables = generate_tables(keywords, size=11, seed=1)
        for index, word in enumerate(keywords):
            self.assertEqual(tables.slot(word), index, word)

    def test_rejects_bad_keyword_lists(self):
        with self.assertRaises(ValueError):
            generate_tables(["if", "if"])
        with self.assertRaises(ValueError):
            generate_tables(["if", "else"], size=2)
        with self.assertRaises(ValueError):
            generate_tables(["continuing"])

    def test_gives_up(self):
        with self.assertRaises(ValueError):
            generate_tables(list(KEYWORD_ORDER), size=16, seed=1, max_attempts=0)

    def test_render(self):
        tables = generate_tables(list(KEYWORD_ORDER), seed=7)
        text = render_tables(tables)
        self.assertTrue(text.startswith("G = ("))
        self.assertIn(f"S1 = {tables.s1!r}", text)
        self.assertIn(f"NG = {NG}", text)


class TestLexerKeywordStrategy(unittest.TestCase):

    def test_strategies_agree_in_the_lexer(self):
        source = "fn main() {\n let x = true\n mut y = falsey\n return x\n}\nwhile enumerate continue"
        streams = []
        for strategy in STRATEGY_NAMES:
            options = CompilerOptions(keyword_strategy=strategy)
            streams.append([t.kind for t in Lexer(source, options=options)])
        self.assertEqual(streams[0], streams[1])
        self.assertIn(TokenKind.CONTINUE, streams[0])
        self.assertIn(TokenKind.WHILE, streams[0])


if __name__ == '__main__':
    unittest.main()
