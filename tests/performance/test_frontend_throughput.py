#!/usr/bin/env python3
"""
Front End Throughput Test Suite
===============================

Lexes and parses generated programs of increasing size to catch accidental
quadratic behavior in the scanner or the parser.
"""

import pytest
import time
import sys
import os
from dataclasses import dataclass

# Add the project root to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from serqlane.config import CompilerOptions
from serqlane.lexer.lexer import Lexer
from serqlane.parser.parser import Parser


@dataclass
class ThroughputTarget:
    """Upper bound on wall time for a generated program"""
    functions: int
    max_time_ms: float


FUNCTION_TEMPLATE = (
    "fn f{n}(a: i32, b: i32): i32 {{\n"
    "    let x = a * {n} + b << 2 // scale\n"
    "    mut y = f{n}(x, b)[0]\n"
    "    y += -x & 255 | !(a == b)\n"
    "    /* done */ y\n"
    "}}\n"
)


def generate_program(functions: int) -> str:
    return "".join(FUNCTION_TEMPLATE.format(n=n) for n in range(functions))


class TestFrontEndThroughput:
    """
    Wall time limits are loose; these only fail on algorithmic regressions.
    """

    TARGETS = [
        ThroughputTarget(100, 2000.0),
        ThroughputTarget(1000, 20000.0),
    ]

    def _best_of(self, func, runs: int = 3) -> float:
        times = []
        for _ in range(runs):
            start_time = time.perf_counter()
            func()
            end_time = time.perf_counter()
            times.append(end_time - start_time)
        return min(times) * 1000

    @pytest.mark.parametrize("target", TARGETS)
    def test_lexer_throughput(self, target: ThroughputTarget):
        source = generate_program(target.functions)

        elapsed_ms = self._best_of(lambda: Lexer(source).tokenize())

        assert elapsed_ms < target.max_time_ms, \
            f"Lexing {target.functions} functions too slow: {elapsed_ms:.2f}ms"

    @pytest.mark.parametrize("target", TARGETS)
    def test_parser_throughput(self, target: ThroughputTarget):
        source = generate_program(target.functions)

        def parse():
            parser = Parser(source)
            program = parser.parse()
            assert parser.errors == []
            assert len(program.items) == target.functions

        elapsed_ms = self._best_of(parse)

        assert elapsed_ms < target.max_time_ms, \
            f"Parsing {target.functions} functions too slow: {elapsed_ms:.2f}ms"

    def test_linear_scaling(self):
        """Ten times the input should cost well under a hundred times the time"""
        small = generate_program(100)
        large = generate_program(1000)

        small_ms = self._best_of(lambda: Parser(small).parse())
        large_ms = self._best_of(lambda: Parser(large).parse())

        assert large_ms < small_ms * 50, \
            f"Parser scaling looks superlinear: {small_ms:.2f}ms -> {large_ms:.2f}ms"

    @pytest.mark.parametrize("strategy", ["perfect_hash", "ladder"])
    def test_keyword_strategies(self, strategy):
        source = generate_program(200)
        options = CompilerOptions(keyword_strategy=strategy)

        tokens = Lexer(source, options=options).tokenize()

        assert tokens[-1].kind.name == "EOF"
        assert sum(1 for t in tokens if t.kind.name == "FN") == 200
