#!/usr/bin/env python3
"""
Main test runner for the Serqlane front end tests.
"""

import sys
import os
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)


def run_all_tests():
    """Run all Serqlane front end tests."""

    print("Serqlane Front End Test Suite")
    print("=" * 60)

    # Test if basic imports work
    try:
        from serqlane.lexer.lexer import Lexer
        from serqlane.parser.parser import Parser
        print("All front end modules imported successfully")
        print()
    except ImportError as e:
        print(f"Failed to import front end modules: {e}")
        return False

    # Smoke test a simple program before the full suite
    print("Testing simple front end pipeline...")
    code = "fn add(a: i32, b: i32): i32 {\n    a + b\n}\n"

    lexer = Lexer(code)
    tokens = lexer.tokenize()
    print(f"  Generated {len(tokens)} tokens")

    parser = Parser(code)
    program = parser.parse()
    print(f"  Generated AST with {len(program.items)} top-level items")
    if parser.errors or lexer.errors:
        print(f"  Unexpected errors: {parser.errors + lexer.errors}")
        return False
    print()

    # Run the unit tests
    loader = unittest.TestLoader()
    suite = loader.discover(os.path.join(project_root, "tests"), pattern="test_*.py")
    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    print()
    print("=" * 60)
    print(f"Ran {result.testsRun} tests: "
          f"{len(result.failures)} failures, {len(result.errors)} errors")
    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
