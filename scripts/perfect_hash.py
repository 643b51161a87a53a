#!/usr/bin/env python3
"""
Regenerate the keyword perfect hash tables.

Prints a block to paste over the G/S1/S2/NG constants in
serqlane/lexer/keywords.py. Keywords are hashed in KEYWORD_ORDER, which is
also the order of KEYWORD_TABLE.
"""

import argparse
import os
import sys

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from serqlane.lexer.keywords import KEYWORD_ORDER, generate_tables, render_tables, NG


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Generate keyword perfect hash tables")
    ap.add_argument("--seed", type=int, default=None, help="Random seed for reproducible output")
    ap.add_argument("--size", type=int, default=NG, help=f"Number of hash buckets (default: {NG})")
    ap.add_argument("--attempts", type=int, default=10000, help="Give up after this many salt pairs")
    args = ap.parse_args(argv)

    keywords = list(KEYWORD_ORDER)
    try:
        tables = generate_tables(keywords, size=args.size, seed=args.seed, max_attempts=args.attempts)
    except ValueError as e:
        sys.stderr.write(f"perfect_hash: {e}\n")
        return 1

    print(f"# Generated for: {' '.join(keywords)}")
    print(render_tables(tables))
    return 0


if __name__ == "__main__":
    sys.exit(main())
