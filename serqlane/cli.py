"""
Command line host for the Serqlane front end.

    serqlane tokens FILE      print the token stream
    serqlane parse FILE       print each item as an S-expression
    serqlane repl             tokenize (or parse) one line at a time

FILE may be `-` for standard input. Diagnostics go to stderr and the exit
status is 1 when any error was reported.
"""

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import CompilerOptions, KEYWORD_STRATEGIES
from .lexer.errors import Diagnostic
from .lexer.lexer import Lexer, InvalidSourceError
from .lexer.span import SourceText
from .lexer.tokens import Token
from .parser.parser import parse_string
from .parser.printer import to_sexpr

LOG = logging.getLogger("serqlane.cli")

EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="serqlane", description="Serqlane compiler front end")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--keep-comments", action="store_true", default=None,
                   help="Emit comment tokens instead of skipping them")
    p.add_argument("--keyword-strategy", choices=KEYWORD_STRATEGIES, default=None,
                   help="Keyword recognizer to use (default: perfect_hash)")
    p.add_argument("--integer-bits", type=int, default=None,
                   help="Width of integer literals, 1-64 (default: 64)")
    p.add_argument("--allow-trailing-comma", action="store_true", default=None,
                   help="Accept a trailing comma in argument lists")

    sub = p.add_subparsers(dest="cmd", required=True)

    tokens = sub.add_parser("tokens", help="Print the token stream of a file")
    tokens.add_argument("path", help="Source file, or - for stdin")

    parse = sub.add_parser("parse", help="Parse a file and print its items")
    parse.add_argument("path", help="Source file, or - for stdin")

    repl = sub.add_parser("repl", help="Read source line by line")
    repl.add_argument("--parse", action="store_true", help="Parse each line instead of tokenizing it")

    return p


def _options(args: argparse.Namespace) -> CompilerOptions:
    options = CompilerOptions.from_env()
    overrides = {
        name: getattr(args, name)
        for name in ("keep_comments", "keyword_strategy", "integer_bits", "allow_trailing_comma")
        if getattr(args, name) is not None
    }
    return dataclasses.replace(options, **overrides)


def _read(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def format_token(token: Token, source: SourceText) -> str:
    """`line:col: KIND ("text")`"""
    line, column = token.span.start.line_column(source)
    text = token.text(source)
    return f'{line}:{column}: {token.kind.name} ("{text if text is not None else "?"}")'


def _print_diagnostics(diagnostics: List[Diagnostic], source: SourceText, filename: str):
    for diagnostic in diagnostics:
        sys.stderr.write(diagnostic.render(source, filename))


def run_tokens(source: SourceText, filename: str, options: CompilerOptions) -> int:
    lexer = Lexer(source, filename, options)
    data = lexer.source.encode("utf-8")
    for token in lexer:
        print(format_token(token, data))

    _print_diagnostics(lexer.get_diagnostics(), data, filename)
    return EXIT_ERRORS if lexer.has_errors() else EXIT_OK


def run_parse(source: SourceText, filename: str, options: CompilerOptions) -> int:
    result = parse_string(source, filename, options)
    for item in result.program.items:
        print(to_sexpr(item, interner=result.interner))

    _print_diagnostics(result.diagnostics(), source, filename)
    return EXIT_ERRORS if result.has_errors() else EXIT_OK


def run_repl(options: CompilerOptions, parse: bool = False) -> int:
    status = EXIT_OK
    while True:
        sys.stdout.write("> ")
        sys.stdout.flush()
        line = sys.stdin.readline()
        if not line:
            sys.stdout.write("\n")
            return status

        if parse:
            result = parse_string(line, "<repl>", options)
            for item in result.program.items:
                print(to_sexpr(item, interner=result.interner))
            _print_diagnostics(result.diagnostics(), line, "<repl>")
            if result.has_errors():
                status = EXIT_ERRORS
        elif run_tokens(line, "<repl>", options) != EXIT_OK:
            status = EXIT_ERRORS


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    try:
        options = _options(args)
    except ValueError as e:
        sys.stderr.write(f"serqlane: {e}\n")
        return EXIT_USAGE

    if args.cmd == "repl":
        return run_repl(options, parse=args.parse)

    try:
        source = _read(args.path)
        if args.cmd == "tokens":
            return run_tokens(source, args.path, options)
        return run_parse(source, args.path, options)
    except (OSError, InvalidSourceError) as e:
        LOG.debug("failed to read %s", args.path, exc_info=True)
        sys.stderr.write(f"serqlane: {e}\n")
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
