"""
Serqlane compiler front end.

Turns UTF-8 Serqlane source into a span-addressed AST:

    >>> from serqlane import parse_string, to_sexpr
    >>> result = parse_string("fn add(a: i32, b: i32): i32 { a + b }")
    >>> to_sexpr(result.program, result.source)
    '(fn add ((a i32) (b i32)) i32 (block (+ a b)))'
"""

from ._version import __version__

from .config import CompilerOptions
from .lexer import (
    Lexer, Token, TokenKind, SourcePosition, SourceSpan, LexerError,
    tokenize_string, tokenize_file
)
from .parser import (
    Parser, ParseResult, ParseError, Program, parse_string, parse_file, to_sexpr
)

__all__ = [
    "__version__",
    "CompilerOptions",
    "Lexer",
    "Token",
    "TokenKind",
    "SourcePosition",
    "SourceSpan",
    "LexerError",
    "tokenize_string",
    "tokenize_file",
    "Parser",
    "ParseResult",
    "ParseError",
    "Program",
    "parse_string",
    "parse_file",
    "to_sexpr",
]
