"""
Serqlane Parser Package

Recursive descent parser with Pratt expression parsing for Serqlane.

Key Features:
- Binding-power based precedence and associativity
- Span-addressed AST with interned identifiers
- Panic-mode error recovery collecting every syntax error in one pass
"""

from .parser import Parser, ParseResult, Precedence, parse_string, parse_file
from .ast_nodes import *
from .errors import (
    ParseError, ParseErrorKind, UnexpectedTokenError, UnsupportedConstructError,
    IntegerOverflowError, NestingTooDeepError
)
from .printer import SExpressionPrinter, to_sexpr

__all__ = [
    "Parser",
    "ParseResult",
    "Precedence",
    "parse_string",
    "parse_file",
    "ParseError",
    "ParseErrorKind",
    "UnexpectedTokenError",
    "UnsupportedConstructError",
    "IntegerOverflowError",
    "NestingTooDeepError",
    "SExpressionPrinter",
    "to_sexpr",
]
