"""
Serqlane Lexer Package

Implements the lexical analyzer (tokenizer) for the Serqlane language.

Key Features:
- Byte-exact UTF-8 spans on every token
- Constant time keyword recognition (perfect hash or decision ladder)
- Implicit semicolons at newlines after expression-ending tokens
- Error tokens and diagnostics instead of aborting on bad input
"""

from .span import SourcePosition, SourceSpan, MAX_SOURCE_LEN
from .tokens import Token, TokenKind, EXPRESSION_TERMINATORS, KEYWORDS, OPERATORS
from .keywords import lookup_keyword, perfect_hash_keyword, ladder_keyword
from .lexer import (
    Lexer, SourceTooLargeError, InvalidSourceError, tokenize_string, tokenize_file
)
from .errors import Diagnostic, LexerError, LexicalErrorKind

__all__ = [
    "SourcePosition",
    "SourceSpan",
    "MAX_SOURCE_LEN",
    "Token",
    "TokenKind",
    "EXPRESSION_TERMINATORS",
    "KEYWORDS",
    "OPERATORS",
    "lookup_keyword",
    "perfect_hash_keyword",
    "ladder_keyword",
    "Lexer",
    "SourceTooLargeError",
    "InvalidSourceError",
    "tokenize_string",
    "tokenize_file",
    "Diagnostic",
    "LexerError",
    "LexicalErrorKind",
]
