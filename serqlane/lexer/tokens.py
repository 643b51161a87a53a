"""
Token definitions for the Serqlane lexer.

Tokens are intentionally low-level: a kind and the span of source text it
covers. Literal values (integer magnitude, identifier text) are resolved from
the span by later stages, which keeps a token small and cheap to copy.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from .span import SourceSpan, SourceText


class TokenKind(Enum):
    """
    Enumeration of all token kinds in Serqlane.

    Organized by category for clarity and maintainability.
    """

    # ========================================================================
    # Brackets
    # ========================================================================
    LEFT_PAREN = auto()             # (
    RIGHT_PAREN = auto()            # )
    LEFT_BRACE = auto()             # {
    RIGHT_BRACE = auto()            # }
    LEFT_BRACKET = auto()           # [
    RIGHT_BRACKET = auto()          # ]

    # ========================================================================
    # Operators
    # ========================================================================

    # Arithmetic and bitwise
    PLUS = auto()                   # +
    MINUS = auto()                  # -
    MULTIPLY = auto()               # *
    DIVIDE = auto()                 # /
    MODULO = auto()                 # %
    BIT_AND = auto()                # &
    BIT_OR = auto()                 # |
    BIT_XOR = auto()                # ^
    LEFT_SHIFT = auto()             # <<
    RIGHT_SHIFT = auto()            # >>

    # Compound assignment
    PLUS_ASSIGN = auto()            # +=
    MINUS_ASSIGN = auto()           # -=
    MULTIPLY_ASSIGN = auto()        # *=
    DIVIDE_ASSIGN = auto()          # /=
    MODULO_ASSIGN = auto()          # %=
    BIT_AND_ASSIGN = auto()         # &=
    BIT_OR_ASSIGN = auto()          # |=
    BIT_XOR_ASSIGN = auto()         # ^=
    LEFT_SHIFT_ASSIGN = auto()      # <<=
    RIGHT_SHIFT_ASSIGN = auto()     # >>=

    # Logical
    LOGICAL_AND = auto()            # &&
    LOGICAL_OR = auto()             # ||
    LOGICAL_NOT = auto()            # !

    # Increment / decrement
    INCREMENT = auto()              # ++
    DECREMENT = auto()              # --

    # Comparison and assignment
    LESS_THAN = auto()              # <
    GREATER_THAN = auto()           # >
    ASSIGN = auto()                 # =
    EQUAL = auto()                  # ==
    NOT_EQUAL = auto()              # !=
    LESS_EQUAL = auto()             # <=
    GREATER_EQUAL = auto()          # >=

    # ========================================================================
    # Punctuation
    # ========================================================================
    BIT_NOT = auto()                # ~
    DOT = auto()                    # .
    COLON = auto()                  # :
    COMMA = auto()                  # ,
    SEMICOLON = auto()              # ; (explicit or injected at a newline)

    # ========================================================================
    # Literals
    # ========================================================================
    IDENTIFIER = auto()             # add, _tmp, größe
    STRING = auto()                 # "hello"
    NUMBER = auto()                 # 42
    COMMENT = auto()                # // ... and /* ... */

    # ========================================================================
    # Keywords
    # ========================================================================
    BREAK = auto()                  # break
    CONST = auto()                  # const
    CONTINUE = auto()               # continue
    ELSE = auto()                   # else
    ENUM = auto()                   # enum
    FALSE = auto()                  # false
    FOR = auto()                    # for
    FN = auto()                     # fn
    IF = auto()                     # if
    LET = auto()                    # let
    MUT = auto()                    # mut
    PUB = auto()                    # pub
    RETURN = auto()                 # return
    TRUE = auto()                   # true
    WHILE = auto()                  # while

    # ========================================================================
    # Sentinels
    # ========================================================================
    ERROR = auto()                  # Lexical error, see Lexer.errors
    EOF = auto()                    # End of input

    def describe(self) -> str:
        """Human readable form for diagnostics, e.g. `'('` or `identifier`."""
        spelling = SPELLINGS.get(self)
        if spelling is not None:
            return f"'{spelling}'"
        return self.name.lower().replace("_", " ")


@dataclass(frozen=True)
class Token:
    """
    A lexical token: its kind plus the span of source it covers.

    Tokens carry no payload; use `text()` with the originating source to
    get at the lexeme.
    """
    kind: TokenKind
    span: SourceSpan

    def text(self, source: SourceText) -> Optional[str]:
        return self.span.text(source)

    @property
    def is_synthetic(self) -> bool:
        """True for semicolons injected by the lexer at a newline."""
        return self.kind is TokenKind.SEMICOLON and self.span.is_empty()

    def __str__(self) -> str:
        return f"{self.kind.name}@{self.span}"


# Lookup tables for token classification

# Maximum length of a reserved word, see keywords.py
MAX_KEYWORD_LEN = 8

KEYWORDS: Dict[str, TokenKind] = {
    "break": TokenKind.BREAK,
    "const": TokenKind.CONST,
    "continue": TokenKind.CONTINUE,
    "else": TokenKind.ELSE,
    "enum": TokenKind.ENUM,
    "false": TokenKind.FALSE,
    "for": TokenKind.FOR,
    "fn": TokenKind.FN,
    "if": TokenKind.IF,
    "let": TokenKind.LET,
    "mut": TokenKind.MUT,
    "pub": TokenKind.PUB,
    "return": TokenKind.RETURN,
    "true": TokenKind.TRUE,
    "while": TokenKind.WHILE,
}

OPERATORS: Dict[str, TokenKind] = {
    # Brackets
    "(": TokenKind.LEFT_PAREN,
    ")": TokenKind.RIGHT_PAREN,
    "{": TokenKind.LEFT_BRACE,
    "}": TokenKind.RIGHT_BRACE,
    "[": TokenKind.LEFT_BRACKET,
    "]": TokenKind.RIGHT_BRACKET,

    # Arithmetic and bitwise
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.MULTIPLY,
    "/": TokenKind.DIVIDE,
    "%": TokenKind.MODULO,
    "&": TokenKind.BIT_AND,
    "|": TokenKind.BIT_OR,
    "^": TokenKind.BIT_XOR,
    "<<": TokenKind.LEFT_SHIFT,
    ">>": TokenKind.RIGHT_SHIFT,

    # Compound assignment
    "+=": TokenKind.PLUS_ASSIGN,
    "-=": TokenKind.MINUS_ASSIGN,
    "*=": TokenKind.MULTIPLY_ASSIGN,
    "/=": TokenKind.DIVIDE_ASSIGN,
    "%=": TokenKind.MODULO_ASSIGN,
    "&=": TokenKind.BIT_AND_ASSIGN,
    "|=": TokenKind.BIT_OR_ASSIGN,
    "^=": TokenKind.BIT_XOR_ASSIGN,
    "<<=": TokenKind.LEFT_SHIFT_ASSIGN,
    ">>=": TokenKind.RIGHT_SHIFT_ASSIGN,

    # Logical
    "&&": TokenKind.LOGICAL_AND,
    "||": TokenKind.LOGICAL_OR,
    "!": TokenKind.LOGICAL_NOT,
    "++": TokenKind.INCREMENT,
    "--": TokenKind.DECREMENT,

    # Comparison and assignment
    "<": TokenKind.LESS_THAN,
    ">": TokenKind.GREATER_THAN,
    "=": TokenKind.ASSIGN,
    "==": TokenKind.EQUAL,
    "!=": TokenKind.NOT_EQUAL,
    "<=": TokenKind.LESS_EQUAL,
    ">=": TokenKind.GREATER_EQUAL,

    # Punctuation
    "~": TokenKind.BIT_NOT,
    ".": TokenKind.DOT,
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
}

SPELLINGS: Dict[TokenKind, str] = {
    **{kind: text for text, kind in OPERATORS.items()},
    **{kind: text for text, kind in KEYWORDS.items()},
}

# A newline after one of these ends the current expression.
EXPRESSION_TERMINATORS: FrozenSet[TokenKind] = frozenset({
    # Punctuation
    TokenKind.RIGHT_PAREN,
    TokenKind.RIGHT_BRACE,
    TokenKind.RIGHT_BRACKET,

    # Identifiers and literals
    TokenKind.IDENTIFIER,
    TokenKind.STRING,
    TokenKind.NUMBER,

    # Keywords
    TokenKind.BREAK,
    TokenKind.CONTINUE,
    TokenKind.RETURN,

    # Operators
    TokenKind.INCREMENT,
    TokenKind.DECREMENT,
})
