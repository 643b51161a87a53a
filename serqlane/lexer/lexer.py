"""
Serqlane Lexer - turns source text into a lazy stream of tokens

The lexer walks the characters of the source once, keeping a byte offset
next to the character index so every token gets an exact UTF-8 span. It
looks at most two characters ahead.

Statements are terminated by semicolons, but most of them are written by the
lexer rather than the user: a newline that follows a token which can end an
expression (see EXPRESSION_TERMINATORS) turns into a zero-width SEMICOLON.

Errors never stop the scan. A bad character, an unterminated string or an
unterminated block comment becomes an ERROR token and a LexerError on
`Lexer.errors`, and scanning picks up right after it.
"""

import logging
from typing import Iterator, List, Optional

from ..config import CompilerOptions
from .span import MAX_SOURCE_LEN, SourceSpan, SourceText, utf8_width
from .tokens import Token, TokenKind, EXPRESSION_TERMINATORS, MAX_KEYWORD_LEN
from .keywords import STRATEGIES
from .errors import (
    LexerError, create_unrecognized_character_error,
    create_unterminated_string_error, create_unterminated_comment_error
)

LOG = logging.getLogger("serqlane.lexer")


class SourceTooLargeError(ValueError):
    """Source text whose UTF-8 encoding does not fit 32-bit offsets."""


class InvalidSourceError(ValueError):
    """Source bytes that are not valid UTF-8, or text that cannot be encoded."""


# Pattern_White_Space. The set is stable, so it is spelled out.
WHITESPACE = frozenset(
    "\t"        # tab
    "\n"        # line feed
    "\x0b"      # vertical tab
    "\x0c"      # form feed
    "\r"        # carriage return
    " "         # space
    "\x85"      # NEXT LINE
    "\u200e"    # LEFT-TO-RIGHT MARK
    "\u200f"    # RIGHT-TO-LEFT MARK
    "\u2028"    # LINE SEPARATOR
    "\u2029"    # PARAGRAPH SEPARATOR
)

# Characters that are a complete token on their own.
SINGLE_CHAR_TOKENS = {
    "(": TokenKind.LEFT_PAREN,
    ")": TokenKind.RIGHT_PAREN,
    "{": TokenKind.LEFT_BRACE,
    "}": TokenKind.RIGHT_BRACE,
    "[": TokenKind.LEFT_BRACKET,
    "]": TokenKind.RIGHT_BRACKET,
    "~": TokenKind.BIT_NOT,
    ".": TokenKind.DOT,
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
}

# first char -> (kind alone, [(next char, kind)...])
OPERATOR_CHAINS = {
    "+": (TokenKind.PLUS, (("=", TokenKind.PLUS_ASSIGN), ("+", TokenKind.INCREMENT))),
    "-": (TokenKind.MINUS, (("=", TokenKind.MINUS_ASSIGN), ("-", TokenKind.DECREMENT))),
    "*": (TokenKind.MULTIPLY, (("=", TokenKind.MULTIPLY_ASSIGN),)),
    "/": (TokenKind.DIVIDE, (("=", TokenKind.DIVIDE_ASSIGN),)),
    "%": (TokenKind.MODULO, (("=", TokenKind.MODULO_ASSIGN),)),
    "&": (TokenKind.BIT_AND, (("=", TokenKind.BIT_AND_ASSIGN), ("&", TokenKind.LOGICAL_AND))),
    "|": (TokenKind.BIT_OR, (("=", TokenKind.BIT_OR_ASSIGN), ("|", TokenKind.LOGICAL_OR))),
    "^": (TokenKind.BIT_XOR, (("=", TokenKind.BIT_XOR_ASSIGN),)),
    "=": (TokenKind.ASSIGN, (("=", TokenKind.EQUAL),)),
    "!": (TokenKind.LOGICAL_NOT, (("=", TokenKind.NOT_EQUAL),)),
}

# Shift operators need a second level: `<` `<=` `<<` `<<=`.
SHIFT_CHAINS = {
    "<": (TokenKind.LESS_THAN, TokenKind.LESS_EQUAL, TokenKind.LEFT_SHIFT, TokenKind.LEFT_SHIFT_ASSIGN),
    ">": (TokenKind.GREATER_THAN, TokenKind.GREATER_EQUAL, TokenKind.RIGHT_SHIFT, TokenKind.RIGHT_SHIFT_ASSIGN),
}


def is_identifier_start(char: str) -> bool:
    """XID_Start or underscore."""
    return char == "_" or char.isidentifier()


def is_identifier_continue(char: str) -> bool:
    """XID_Continue."""
    return ("a" + char).isidentifier()


class Lexer:
    """
    Serqlane lexical analyzer.

    A Lexer is an iterator of Token. It yields exactly one EOF token as its
    last element and is not restartable; build a new Lexer to scan again.

    Example:
        >>> [t.kind.name for t in Lexer("x\\n")]
        ['IDENTIFIER', 'SEMICOLON', 'EOF']
    """

    def __init__(self, source: SourceText, filename: str = "<input>",
                 options: Optional[CompilerOptions] = None):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code as text or UTF-8 bytes
            filename: Name of source file for error reporting
            options: Compiler options, defaults if omitted

        Raises:
            SourceTooLargeError: If the encoded source exceeds 4GiB
            InvalidSourceError: If the source is not valid UTF-8
        """
        if isinstance(source, (bytes, bytearray)):
            try:
                text = bytes(source).decode("utf-8")
            except UnicodeDecodeError as e:
                raise InvalidSourceError(f"{filename}: source is not valid UTF-8: {e}") from e
            size = len(source)
        else:
            text = source
            try:
                size = len(text.encode("utf-8"))
            except UnicodeEncodeError as e:
                raise InvalidSourceError(f"{filename}: source cannot be encoded as UTF-8: {e}") from e

        if size > MAX_SOURCE_LEN:
            raise SourceTooLargeError(
                f"{filename}: source is {size} bytes, the limit is {MAX_SOURCE_LEN}"
            )

        self.source = text
        self.filename = filename
        self.options = options or CompilerOptions()
        self.errors: List[LexerError] = []

        self.pos = 0          # character index into self.source
        self.offset = 0       # byte offset of self.pos
        self.previous: Optional[TokenKind] = None
        self._finished = False
        self._is_keyword = STRATEGIES[self.options.keyword_strategy]

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        if self._finished:
            raise StopIteration

        token = self._scan()
        if token.kind is TokenKind.EOF:
            self._finished = True
        return token

    def tokenize(self) -> List[Token]:
        """
        Drain the lexer.

        Returns:
            The remaining tokens, ending with EOF
        """
        return list(self)

    # ========================================================================
    # Scanning
    # ========================================================================

    def _scan(self) -> Token:
        trivia = self._skip_trivia()
        if trivia is not None:
            return trivia

        start = self.offset
        char = self._advance()
        if char is None:
            return self._emit(TokenKind.EOF, start)

        if is_identifier_start(char):
            return self._emit(self._name(char), start)

        if "0" <= char <= "9":
            while self._is_digit(self._peek()):
                self._advance()
            return self._emit(TokenKind.NUMBER, start)

        if char == '"':
            return self._string(start)

        kind = SINGLE_CHAR_TOKENS.get(char)
        if kind is not None:
            return self._emit(kind, start)

        if char in OPERATOR_CHAINS:
            alone, followers = OPERATOR_CHAINS[char]
            return self._emit(self._match(followers, alone), start)

        if char in SHIFT_CHAINS:
            single, single_eq, double, double_eq = SHIFT_CHAINS[char]
            if self._peek() == char:
                self._advance()
                kind = self._match((("=", double_eq),), double)
            else:
                kind = self._match((("=", single_eq),), single)
            return self._emit(kind, start)

        token = self._emit(TokenKind.ERROR, start)
        self._report(create_unrecognized_character_error(char, token.span))
        return token

    def _skip_trivia(self) -> Optional[Token]:
        """
        Skip whitespace and comments.

        Returns a token when the trivia itself produces one: an injected
        semicolon, a COMMENT with keep_comments enabled, or an ERROR for an
        unterminated block comment.
        """
        while True:
            char = self._peek()
            if char is None:
                return None

            if char in WHITESPACE:
                if char == "\n" and self.previous in EXPRESSION_TERMINATORS:
                    # The newline itself is consumed on the next call, when
                    # previous is SEMICOLON, so this fires once per run.
                    return self._emit(TokenKind.SEMICOLON, self.offset)
                self._advance()
                continue

            if char == "/" and self._peek(1) == "/":
                start = self.offset
                while self._peek() not in (None, "\n"):
                    self._advance()
                if self.options.keep_comments:
                    return self._emit(TokenKind.COMMENT, start)
                continue

            if char == "/" and self._peek(1) == "*":
                start = self.offset
                self._advance()
                self._advance()
                while not (self._peek() == "*" and self._peek(1) == "/"):
                    if self._advance() is None:
                        token = self._emit(TokenKind.ERROR, start)
                        self._report(create_unterminated_comment_error(token.span))
                        return token
                self._advance()
                self._advance()
                if self.options.keep_comments:
                    return self._emit(TokenKind.COMMENT, start)
                continue

            return None

    def _string(self, start: int) -> Token:
        while self._peek() not in (None, '"'):
            self._advance()

        if self._advance() is None:
            token = self._emit(TokenKind.ERROR, start)
            self._report(create_unterminated_string_error(token.span))
            return token

        return self._emit(TokenKind.STRING, start)

    def _name(self, first: str) -> TokenKind:
        """Consume an identifier and classify it as keyword or IDENTIFIER."""
        buf = bytearray(MAX_KEYWORD_LEN)
        length = 0
        candidate = "a" <= first <= "z"
        if candidate:
            buf[0] = ord(first)
            length = 1

        # Mirror the identifier into buf for as long as it could still be a
        # keyword. Candidacy never comes back once lost.
        while True:
            char = self._peek()
            if char is None:
                break
            if candidate and length < MAX_KEYWORD_LEN and "a" <= char <= "z":
                buf[length] = ord(char)
                length += 1
            elif is_identifier_continue(char):
                candidate = False
            else:
                break
            self._advance()

        if candidate:
            kind = self._is_keyword(buf, length)
            if kind is not None:
                return kind

        return TokenKind.IDENTIFIER

    # ========================================================================
    # Cursor helpers
    # ========================================================================

    def _match(self, followers, default: TokenKind) -> TokenKind:
        """Consume the next character if it extends the operator."""
        next_char = self._peek()
        for char, kind in followers:
            if next_char == char:
                self._advance()
                return kind
        return default

    def _emit(self, kind: TokenKind, start: int) -> Token:
        # Comments and errors leave semicolon injection to the token before them.
        if kind not in (TokenKind.COMMENT, TokenKind.ERROR):
            self.previous = kind
        return Token(kind, SourceSpan.new(start, self.offset))

    def _report(self, error: LexerError):
        LOG.debug("%s: %s at %s", self.filename, error.diagnostic.message, error.span)
        self.errors.append(error)

    def _advance(self) -> Optional[str]:
        """Consume one character, keeping the byte offset in step."""
        if self.pos >= len(self.source):
            return None
        char = self.source[self.pos]
        self.pos += 1
        self.offset += utf8_width(char)
        return char

    def _peek(self, ahead: int = 0) -> Optional[str]:
        """Peek at character ahead without advancing."""
        index = self.pos + ahead
        if index < len(self.source):
            return self.source[index]
        return None

    @staticmethod
    def _is_digit(char: Optional[str]) -> bool:
        return char is not None and "0" <= char <= "9"

    def has_errors(self) -> bool:
        """Check if lexer encountered any errors."""
        return len(self.errors) > 0

    def get_diagnostics(self):
        """Get the diagnostics of all errors reported so far."""
        return [error.diagnostic for error in self.errors]


def tokenize_string(source: SourceText, filename: str = "<string>",
                    options: Optional[CompilerOptions] = None) -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting
        options: Compiler options

    Returns:
        List of tokens

    Raises:
        LexerError: If lexing fails
    """
    lexer = Lexer(source, filename, options)
    tokens = lexer.tokenize()

    if lexer.has_errors():
        # Raise the first error encountered
        raise lexer.errors[0]

    return tokens


def tokenize_file(filepath: str, options: Optional[CompilerOptions] = None) -> List[Token]:
    """
    Convenience function to tokenize a source file.

    Raises:
        LexerError: If lexing fails
        OSError: If file cannot be read
    """
    with open(filepath, 'rb') as f:
        source = f.read()

    return tokenize_string(source, filepath, options)
