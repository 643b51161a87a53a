"""
Error handling for the Serqlane parser.

Syntax errors are ordinary exceptions raised inside the parser, caught at
statement and item boundaries, recorded on `Parser.errors`, and followed by
panic-mode recovery. None of them aborts the parse.
"""

from enum import Enum
from typing import Optional, List, Union

from ..lexer.span import SourceSpan
from ..lexer.tokens import Token, TokenKind
from ..lexer.errors import Diagnostic, ErrorRecovery


class ParseErrorKind(Enum):
    UNEXPECTED_TOKEN = "P001"
    UNSUPPORTED_CONSTRUCT = "P002"
    INTEGER_OVERFLOW = "P003"
    NESTING_TOO_DEEP = "P004"


class ParseError(Exception):
    """
    A syntax error found by the parser.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        span: SourceSpan,
        kind: ParseErrorKind,
        token: Optional[Token] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.token = token
        self.diagnostic = Diagnostic(
            message=message,
            span=span,
            severity="error",
            code=kind.value,
            help_text=help_text,
            suggestions=suggestions
        )

    @property
    def span(self) -> SourceSpan:
        return self.diagnostic.span

    def same_report(self, other: "ParseError") -> bool:
        """True if both errors would print the same message at the same place."""
        return (
            self.kind is other.kind
            and self.span == other.span
            and self.diagnostic.message == other.diagnostic.message
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


class UnexpectedTokenError(ParseError):
    """A token showed up where something else was required."""

    def __init__(self, expected: Union[TokenKind, str], actual: Token,
                 help_text: Optional[str] = None, suggestions: Optional[List[str]] = None):
        self.expected = expected
        self.actual = actual.kind
        self.at = actual.span

        expected_str = expected.describe() if isinstance(expected, TokenKind) else expected
        super().__init__(
            message=f"expected {expected_str}, found {actual.kind.describe()}",
            span=actual.span,
            kind=ParseErrorKind.UNEXPECTED_TOKEN,
            token=actual,
            help_text=help_text,
            suggestions=suggestions,
        )


class UnsupportedConstructError(ParseError):
    """Valid tokens forming something the grammar does not handle yet."""

    def __init__(self, construct: str, token: Token):
        self.construct = construct
        super().__init__(
            message=f"{construct} are not supported yet",
            span=token.span,
            kind=ParseErrorKind.UNSUPPORTED_CONSTRUCT,
            token=token,
        )


class IntegerOverflowError(ParseError):
    """An integer literal too large for the target integer width."""

    def __init__(self, text: str, bits: int, token: Token):
        self.text = text
        self.bits = bits
        super().__init__(
            message=f"integer literal {text} does not fit in {bits} bits",
            span=token.span,
            kind=ParseErrorKind.INTEGER_OVERFLOW,
            token=token,
            help_text=f"The largest supported literal is {(1 << bits) - 1}.",
        )


class NestingTooDeepError(ParseError):
    """Expressions or blocks nested past `CompilerOptions.max_nesting_depth`."""

    def __init__(self, limit: int, token: Token):
        self.limit = limit
        super().__init__(
            message="expression nested too deeply",
            span=token.span,
            kind=ParseErrorKind.NESTING_TOO_DEEP,
            token=token,
            help_text=f"At most {limit} levels of nesting are allowed.",
        )


class SyntaxErrorRecovery:
    """
    Suggestions attached to syntax errors.
    """

    @staticmethod
    def missing_token_help(expected: TokenKind) -> Optional[str]:
        """Hint on how to supply a missing token."""
        token_hints = {
            TokenKind.SEMICOLON: "Add a semicolon ';' or a line break to end the statement",
            TokenKind.RIGHT_PAREN: "Add a closing parenthesis ')'",
            TokenKind.RIGHT_BRACKET: "Add a closing bracket ']'",
            TokenKind.RIGHT_BRACE: "Add a closing brace '}'",
            TokenKind.LEFT_BRACE: "Add an opening brace '{' to start a block",
            TokenKind.COLON: "Add a colon ':' before the type",
            TokenKind.ASSIGN: "Add an assignment operator '='",
        }

        return token_hints.get(expected)

    @staticmethod
    def suggest_keyword(found_text: Optional[str]) -> List[str]:
        """Suggest keywords close to a misspelled identifier."""
        if not found_text:
            return []
        return [f"Did you mean '{keyword}'?"
                for keyword in ErrorRecovery.suggest_keyword_corrections(found_text)]


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "Unsupported construct",
    "P003": "Integer literal overflow",
    "P004": "Nesting too deep",
}


# Helper functions for creating common parser errors

def create_unexpected_token_error(expected: Union[TokenKind, str], found: Token,
                                  found_text: Optional[str] = None) -> UnexpectedTokenError:
    """Create an error for an unexpected token."""
    suggestions: List[str] = []
    if found.kind is TokenKind.IDENTIFIER:
        suggestions.extend(SyntaxErrorRecovery.suggest_keyword(found_text))

    help_text = None
    if isinstance(expected, TokenKind):
        help_text = SyntaxErrorRecovery.missing_token_help(expected)
    if found.kind is TokenKind.EOF:
        help_text = "The parser reached the end of the input too early."

    return UnexpectedTokenError(expected, found, help_text=help_text, suggestions=suggestions or None)
