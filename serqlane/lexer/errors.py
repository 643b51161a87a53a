"""
Error handling for the Serqlane lexer.

Lexical errors never stop the scanner: each one becomes an ERROR token in the
stream and a `LexerError` on `Lexer.errors`. The diagnostic attached to the
error only locates the problem by span; turning that into line and column
happens in `Diagnostic.render`, which needs the source text.
"""

from enum import Enum
from typing import Optional, List
from dataclasses import dataclass

from .span import SourceSpan, SourceText


@dataclass
class Diagnostic:
    """Base class for compiler diagnostics (errors, warnings, info)."""
    message: str
    span: SourceSpan
    severity: str  # "error", "warning", "info", "hint"
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None

    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        result = f"{severity_prefix}: {self.message}\n"
        result += f"  --> {self.span}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result

    def render(self, source: SourceText, filename: str = "<input>") -> str:
        """
        Format the diagnostic with a line:column location.

        Example:
            error[L001]: unrecognized character '$'
              --> main.sq:3:7
        """
        line, column = self.span.start.line_column(source)
        header = self.severity
        if self.code:
            header += f"[{self.code}]"

        result = f"{header}: {self.message}\n"
        result += f"  --> {filename}:{line}:{column}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += f"  did you mean: {', '.join(self.suggestions)}\n"

        return result


class LexicalErrorKind(Enum):
    UNRECOGNIZED_CHARACTER = "L001"
    UNTERMINATED_STRING = "L002"
    UNTERMINATED_COMMENT = "L003"


class LexerError(Exception):
    """
    A recoverable lexical error.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        span: SourceSpan,
        kind: LexicalErrorKind,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.kind = kind
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

    def __str__(self) -> str:
        return str(self.diagnostic)


class ErrorRecovery:
    """
    Suggestion helpers shared by the lexer and parser diagnostics.
    """

    @staticmethod
    def suggest_keyword_corrections(invalid_word: str) -> List[str]:
        """Suggest corrections for misspelled keywords using edit distance."""
        from .tokens import KEYWORDS

        word = invalid_word.lower()
        suggestions = []
        for keyword in KEYWORDS.keys():
            if keyword == word:
                continue
            distance = ErrorRecovery._edit_distance(word, keyword)
            if distance <= 2:  # Allow up to 2 character differences
                suggestions.append(keyword)

        return sorted(suggestions, key=lambda k: (ErrorRecovery._edit_distance(word, k), k))[:3]

    @staticmethod
    def _edit_distance(s1: str, s2: str) -> int:
        """Calculate Levenshtein distance between two strings."""
        if len(s1) < len(s2):
            return ErrorRecovery._edit_distance(s2, s1)

        if len(s2) == 0:
            return len(s1)

        previous_row = list(range(len(s2) + 1))
        for i, c1 in enumerate(s1):
            current_row = [i + 1]
            for j, c2 in enumerate(s2):
                insertions = previous_row[j + 1] + 1
                deletions = current_row[j] + 1
                substitutions = previous_row[j] + (c1 != c2)
                current_row.append(min(insertions, deletions, substitutions))
            previous_row = current_row

        return previous_row[-1]


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Unrecognized character",
    "L002": "Unterminated string literal",
    "L003": "Unterminated block comment",
}


# Helper functions for creating common errors
def create_unrecognized_character_error(char: str, span: SourceSpan) -> LexerError:
    """Create an error for a character that starts no token."""
    if char.isprintable():
        help_text = f"The character '{char}' is not valid in Serqlane source code."
    else:
        help_text = f"Non-printable character (Unicode: U+{ord(char):04X}) is not allowed."

    return LexerError(
        message=f"unrecognized character '{char}'",
        span=span,
        kind=LexicalErrorKind.UNRECOGNIZED_CHARACTER,
        help_text=help_text,
    )


def create_unterminated_string_error(span: SourceSpan) -> LexerError:
    """Create an error for a string literal that runs into the end of input."""
    return LexerError(
        message="unterminated string literal",
        span=span,
        kind=LexicalErrorKind.UNTERMINATED_STRING,
        help_text="String literals must be closed with a matching '\"' quote.",
    )


def create_unterminated_comment_error(span: SourceSpan) -> LexerError:
    """Create an error for a block comment without its closing `*/`."""
    return LexerError(
        message="unterminated block comment",
        span=span,
        kind=LexicalErrorKind.UNTERMINATED_COMMENT,
        help_text="Block comments must be closed with '*/'.",
    )
