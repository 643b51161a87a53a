"""
Serqlane Parser

A recursive descent parser for items and statements with an embedded Pratt
(top-down operator precedence) parser for expressions.

Every infix operator has a pair of binding powers (left, right). Left
associative operators use (n, n + 1), so an operator of the same level to
the right cannot steal the operand; right associative operators (the
assignment family) use (n + 1, n). Prefix operators only have a right power,
postfix operators (`(` call and `[` index) only a left power.

Syntax errors do not stop the parse. They are recorded on `Parser.errors`,
after which the parser skips ahead to the next statement boundary and
carries on.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from ..config import CompilerOptions
from ..lexer.lexer import Lexer
from ..lexer.errors import Diagnostic, LexerError
from ..lexer.span import SourceSpan, SourceText
from ..lexer.tokens import Token, TokenKind
from .ast_nodes import (
    Block, BoolLiteral, Call, Expression, ExpressionStatement, Function,
    FunctionArg, Ident, Identifier, Index, IntegerLiteral, Interner, Item,
    ItemStatement, Program, Statement, VariableStatement,
    make_infix_operator, make_prefix_operator
)
from .errors import (
    ParseError, IntegerOverflowError, NestingTooDeepError, UnsupportedConstructError,
    create_unexpected_token_error
)

LOG = logging.getLogger("serqlane.parser")


class Precedence(IntEnum):
    """Operator precedence levels, loosest first."""
    NONE = 0
    ASSIGNMENT = 1      # = += -= *= /= %= &= |= ^= <<= >>=
    LOGICAL_OR = 3      # ||
    LOGICAL_AND = 5     # &&
    COMPARISON = 7      # == != < <= > >=
    BIT_OR = 9          # |
    BIT_XOR = 11        # ^
    BIT_AND = 13        # &
    SHIFT = 15          # << >>
    TERM = 17           # + -
    FACTOR = 19         # * / %
    PREFIX = 23         # - ! ~ * &
    POSTFIX = 25        # call, index


INFIX_PRECEDENCE: Dict[TokenKind, Precedence] = {
    TokenKind.MULTIPLY: Precedence.FACTOR,
    TokenKind.DIVIDE: Precedence.FACTOR,
    TokenKind.MODULO: Precedence.FACTOR,
    TokenKind.PLUS: Precedence.TERM,
    TokenKind.MINUS: Precedence.TERM,
    TokenKind.LEFT_SHIFT: Precedence.SHIFT,
    TokenKind.RIGHT_SHIFT: Precedence.SHIFT,
    TokenKind.BIT_AND: Precedence.BIT_AND,
    TokenKind.BIT_XOR: Precedence.BIT_XOR,
    TokenKind.BIT_OR: Precedence.BIT_OR,
    TokenKind.EQUAL: Precedence.COMPARISON,
    TokenKind.NOT_EQUAL: Precedence.COMPARISON,
    TokenKind.LESS_THAN: Precedence.COMPARISON,
    TokenKind.LESS_EQUAL: Precedence.COMPARISON,
    TokenKind.GREATER_THAN: Precedence.COMPARISON,
    TokenKind.GREATER_EQUAL: Precedence.COMPARISON,
    TokenKind.LOGICAL_AND: Precedence.LOGICAL_AND,
    TokenKind.LOGICAL_OR: Precedence.LOGICAL_OR,
    TokenKind.ASSIGN: Precedence.ASSIGNMENT,
    TokenKind.PLUS_ASSIGN: Precedence.ASSIGNMENT,
    TokenKind.MINUS_ASSIGN: Precedence.ASSIGNMENT,
    TokenKind.MULTIPLY_ASSIGN: Precedence.ASSIGNMENT,
    TokenKind.DIVIDE_ASSIGN: Precedence.ASSIGNMENT,
    TokenKind.MODULO_ASSIGN: Precedence.ASSIGNMENT,
    TokenKind.BIT_AND_ASSIGN: Precedence.ASSIGNMENT,
    TokenKind.BIT_OR_ASSIGN: Precedence.ASSIGNMENT,
    TokenKind.BIT_XOR_ASSIGN: Precedence.ASSIGNMENT,
    TokenKind.LEFT_SHIFT_ASSIGN: Precedence.ASSIGNMENT,
    TokenKind.RIGHT_SHIFT_ASSIGN: Precedence.ASSIGNMENT,
}

RIGHT_ASSOCIATIVE = frozenset(
    kind for kind, level in INFIX_PRECEDENCE.items() if level is Precedence.ASSIGNMENT
)

PREFIX_OPERATORS = frozenset({
    TokenKind.MINUS,
    TokenKind.LOGICAL_NOT,
    TokenKind.BIT_NOT,
    TokenKind.MULTIPLY,
    TokenKind.BIT_AND,
})

POSTFIX_OPERATORS = frozenset({TokenKind.LEFT_PAREN, TokenKind.LEFT_BRACKET})

# Never handed to the grammar. ERROR tokens are already reported by the lexer.
SKIPPED_TOKENS = frozenset({TokenKind.COMMENT, TokenKind.ERROR})


def infix_binding_power(kind: TokenKind) -> Optional[Tuple[int, int]]:
    level = INFIX_PRECEDENCE.get(kind)
    if level is None:
        return None
    if kind in RIGHT_ASSOCIATIVE:
        return level + 1, int(level)
    return int(level), level + 1


def prefix_binding_power(kind: TokenKind) -> Optional[int]:
    return int(Precedence.PREFIX) if kind in PREFIX_OPERATORS else None


def postfix_binding_power(kind: TokenKind) -> Optional[int]:
    return int(Precedence.POSTFIX) if kind in POSTFIX_OPERATORS else None


class Parser:
    """
    Serqlane parser.

    Pulls tokens from a Lexer one at a time with a single token of
    lookahead and produces items on demand.

    Example:
        >>> parser = Parser("fn main() { 1 + 2 }")
        >>> program = parser.parse()
        >>> len(program.items), parser.errors
        (1, [])
    """

    def __init__(self, source: SourceText, filename: str = "<input>",
                 options: Optional[CompilerOptions] = None):
        """
        Initialize the parser over a source text.

        Args:
            source: Source code as text or UTF-8 bytes
            filename: Name of source file for error reporting
            options: Compiler options, defaults if omitted
        """
        self.options = options or CompilerOptions()
        self.filename = filename
        self.lexer = Lexer(source, filename, self.options)
        # Spans are resolved against the encoded text.
        self.data = self.lexer.source.encode("utf-8")
        self.interner = Interner()
        self.errors: List[ParseError] = []

        self._depth = 0
        self._previous: Optional[Token] = None
        self._current = self._pull()

        self._init_parsing_tables()

    def _init_parsing_tables(self):
        """Initialize the prefix and postfix dispatch tables."""

        # Tokens that can start an expression
        self.prefix_parsers: Dict[TokenKind, Callable[[], Expression]] = {
            TokenKind.NUMBER: self._parse_integer_literal,
            TokenKind.TRUE: self._parse_bool_literal,
            TokenKind.FALSE: self._parse_bool_literal,
            TokenKind.IDENTIFIER: self._parse_identifier,
            TokenKind.STRING: self._parse_string_literal,
            TokenKind.LEFT_PAREN: self._parse_grouping,
            TokenKind.LEFT_BRACE: self._parse_block_expression,
        }
        for kind in PREFIX_OPERATORS:
            self.prefix_parsers[kind] = self._parse_prefix

        self.postfix_parsers: Dict[TokenKind, Callable[[Expression], Expression]] = {
            TokenKind.LEFT_PAREN: self._parse_call,
            TokenKind.LEFT_BRACKET: self._parse_index,
        }

    # ========================================================================
    # Items
    # ========================================================================

    def parse(self) -> Program:
        """
        Parse the remaining input into a Program.

        Syntax errors do not raise; check `self.errors` (and
        `self.lexer.errors`) afterwards.
        """
        items = list(self)
        return Program(items, SourceSpan.new(0, len(self.data)))

    def __iter__(self) -> Iterator[Item]:
        while True:
            item = self.next_item()
            if item is None:
                return
            yield item

    def next_item(self) -> Optional[Item]:
        """Parse and return the next top-level item, or None at the end."""
        while True:
            token = self._peek()
            if token.kind is TokenKind.EOF:
                return None

            if self._match(TokenKind.SEMICOLON):
                continue

            if token.kind is TokenKind.RIGHT_BRACE:
                # Nothing left open at this level.
                self._report(create_unexpected_token_error("item", token))
                self._advance()
                continue

            try:
                item = self._parse_item()
            except ParseError as e:
                self._report(e)
                self._synchronize()
                continue

            if not (self._check(TokenKind.EOF) or self._match(TokenKind.SEMICOLON)):
                self._report(create_unexpected_token_error(TokenKind.SEMICOLON, self._peek()))
                self._synchronize()

            LOG.debug("%s: parsed item at %s", self.filename, item.span)
            return item

    def _parse_item(self) -> Item:
        if self._check(TokenKind.FN):
            return self._parse_function()

        token = self._peek()
        raise create_unexpected_token_error("item", token, self._text(token))

    def _parse_function(self) -> Function:
        """Parse `fn name(arg: type, ...) [: type] { statements }`."""
        fn_token = self._consume(TokenKind.FN)
        name = self._consume_ident()

        self._consume(TokenKind.LEFT_PAREN)
        args: List[FunctionArg] = []
        while not self._check(TokenKind.RIGHT_PAREN):
            args.append(self._parse_function_arg())
            if not self._match(TokenKind.COMMA):
                break
            if self._check(TokenKind.RIGHT_PAREN) and not self.options.allow_trailing_comma:
                raise create_unexpected_token_error(TokenKind.IDENTIFIER, self._peek())
        self._consume(TokenKind.RIGHT_PAREN)

        ret = None
        if self._match(TokenKind.COLON):
            ret = self._consume_ident()

        statements, block_span = self._parse_block()
        return Function(name, args, ret, statements, fn_token.span.join(block_span))

    def _parse_function_arg(self) -> FunctionArg:
        name = self._consume_ident()
        self._consume(TokenKind.COLON)
        typ = self._consume_ident()
        return FunctionArg(name, typ, name.span.join(typ.span))

    # ========================================================================
    # Statements
    # ========================================================================

    def _parse_block(self) -> Tuple[List[Statement], SourceSpan]:
        """Parse `{ statement* }`, recovering from errors in statements."""
        with self._nested():
            open_brace = self._consume(TokenKind.LEFT_BRACE)
            statements: List[Statement] = []

            while not self._check(TokenKind.RIGHT_BRACE) and not self._check(TokenKind.EOF):
                # Empty statements
                if self._match(TokenKind.SEMICOLON):
                    continue

                stmt = self._parse_statement_or_recover()
                if stmt is not None:
                    statements.append(stmt)

            close_brace = self._consume(TokenKind.RIGHT_BRACE)
        return statements, open_brace.span.join(close_brace.span)

    def _parse_statement_or_recover(self) -> Optional[Statement]:
        try:
            stmt = self._parse_statement()
        except ParseError as e:
            self._report(e)
            self._synchronize()
            return None

        # The last statement of a block needs no terminator.
        if not self._check(TokenKind.RIGHT_BRACE) and not self._match(TokenKind.SEMICOLON):
            self._report(create_unexpected_token_error(TokenKind.SEMICOLON, self._peek()))
            self._synchronize()

        return stmt

    def _parse_statement(self) -> Statement:
        """Parse a statement."""
        token = self._peek()

        if token.kind in (TokenKind.LET, TokenKind.MUT):
            self._advance()
            ident = self._consume_ident()
            self._consume(TokenKind.ASSIGN)
            expr = self._parse_expression()
            return VariableStatement(
                ident, expr, token.kind is TokenKind.MUT, token.span.join(expr.span)
            )

        if token.kind is TokenKind.FN:
            item = self._parse_function()
            return ItemStatement(item, item.span)

        expr = self._parse_expression()
        return ExpressionStatement(expr, expr.span)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expression(self) -> Expression:
        """
        Parse the whole input as a single expression.

        Unlike `parse()`, this raises the first syntax error instead of
        recovering from it.

        Raises:
            ParseError: If the input is not exactly one expression
        """
        expr = self._parse_expression()
        self._match(TokenKind.SEMICOLON)
        if not self._check(TokenKind.EOF):
            raise create_unexpected_token_error(TokenKind.EOF, self._peek())
        return expr

    def _parse_expression(self, min_bp: int = 0) -> Expression:
        """Pratt loop: parse an expression whose operators bind at least `min_bp`."""
        with self._nested():
            token = self._peek()
            prefix_parser = self.prefix_parsers.get(token.kind)
            if prefix_parser is None:
                raise create_unexpected_token_error("expression", token, self._text(token))

            lhs = prefix_parser()

            while True:
                kind = self._peek().kind

                left_bp = postfix_binding_power(kind)
                if left_bp is not None:
                    if left_bp < min_bp:
                        break
                    lhs = self.postfix_parsers[kind](lhs)
                    continue

                powers = infix_binding_power(kind)
                if powers is not None:
                    left_bp, right_bp = powers
                    if left_bp < min_bp:
                        break
                    self._advance()
                    rhs = self._parse_expression(right_bp)
                    lhs = make_infix_operator(lhs, kind, rhs, lhs.span.join(rhs.span))
                    continue

                break

            return lhs

    # Prefix parsers (tokens that can start expressions)

    def _parse_integer_literal(self) -> IntegerLiteral:
        token = self._advance()
        text = self._text(token)

        # Compare digit counts first so huge literals never reach int().
        max_value = self.options.max_integer
        digits = text.lstrip("0")
        if len(digits) > len(str(max_value)) or (digits and int(digits) > max_value):
            raise IntegerOverflowError(text, self.options.integer_bits, token)

        return IntegerLiteral(int(digits or "0"), token.span)

    def _parse_bool_literal(self) -> BoolLiteral:
        token = self._advance()
        return BoolLiteral(token.kind is TokenKind.TRUE, token.span)

    def _parse_identifier(self) -> Identifier:
        return Identifier(self._consume_ident())

    def _parse_string_literal(self) -> Expression:
        token = self._advance()
        raise UnsupportedConstructError("string literals", token)

    def _parse_grouping(self) -> Expression:
        self._consume(TokenKind.LEFT_PAREN)
        expr = self._parse_expression()
        self._consume(TokenKind.RIGHT_PAREN)
        return expr

    def _parse_block_expression(self) -> Block:
        statements, span = self._parse_block()
        return Block(statements, span)

    def _parse_prefix(self) -> Expression:
        op = self._advance()
        operand = self._parse_expression(prefix_binding_power(op.kind))
        return make_prefix_operator(op.kind, operand, op.span.join(operand.span))

    # Postfix parsers

    def _parse_call(self, callee: Expression) -> Call:
        self._consume(TokenKind.LEFT_PAREN)
        params: List[Expression] = []

        # Commas go strictly between arguments.
        while not self._check(TokenKind.RIGHT_PAREN):
            params.append(self._parse_expression())
            if not self._match(TokenKind.COMMA):
                break
            if self._check(TokenKind.RIGHT_PAREN) and not self.options.allow_trailing_comma:
                raise create_unexpected_token_error("expression", self._peek())

        close = self._consume(TokenKind.RIGHT_PAREN)
        return Call(callee, params, callee.span.join(close.span))

    def _parse_index(self, base: Expression) -> Index:
        self._consume(TokenKind.LEFT_BRACKET)
        index = self._parse_expression()
        close = self._consume(TokenKind.RIGHT_BRACKET)
        return Index(base, index, base.span.join(close.span))

    # ========================================================================
    # Error recovery
    # ========================================================================

    @contextmanager
    def _nested(self):
        """Track one level of expression or block nesting."""
        if self._depth >= self.options.max_nesting_depth:
            raise NestingTooDeepError(self.options.max_nesting_depth, self._peek())
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    def _report(self, error: ParseError):
        """Record a syntax error, dropping an exact repeat of the last one."""
        if self.errors and self.errors[-1].same_report(error):
            return
        LOG.debug("%s: %s at %s", self.filename, error.diagnostic.message, error.span)
        self.errors.append(error)

    def _synchronize(self):
        """
        Skip to the next statement boundary.

        Stops after a SEMICOLON, or before an unmatched `}` or EOF. Brace
        delimited groups are skipped as a whole.
        """
        depth = 0
        while True:
            kind = self._peek().kind
            if kind is TokenKind.EOF:
                return
            if kind is TokenKind.LEFT_BRACE:
                depth += 1
            elif kind is TokenKind.RIGHT_BRACE:
                if depth == 0:
                    return
                depth -= 1
            elif kind is TokenKind.SEMICOLON and depth == 0:
                self._advance()
                return
            self._advance()

    # ========================================================================
    # Token helpers
    # ========================================================================

    def _pull(self) -> Token:
        # Only called while the current token is not EOF, so the lexer
        # always has another token.
        token = next(self.lexer)
        while token.kind in SKIPPED_TOKENS:
            token = next(self.lexer)
        return token

    def _peek(self) -> Token:
        """Return current token without consuming."""
        return self._current

    def _advance(self) -> Token:
        """Consume and return current token. EOF is never consumed."""
        token = self._current
        if token.kind is not TokenKind.EOF:
            self._previous = token
            self._current = self._pull()
        return token

    def _check(self, kind: TokenKind) -> bool:
        return self._current.kind is kind

    def _match(self, kind: TokenKind) -> bool:
        """Check if current token matches kind and consume if so."""
        if self._check(kind):
            self._advance()
            return True
        return False

    def _consume(self, kind: TokenKind) -> Token:
        """Consume token of expected kind or raise error."""
        if self._check(kind):
            return self._advance()
        token = self._peek()
        raise create_unexpected_token_error(kind, token, self._text(token))

    def _consume_ident(self) -> Ident:
        token = self._consume(TokenKind.IDENTIFIER)
        return Ident.from_token(token, self.data, self.interner)

    def _text(self, token: Token) -> str:
        return token.span.text(self.data) or ""


@dataclass
class ParseResult:
    """Everything a parse produced: the tree and every error found."""
    program: Program
    source: SourceText
    filename: str = "<input>"
    lexer_errors: List[LexerError] = field(default_factory=list)
    errors: List[ParseError] = field(default_factory=list)
    interner: Optional[Interner] = None

    def has_errors(self) -> bool:
        return bool(self.lexer_errors or self.errors)

    def diagnostics(self) -> List[Diagnostic]:
        """All diagnostics ordered by source position."""
        found = [e.diagnostic for e in self.lexer_errors] + [e.diagnostic for e in self.errors]
        return sorted(found, key=lambda d: d.span.start.offset)

    def render_diagnostics(self) -> str:
        return "".join(d.render(self.source, self.filename) for d in self.diagnostics())

    def raise_for_errors(self):
        """
        Raise the first error by source position, if any.

        Raises:
            LexerError: If the first problem is lexical
            ParseError: If the first problem is a syntax error
        """
        found = list(self.lexer_errors) + list(self.errors)
        if found:
            raise min(found, key=lambda e: e.span.start.offset)


def parse_string(source: SourceText, filename: str = "<string>",
                 options: Optional[CompilerOptions] = None) -> ParseResult:
    """
    Convenience function to parse a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting
        options: Compiler options

    Returns:
        ParseResult holding the Program AST and all diagnostics
    """
    parser = Parser(source, filename, options)
    program = parser.parse()
    return ParseResult(
        program=program,
        source=source,
        filename=filename,
        lexer_errors=list(parser.lexer.errors),
        errors=list(parser.errors),
        interner=parser.interner,
    )


def parse_file(filepath: str, options: Optional[CompilerOptions] = None) -> ParseResult:
    """
    Convenience function to parse a source file.

    Raises:
        OSError: If file cannot be read
        InvalidSourceError: If the file is not valid UTF-8
    """
    with open(filepath, 'rb') as f:
        source = f.read()

    return parse_string(source, filepath, options)
