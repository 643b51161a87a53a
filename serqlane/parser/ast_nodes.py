"""
Abstract Syntax Tree node definitions for Serqlane.

Every node carries the span of source it was parsed from and supports the
visitor pattern. Nodes own their children outright: there are no parent
pointers and no node is shared between two parents, so the tree can be
walked, compared and rewritten without aliasing surprises.

Identifier text is not copied into the tree. An `Ident` keeps its span plus
a small integer handle into the parser's `Interner`; the text is resolved on
demand against the source or the interner.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from ..lexer.span import SourceSpan, SourceText
from ..lexer.tokens import Token, TokenKind


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    # Top-level
    PROGRAM = "Program"

    # Items
    FUNCTION = "Function"
    FUNCTION_ARG = "FunctionArg"

    # Statements
    ITEM_STMT = "ItemStatement"
    VARIABLE_STMT = "VariableStatement"
    EXPRESSION_STMT = "ExpressionStatement"

    # Expressions
    IDENTIFIER = "Identifier"
    INTEGER_LITERAL = "IntegerLiteral"
    BOOL_LITERAL = "BoolLiteral"
    BLOCK = "Block"
    INDEX = "Index"
    CALL = "Call"

    # Operators
    ARITHMETIC_LOGICAL = "ArithmeticLogical"
    COMPARISON = "Comparison"
    COMPOUND_ASSIGNMENT = "CompoundAssignment"
    BOOLEAN = "Boolean"
    NEGATION = "Negation"
    ASSIGNMENT = "Assignment"
    ADDRESS_OF = "AddressOf"
    DEREFERENCE = "Dereference"


# ============================================================================
# Identifiers
# ============================================================================

class Interner:
    """
    String table mapping identifier text to small integer symbols.

    The same text always interns to the same symbol within one Interner.
    """

    def __init__(self):
        self._symbols: Dict[str, int] = {}
        self._strings: List[str] = []

    def intern(self, text: str) -> int:
        symbol = self._symbols.get(text)
        if symbol is None:
            symbol = len(self._strings)
            self._symbols[text] = symbol
            self._strings.append(text)
        return symbol

    def resolve(self, symbol: int) -> str:
        return self._strings[symbol]

    def __len__(self) -> int:
        return len(self._strings)


@dataclass(frozen=True)
class Ident:
    """An identifier reference: where it is, plus its interned symbol."""
    span: SourceSpan
    symbol: int

    @classmethod
    def from_token(cls, token: Token, source: SourceText, interner: Interner) -> "Ident":
        """
        Build an Ident from an IDENTIFIER token.

        Raises:
            ValueError: If the token is of any other kind
        """
        if token.kind is not TokenKind.IDENTIFIER:
            raise ValueError(f"cannot build an identifier from {token.kind.name}")
        text = token.text(source)
        if text is None:
            raise ValueError(f"token span {token.span} does not belong to this source")
        return cls(token.span, interner.intern(text))

    def text(self, source: SourceText) -> Optional[str]:
        return self.span.text(source)

    def name(self, interner: Interner) -> str:
        return interner.resolve(self.symbol)


# ============================================================================
# Base classes
# ============================================================================

class ASTVisitor:
    """
    Visitor base class.

    `visit(node)` dispatches to `visit_<NodeClass>` when the subclass defines
    it and falls back to `generic_visit`, which visits the children.
    """

    def visit(self, node: 'ASTNode') -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", None)
        if method is None:
            return self.generic_visit(node)
        return method(node)

    def generic_visit(self, node: 'ASTNode') -> Any:
        for child in node.children():
            child.accept(self)
        return None


class ASTNode(ABC):
    """Base class for all AST nodes."""

    def __init__(self, node_type: ASTNodeType, span: SourceSpan):
        self.node_type = node_type
        self.span = span

    def accept(self, visitor: ASTVisitor) -> Any:
        """Accept a visitor (visitor pattern)."""
        return visitor.visit(self)

    @abstractmethod
    def children(self) -> List['ASTNode']:
        """Get all child nodes, in source order."""
        pass

    def walk(self):
        """Yield this node and all of its descendants, depth first."""
        yield self
        for child in self.children():
            yield from child.walk()

    def __eq__(self, other) -> bool:
        """Structural equality, spans included."""
        if type(self) is not type(other):
            return NotImplemented
        return vars(self) == vars(other)

    __hash__ = None

    def __str__(self) -> str:
        return f"{self.node_type.value}@{self.span}"

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{key}={value!r}" for key, value in vars(self).items() if key != "node_type"
        )
        return f"{self.__class__.__name__}({fields})"


# ============================================================================
# Expressions
# ============================================================================

class Expression(ASTNode):
    """Base class for expressions."""
    pass


class Identifier(Expression):
    """A variable or function name used as a value."""

    def __init__(self, ident: Ident):
        super().__init__(ASTNodeType.IDENTIFIER, ident.span)
        self.ident = ident

    def children(self) -> List[ASTNode]:
        return []


class Literal(Expression):
    """Base class for literal values."""
    value: Any

    def children(self) -> List[ASTNode]:
        return []


class IntegerLiteral(Literal):
    """Unsigned integer literal, already range checked."""

    def __init__(self, value: int, span: SourceSpan):
        super().__init__(ASTNodeType.INTEGER_LITERAL, span)
        self.value = value


class BoolLiteral(Literal):

    def __init__(self, value: bool, span: SourceSpan):
        super().__init__(ASTNodeType.BOOL_LITERAL, span)
        self.value = value


class Block(Expression):
    """`{ stmt; stmt }` used as an expression."""

    def __init__(self, statements: List['Statement'], span: SourceSpan):
        super().__init__(ASTNodeType.BLOCK, span)
        self.statements = statements

    def children(self) -> List[ASTNode]:
        return list(self.statements)


class Index(Expression):
    """`base[index]`"""

    def __init__(self, base: Expression, index: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.INDEX, span)
        self.base = base
        self.index = index

    def children(self) -> List[ASTNode]:
        return [self.base, self.index]


class Call(Expression):
    """`callee(param, ...)`"""

    def __init__(self, callee: Expression, params: List[Expression], span: SourceSpan):
        super().__init__(ASTNodeType.CALL, span)
        self.callee = callee
        self.params = params

    def children(self) -> List[ASTNode]:
        return [self.callee] + list(self.params)


# ============================================================================
# Operators
# ============================================================================

class ArithmeticLogicalOp(Enum):
    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"
    AND = "&"
    OR = "|"
    XOR = "^"
    SHL = "<<"
    SHR = ">>"


class ComparisonOp(Enum):
    EQ = "=="
    NOT_EQ = "!="
    LT = "<"
    GT = ">"
    LT_EQ = "<="
    GT_EQ = ">="


class CompoundAssignmentOp(Enum):
    PLUS = "+="
    MINUS = "-="
    MULTIPLY = "*="
    DIVIDE = "/="
    MODULO = "%="
    AND = "&="
    OR = "|="
    XOR = "^="
    SHL = "<<="
    SHR = ">>="


class BooleanOp(Enum):
    AND = "&&"
    OR = "||"


class NegationOp(Enum):
    NEGATION = "-"
    LOGICAL_NOT = "!"
    BITWISE_NOT = "~"


class Operator(Expression):
    """Base class for operator expressions."""
    pass


class BinaryOperator(Operator):
    """Shared shape of `lhs op rhs` operators."""

    def __init__(self, node_type: ASTNodeType, lhs: Expression, op: Enum,
                 rhs: Expression, span: SourceSpan):
        super().__init__(node_type, span)
        self.lhs = lhs
        self.op = op
        self.rhs = rhs

    def children(self) -> List[ASTNode]:
        return [self.lhs, self.rhs]


class ArithmeticLogical(BinaryOperator):
    """`a + b`, `1 << 3`"""

    def __init__(self, lhs: Expression, op: ArithmeticLogicalOp, rhs: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.ARITHMETIC_LOGICAL, lhs, op, rhs, span)


class Comparison(BinaryOperator):
    """`a <= b`"""

    def __init__(self, lhs: Expression, op: ComparisonOp, rhs: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.COMPARISON, lhs, op, rhs, span)


class CompoundAssignment(BinaryOperator):
    """`a += 5`"""

    def __init__(self, lhs: Expression, op: CompoundAssignmentOp, rhs: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.COMPOUND_ASSIGNMENT, lhs, op, rhs, span)


class Boolean(BinaryOperator):
    """`a && b`"""

    def __init__(self, lhs: Expression, op: BooleanOp, rhs: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.BOOLEAN, lhs, op, rhs, span)


class Negation(Operator):
    """`-x`, `!x`, `~x`"""

    def __init__(self, op: NegationOp, expr: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.NEGATION, span)
        self.op = op
        self.expr = expr

    def children(self) -> List[ASTNode]:
        return [self.expr]


class Assignment(Operator):
    """`a = b`"""

    def __init__(self, lhs: Expression, rhs: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.ASSIGNMENT, span)
        self.lhs = lhs
        self.rhs = rhs

    def children(self) -> List[ASTNode]:
        return [self.lhs, self.rhs]


class AddressOf(Operator):
    """`&a`"""

    def __init__(self, expr: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.ADDRESS_OF, span)
        self.expr = expr

    def children(self) -> List[ASTNode]:
        return [self.expr]


class Dereference(Operator):
    """`*ptr`"""

    def __init__(self, expr: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.DEREFERENCE, span)
        self.expr = expr

    def children(self) -> List[ASTNode]:
        return [self.expr]


ARITHMETIC_LOGICAL_OPS = {
    TokenKind.PLUS: ArithmeticLogicalOp.PLUS,
    TokenKind.MINUS: ArithmeticLogicalOp.MINUS,
    TokenKind.MULTIPLY: ArithmeticLogicalOp.MULTIPLY,
    TokenKind.DIVIDE: ArithmeticLogicalOp.DIVIDE,
    TokenKind.MODULO: ArithmeticLogicalOp.MODULO,
    TokenKind.BIT_AND: ArithmeticLogicalOp.AND,
    TokenKind.BIT_OR: ArithmeticLogicalOp.OR,
    TokenKind.BIT_XOR: ArithmeticLogicalOp.XOR,
    TokenKind.LEFT_SHIFT: ArithmeticLogicalOp.SHL,
    TokenKind.RIGHT_SHIFT: ArithmeticLogicalOp.SHR,
}

COMPARISON_OPS = {
    TokenKind.EQUAL: ComparisonOp.EQ,
    TokenKind.NOT_EQUAL: ComparisonOp.NOT_EQ,
    TokenKind.LESS_THAN: ComparisonOp.LT,
    TokenKind.GREATER_THAN: ComparisonOp.GT,
    TokenKind.LESS_EQUAL: ComparisonOp.LT_EQ,
    TokenKind.GREATER_EQUAL: ComparisonOp.GT_EQ,
}

COMPOUND_ASSIGNMENT_OPS = {
    TokenKind.PLUS_ASSIGN: CompoundAssignmentOp.PLUS,
    TokenKind.MINUS_ASSIGN: CompoundAssignmentOp.MINUS,
    TokenKind.MULTIPLY_ASSIGN: CompoundAssignmentOp.MULTIPLY,
    TokenKind.DIVIDE_ASSIGN: CompoundAssignmentOp.DIVIDE,
    TokenKind.MODULO_ASSIGN: CompoundAssignmentOp.MODULO,
    TokenKind.BIT_AND_ASSIGN: CompoundAssignmentOp.AND,
    TokenKind.BIT_OR_ASSIGN: CompoundAssignmentOp.OR,
    TokenKind.BIT_XOR_ASSIGN: CompoundAssignmentOp.XOR,
    TokenKind.LEFT_SHIFT_ASSIGN: CompoundAssignmentOp.SHL,
    TokenKind.RIGHT_SHIFT_ASSIGN: CompoundAssignmentOp.SHR,
}

BOOLEAN_OPS = {
    TokenKind.LOGICAL_AND: BooleanOp.AND,
    TokenKind.LOGICAL_OR: BooleanOp.OR,
}

NEGATION_OPS = {
    TokenKind.MINUS: NegationOp.NEGATION,
    TokenKind.LOGICAL_NOT: NegationOp.LOGICAL_NOT,
    TokenKind.BIT_NOT: NegationOp.BITWISE_NOT,
}


def make_prefix_operator(kind: TokenKind, expr: Expression, span: SourceSpan) -> Operator:
    """
    Build the operator node for a prefix operator token.

    Raises:
        ValueError: If `kind` is not a prefix operator
    """
    if kind in NEGATION_OPS:
        return Negation(NEGATION_OPS[kind], expr, span)
    if kind is TokenKind.MULTIPLY:
        return Dereference(expr, span)
    if kind is TokenKind.BIT_AND:
        return AddressOf(expr, span)
    raise ValueError(f"{kind.name} is not a prefix operator")


def make_infix_operator(lhs: Expression, kind: TokenKind, rhs: Expression,
                        span: SourceSpan) -> Operator:
    """
    Build the operator node for an infix operator token.

    Raises:
        ValueError: If `kind` is not an infix operator
    """
    if kind in ARITHMETIC_LOGICAL_OPS:
        return ArithmeticLogical(lhs, ARITHMETIC_LOGICAL_OPS[kind], rhs, span)
    if kind in COMPARISON_OPS:
        return Comparison(lhs, COMPARISON_OPS[kind], rhs, span)
    if kind in COMPOUND_ASSIGNMENT_OPS:
        return CompoundAssignment(lhs, COMPOUND_ASSIGNMENT_OPS[kind], rhs, span)
    if kind in BOOLEAN_OPS:
        return Boolean(lhs, BOOLEAN_OPS[kind], rhs, span)
    if kind is TokenKind.ASSIGN:
        return Assignment(lhs, rhs, span)
    raise ValueError(f"{kind.name} is not an infix operator")


# ============================================================================
# Statements
# ============================================================================

class Statement(ASTNode):
    """Base class for statements."""
    pass


class ItemStatement(Statement):
    """An item declared inside a block."""

    def __init__(self, item: 'Item', span: SourceSpan):
        super().__init__(ASTNodeType.ITEM_STMT, span)
        self.item = item

    def children(self) -> List[ASTNode]:
        return [self.item]


class VariableStatement(Statement):
    """`let x = expr` or `mut x = expr`"""

    def __init__(self, ident: Ident, expr: Expression, mutable: bool, span: SourceSpan):
        super().__init__(ASTNodeType.VARIABLE_STMT, span)
        self.ident = ident
        self.expr = expr
        self.mutable = mutable

    def children(self) -> List[ASTNode]:
        return [self.expr]


class ExpressionStatement(Statement):

    def __init__(self, expr: Expression, span: SourceSpan):
        super().__init__(ASTNodeType.EXPRESSION_STMT, span)
        self.expr = expr

    def children(self) -> List[ASTNode]:
        return [self.expr]


# ============================================================================
# Items
# ============================================================================

class Item(ASTNode):
    """Base class for items (declarations)."""
    pass


class FunctionArg(ASTNode):
    """`name: typ` in a function signature."""

    def __init__(self, name: Ident, typ: Ident, span: SourceSpan):
        super().__init__(ASTNodeType.FUNCTION_ARG, span)
        self.name = name
        self.typ = typ

    def children(self) -> List[ASTNode]:
        return []


class Function(Item):
    """Function definition."""

    def __init__(self, name: Ident, args: List[FunctionArg], ret: Optional[Ident],
                 block: List[Statement], span: SourceSpan):
        super().__init__(ASTNodeType.FUNCTION, span)
        self.name = name
        self.args = args
        self.ret = ret
        self.block = block

    def children(self) -> List[ASTNode]:
        return list(self.args) + list(self.block)


# ============================================================================
# Top-level nodes
# ============================================================================

class Program(ASTNode):
    """Root AST node representing a complete program."""

    def __init__(self, items: List[Item], span: SourceSpan):
        super().__init__(ASTNodeType.PROGRAM, span)
        self.items = items

    def children(self) -> List[ASTNode]:
        return list(self.items)
