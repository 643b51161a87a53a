"""
S-expression rendering of Serqlane ASTs.

Used by the command line host and handy in tests:

    1 + 2 * 3               ->  (+ 1 (* 2 3))
    f(1, 2)[0]              ->  (index (call f 1 2) 0)
    fn add(a: i32): i32 {}  ->  (fn add ((a i32)) i32 (block))
"""

from typing import List, Optional

from ..lexer.span import SourceText
from .ast_nodes import (
    ASTNode, ASTVisitor, Ident, Interner, Identifier, IntegerLiteral, BoolLiteral,
    Block, Index, Call, BinaryOperator, Negation, Assignment, AddressOf,
    Dereference, ItemStatement, VariableStatement, ExpressionStatement,
    FunctionArg, Function, Program
)


class SExpressionPrinter(ASTVisitor):
    """
    Renders nodes as S-expressions.

    Identifier text comes from the interner when one is given, otherwise it
    is resolved from the source by span.
    """

    def __init__(self, source: Optional[SourceText] = None, interner: Optional[Interner] = None):
        if source is None and interner is None:
            raise ValueError("need a source text or an interner to print identifiers")
        if isinstance(source, str):
            source = source.encode("utf-8")
        self.source = source
        self.interner = interner

    def print(self, node: ASTNode) -> str:
        return node.accept(self)

    def _name(self, ident: Ident) -> str:
        if self.interner is not None:
            return ident.name(self.interner)
        return ident.text(self.source) or "?"

    def _list(self, head: str, parts: List[str]) -> str:
        return "(" + " ".join([head] + parts) + ")"

    def generic_visit(self, node: ASTNode) -> str:
        raise TypeError(f"cannot print {type(node).__name__}")

    # Expressions

    def visit_Identifier(self, node: Identifier) -> str:
        return self._name(node.ident)

    def visit_IntegerLiteral(self, node: IntegerLiteral) -> str:
        return str(node.value)

    def visit_BoolLiteral(self, node: BoolLiteral) -> str:
        return "true" if node.value else "false"

    def visit_Block(self, node: Block) -> str:
        return self._list("block", [s.accept(self) for s in node.statements])

    def visit_Index(self, node: Index) -> str:
        return self._list("index", [node.base.accept(self), node.index.accept(self)])

    def visit_Call(self, node: Call) -> str:
        return self._list("call", [node.callee.accept(self)] + [p.accept(self) for p in node.params])

    def _binary(self, node: BinaryOperator) -> str:
        return self._list(node.op.value, [node.lhs.accept(self), node.rhs.accept(self)])

    visit_ArithmeticLogical = _binary
    visit_Comparison = _binary
    visit_CompoundAssignment = _binary
    visit_Boolean = _binary

    def visit_Negation(self, node: Negation) -> str:
        return self._list(node.op.value, [node.expr.accept(self)])

    def visit_Assignment(self, node: Assignment) -> str:
        return self._list("=", [node.lhs.accept(self), node.rhs.accept(self)])

    def visit_AddressOf(self, node: AddressOf) -> str:
        return self._list("&", [node.expr.accept(self)])

    def visit_Dereference(self, node: Dereference) -> str:
        return self._list("*", [node.expr.accept(self)])

    # Statements

    def visit_ItemStatement(self, node: ItemStatement) -> str:
        return node.item.accept(self)

    def visit_VariableStatement(self, node: VariableStatement) -> str:
        keyword = "mut" if node.mutable else "let"
        return self._list(keyword, [self._name(node.ident), node.expr.accept(self)])

    def visit_ExpressionStatement(self, node: ExpressionStatement) -> str:
        return node.expr.accept(self)

    # Items

    def visit_FunctionArg(self, node: FunctionArg) -> str:
        return f"({self._name(node.name)} {self._name(node.typ)})"

    def visit_Function(self, node: Function) -> str:
        parts = [self._name(node.name), "(" + " ".join(a.accept(self) for a in node.args) + ")"]
        if node.ret is not None:
            parts.append(self._name(node.ret))
        parts.append(self._list("block", [s.accept(self) for s in node.block]))
        return self._list("fn", parts)

    def visit_Program(self, node: Program) -> str:
        return "\n".join(item.accept(self) for item in node.items)


def to_sexpr(node: ASTNode, source: Optional[SourceText] = None,
             interner: Optional[Interner] = None) -> str:
    """Render `node` as an S-expression string."""
    return SExpressionPrinter(source, interner).print(node)
