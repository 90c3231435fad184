"""Abstract Syntax Tree (AST) definitions for KorvaqScrip.

Nodes are frozen dataclasses and sequences are stored as tuples, so a node
never changes after the parser builds it. Statement-shaped forms that also
produce a value (array operations, JSON, math and string utilities, file
reads and function calls) derive from both `Statement` and `Expression`;
the parser accepts them wherever either is allowed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass(frozen=True)
class Statement(Node):
    pass


@dataclass(frozen=True)
class Expression(Node):
    pass


@dataclass(frozen=True)
class Block(Node):
    statements: Tuple[Statement, ...]


@dataclass(frozen=True)
class Program(Node):
    body: Tuple[Statement, ...]


# Expressions

@dataclass(frozen=True)
class NumberLiteral(Expression):
    value: float


@dataclass(frozen=True)
class StringLiteral(Expression):
    value: str


@dataclass(frozen=True)
class BooleanLiteral(Expression):
    value: bool


@dataclass(frozen=True)
class Identifier(Expression):
    name: str


@dataclass(frozen=True)
class ArrayLiteral(Expression):
    elements: Tuple[Expression, ...]


@dataclass(frozen=True)
class BinaryExpression(Expression):
    left: Expression
    operator: str
    right: Expression


@dataclass(frozen=True)
class UnaryExpression(Expression):
    operator: str  # '-' or '!'
    operand: Expression


# Statements

@dataclass(frozen=True)
class VariableDeclaration(Statement):
    name: str
    value: Expression
    is_immutable: bool = False


@dataclass(frozen=True)
class Assignment(Statement):
    name: str
    value: Expression


@dataclass(frozen=True)
class OutputStatement(Statement):
    value: Expression


@dataclass(frozen=True)
class PrintStatement(OutputStatement):
    pass


@dataclass(frozen=True)
class ErrorStatement(OutputStatement):
    pass


@dataclass(frozen=True)
class AlertStatement(OutputStatement):
    pass


@dataclass(frozen=True)
class IfStatement(Statement):
    condition: Expression
    then_block: Block
    else_block: Optional[Block]


@dataclass(frozen=True)
class RepeatStatement(Statement):
    identifier: str
    start: Expression
    end: Expression
    block: Block


@dataclass(frozen=True)
class WhileStatement(Statement):
    condition: Expression
    block: Block


@dataclass(frozen=True)
class FunctionDeclaration(Statement):
    name: str
    params: Tuple[str, ...]
    body: Block


@dataclass(frozen=True)
class DeleteVariable(Statement):
    name: str  # may be 'all'


@dataclass(frozen=True)
class DeleteFunction(Statement):
    name: str  # may be 'all'


@dataclass(frozen=True)
class ConnectStatement(Statement):
    file_path: str


@dataclass(frozen=True)
class AsyncBlock(Statement):
    statements: Tuple[Statement, ...]


@dataclass(frozen=True)
class ReturnFromFunc(Statement):
    value: Optional[Expression]


# Forms usable both as statements and as values

@dataclass(frozen=True)
class FunctionCall(Statement, Expression):
    name: str
    args: Tuple[Expression, ...]


@dataclass(frozen=True)
class ReadStatement(Statement, Expression):
    path: Expression


@dataclass(frozen=True)
class ArrayAdd(Statement, Expression):
    array: str
    element: Expression


@dataclass(frozen=True)
class ArrayRemove(Statement, Expression):
    array: str
    element: Expression


@dataclass(frozen=True)
class ArrayLength(Statement, Expression):
    array: str


@dataclass(frozen=True)
class ArrayAccess(Statement, Expression):
    array: str
    index: Expression


@dataclass(frozen=True)
class ToJSON(Statement, Expression):
    value: Expression


@dataclass(frozen=True)
class ParseJSON(Statement, Expression):
    value: Expression


@dataclass(frozen=True)
class MathFunction(Statement, Expression):
    function: str  # floor, round, sqrt, sin, cos, tan
    argument: Expression


@dataclass(frozen=True)
class StringUtility(Statement, Expression):
    function: str  # tokenize, uppercase, lowercase, reverse
    argument: Expression


NODE_TYPES = {
    cls.__name__: cls
    for cls in (
        Block, Program,
        NumberLiteral, StringLiteral, BooleanLiteral, Identifier,
        ArrayLiteral, BinaryExpression, UnaryExpression,
        VariableDeclaration, Assignment, PrintStatement, ErrorStatement,
        AlertStatement, IfStatement, RepeatStatement, WhileStatement,
        FunctionDeclaration, DeleteVariable, DeleteFunction,
        ConnectStatement, AsyncBlock, ReturnFromFunc,
        FunctionCall, ReadStatement, ArrayAdd, ArrayRemove, ArrayLength,
        ArrayAccess, ToJSON, ParseJSON, MathFunction, StringUtility,
    )
}
