"""Recursive-descent parser for KorvaqScrip.

The parser pulls tokens one at a time from a `Tokenizer` and looks at a
single token of lookahead (`current_token`). `parse` returns a `Program`;
nested statement lists are parsed by `parse_block`. Any unexpected or
missing token aborts parsing with a `ParseError`; there is no recovery.

Binary expressions have a single, left-associative precedence level:
``1 + 2 * 3`` evaluates as ``(1 + 2) * 3``. Parentheses group.

The `parse_program` function is the public entry point.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from .ast import (
    Program, Block, Statement, Expression,
    NumberLiteral, StringLiteral, BooleanLiteral, Identifier, ArrayLiteral,
    BinaryExpression, UnaryExpression,
    VariableDeclaration, Assignment, PrintStatement, ErrorStatement,
    AlertStatement, IfStatement, RepeatStatement, WhileStatement,
    FunctionDeclaration, DeleteVariable, DeleteFunction, ConnectStatement,
    AsyncBlock, ReturnFromFunc, FunctionCall, ReadStatement, ArrayAdd,
    ArrayRemove, ArrayLength, ArrayAccess, ToJSON, ParseJSON, MathFunction,
    StringUtility,
)
from .errors import ParseError
from .lexer import Token, TokenKind, Tokenizer

MATH_KINDS = frozenset({
    TokenKind.FLOOR, TokenKind.ROUND, TokenKind.SQRT,
    TokenKind.SIN, TokenKind.COS, TokenKind.TAN,
})

STRING_KINDS = frozenset({
    TokenKind.TOKENIZE, TokenKind.UPPERCASE,
    TokenKind.LOWERCASE, TokenKind.REVERSE,
})

# Keywords that introduce a form producing a value.
VALUE_FORM_KINDS = frozenset({
    TokenKind.CALL, TokenKind.READ, TokenKind.ARR, TokenKind.ARRADD,
    TokenKind.ARRDEL, TokenKind.ARRSIZE, TokenKind.TOJSON, TokenKind.PARJSON,
}) | MATH_KINDS | STRING_KINDS

OPERAND_START_KINDS = frozenset({
    TokenKind.NUMBER, TokenKind.STRING, TokenKind.BOOLEAN,
    TokenKind.IDENTIFIER, TokenKind.LBRACKET, TokenKind.LPAREN, TokenKind.NOT,
}) | VALUE_FORM_KINDS

OUTPUT_STATEMENTS = {
    TokenKind.SHOW: PrintStatement,
    TokenKind.ERROR: ErrorStatement,
    TokenKind.ALERT: AlertStatement,
}


class Parser:
    def __init__(self, tokenizer: Tokenizer):
        self.tokenizer = tokenizer
        self.current_token: Optional[Token] = tokenizer.next_token()
        # nesting depth of function bodies; `return` is only legal inside one
        self.function_depth = 0
        self.statement_parsers: Dict[TokenKind, Callable[[], Statement]] = {
            TokenKind.LET: self.parse_variable_declaration,
            TokenKind.MAKE: self.parse_variable_declaration,
            TokenKind.SHOW: self.parse_output_statement,
            TokenKind.ERROR: self.parse_output_statement,
            TokenKind.ALERT: self.parse_output_statement,
            TokenKind.IF: self.parse_if_statement,
            TokenKind.LOOP: self.parse_repeat_statement,
            TokenKind.WHILE: self.parse_while_statement,
            TokenKind.FUNC: self.parse_function_declaration,
            TokenKind.RETURN: self.parse_return_statement,
            TokenKind.DELVAR: self.parse_delete_variable,
            TokenKind.DELFUNC: self.parse_delete_function,
            TokenKind.CONNECT: self.parse_connect_statement,
            TokenKind.ASYNC: self.parse_async_statement,
            TokenKind.IDENTIFIER: self.parse_identifier_statement,
            TokenKind.ARR: self.parse_arr_statement,
        }

    # Token helpers

    def describe(self, token: Optional[Token]) -> str:
        if token is None:
            return 'end of input'
        return f"{token.kind.name} {token.literal!r} at {self.tokenizer.describe(token.position)}"

    def advance(self) -> Token:
        token = self.current_token
        if token is None:
            raise ParseError("unexpected end of input")
        self.current_token = self.tokenizer.next_token()
        return token

    def match(self, kind: TokenKind, literal: Optional[str] = None) -> bool:
        token = self.current_token
        if token is None or token.kind != kind:
            return False
        return literal is None or token.literal == literal

    def expect(self, kind: TokenKind) -> Token:
        token = self.current_token
        if token is None or token.kind != kind:
            raise ParseError(f"expected {kind.name}, got {self.describe(token)}")
        return self.advance()

    def expect_name(self) -> str:
        # `arr` doubles as an ordinary name wherever a name is expected
        if self.match(TokenKind.ARR):
            return self.advance().literal
        return self.expect(TokenKind.IDENTIFIER).literal

    def on_same_line(self, first: Token, second: Optional[Token]) -> bool:
        if second is None:
            return False
        return self.tokenizer.location(first.position)[0] == self.tokenizer.location(second.position)[0]

    # Statements

    def parse(self) -> Program:
        statements: List[Statement] = []
        while self.current_token is not None:
            statements.append(self.parse_statement())
        return Program(tuple(statements))

    def parse_block(self) -> Block:
        self.expect(TokenKind.LBRACE)
        statements: List[Statement] = []
        while not self.match(TokenKind.RBRACE):
            if self.current_token is None:
                raise ParseError("unterminated block, expected RBRACE before end of input")
            statements.append(self.parse_statement())
        self.expect(TokenKind.RBRACE)
        return Block(tuple(statements))

    def parse_statement(self) -> Statement:
        token = self.current_token
        if token is None:
            raise ParseError("unexpected end of input")
        parser = self.statement_parsers.get(token.kind)
        if parser is not None:
            return parser()
        if token.kind in VALUE_FORM_KINDS:
            return self.parse_value_form()
        raise ParseError(f"unexpected token {self.describe(token)}")

    def parse_variable_declaration(self) -> VariableDeclaration:
        keyword = self.advance()
        name = self.expect_name()
        self.expect(TokenKind.ASSIGN)
        value = self.parse_expression()
        return VariableDeclaration(name, value, is_immutable=keyword.kind == TokenKind.MAKE)

    def parse_output_statement(self) -> Statement:
        keyword = self.advance()
        value = self.parse_expression()
        return OUTPUT_STATEMENTS[keyword.kind](value)

    def parse_if_statement(self) -> IfStatement:
        self.expect(TokenKind.IF)
        self.expect(TokenKind.LPAREN)
        condition = self.parse_expression()
        self.expect(TokenKind.RPAREN)
        then_block = self.parse_block()
        else_block = None
        if self.match(TokenKind.ELSE):
            self.advance()
            else_block = self.parse_block()
        return IfStatement(condition, then_block, else_block)

    def parse_repeat_statement(self) -> RepeatStatement:
        self.expect(TokenKind.LOOP)
        self.expect(TokenKind.LPAREN)
        identifier = self.expect_name()
        self.expect(TokenKind.COMMA)
        start = self.parse_expression()
        self.expect(TokenKind.COMMA)
        end = self.parse_expression()
        self.expect(TokenKind.RPAREN)
        block = self.parse_block()
        return RepeatStatement(identifier, start, end, block)

    def parse_while_statement(self) -> WhileStatement:
        self.expect(TokenKind.WHILE)
        self.expect(TokenKind.LPAREN)
        condition = self.parse_expression()
        self.expect(TokenKind.RPAREN)
        block = self.parse_block()
        return WhileStatement(condition, block)

    def parse_function_declaration(self) -> FunctionDeclaration:
        self.expect(TokenKind.FUNC)
        name = self.expect_name()
        self.expect(TokenKind.LPAREN)
        params: List[str] = []
        if not self.match(TokenKind.RPAREN):
            params.append(self.expect_name())
            while self.match(TokenKind.COMMA):
                self.advance()
                params.append(self.expect_name())
        self.expect(TokenKind.RPAREN)
        self.function_depth += 1
        try:
            body = self.parse_block()
        finally:
            self.function_depth -= 1
        return FunctionDeclaration(name, tuple(params), body)

    def parse_return_statement(self) -> ReturnFromFunc:
        keyword = self.expect(TokenKind.RETURN)
        if self.function_depth == 0:
            raise ParseError(f"return outside of a function at {self.tokenizer.describe(keyword.position)}")
        # a value must start on the same line as `return`
        if self.starts_operand() and self.on_same_line(keyword, self.current_token):
            return ReturnFromFunc(self.parse_expression())
        return ReturnFromFunc(None)

    def parse_delete_variable(self) -> DeleteVariable:
        self.expect(TokenKind.DELVAR)
        return DeleteVariable(self.expect_name())

    def parse_delete_function(self) -> DeleteFunction:
        self.expect(TokenKind.DELFUNC)
        return DeleteFunction(self.expect_name())

    def parse_connect_statement(self) -> ConnectStatement:
        self.expect(TokenKind.CONNECT)
        return ConnectStatement(self.expect(TokenKind.STRING).literal)

    def parse_async_statement(self) -> AsyncBlock:
        self.expect(TokenKind.ASYNC)
        block = self.parse_block()
        return AsyncBlock(block.statements)

    def parse_identifier_statement(self, name: Optional[str] = None) -> Statement:
        if name is None:
            name = self.expect(TokenKind.IDENTIFIER).literal
        if self.match(TokenKind.LPAREN):
            return FunctionCall(name, self.parse_arguments())
        if self.match(TokenKind.LBRACKET):
            return ArrayAccess(name, self.parse_index())
        if self.match(TokenKind.ASSIGN):
            self.advance()
            return Assignment(name, self.parse_expression())
        raise ParseError(
            f"expected '(', '[' or '=' after identifier {name!r}, "
            f"got {self.describe(self.current_token)}"
        )

    def parse_arr_statement(self) -> Statement:
        keyword = self.expect(TokenKind.ARR)
        if self.starts_arr_access(keyword):
            return self.parse_arr_access()
        return self.parse_identifier_statement('arr')

    def starts_arr_access(self, keyword: Token) -> bool:
        # `arr` followed by a name on the same line is the access form;
        # anything else treats `arr` as a variable name
        return self.match(TokenKind.IDENTIFIER) and self.on_same_line(keyword, self.current_token)

    def parse_arr_access(self) -> ArrayAccess:
        # `arr NAME INDEX`; the `arr` keyword itself is already consumed
        name = self.expect(TokenKind.IDENTIFIER)
        return ArrayAccess(name.literal, self.parse_operand())

    def parse_arguments(self) -> tuple:
        self.expect(TokenKind.LPAREN)
        args: List[Expression] = []
        if not self.match(TokenKind.RPAREN):
            args.append(self.parse_expression())
            while self.match(TokenKind.COMMA):
                self.advance()
                args.append(self.parse_expression())
        self.expect(TokenKind.RPAREN)
        return tuple(args)

    def parse_index(self) -> Expression:
        self.expect(TokenKind.LBRACKET)
        index = self.parse_expression()
        self.expect(TokenKind.RBRACKET)
        return index

    def parse_value_form(self) -> Expression:
        keyword = self.advance()
        kind = keyword.kind
        if kind == TokenKind.CALL:
            return FunctionCall(self.expect_name(), self.parse_arguments())
        if kind == TokenKind.READ:
            return ReadStatement(self.parse_operand())
        if kind == TokenKind.ARRADD:
            name = self.expect_name()
            return ArrayAdd(name, self.parse_operand())
        if kind == TokenKind.ARRDEL:
            name = self.expect_name()
            return ArrayRemove(name, self.parse_operand())
        if kind == TokenKind.ARRSIZE:
            return ArrayLength(self.expect_name())
        if kind == TokenKind.TOJSON:
            return ToJSON(self.parse_operand())
        if kind == TokenKind.PARJSON:
            return ParseJSON(self.parse_operand())
        if kind in MATH_KINDS:
            return MathFunction(keyword.literal, self.parse_operand())
        if kind in STRING_KINDS:
            return StringUtility(keyword.literal, self.parse_operand())
        raise ParseError(f"unexpected token {self.describe(keyword)}")

    # Expressions

    def starts_operand(self) -> bool:
        token = self.current_token
        if token is None:
            return False
        if token.kind in OPERAND_START_KINDS:
            return True
        return token.kind == TokenKind.OPERATOR and token.literal == '-'

    def parse_expression(self) -> Expression:
        left = self.parse_operand()
        while self.match(TokenKind.OPERATOR):
            operator = self.advance()
            right = self.parse_operand()
            left = BinaryExpression(left, operator.literal, right)
        return left

    def parse_operand(self) -> Expression:
        if self.match(TokenKind.OPERATOR, '-'):
            self.advance()
            return UnaryExpression('-', self.parse_operand())
        if self.match(TokenKind.NOT):
            self.advance()
            return UnaryExpression('!', self.parse_operand())
        return self.parse_primary()

    def parse_primary(self) -> Expression:
        token = self.current_token
        if token is None:
            raise ParseError("unexpected end of input in expression")
        kind = token.kind
        if kind == TokenKind.NUMBER:
            self.advance()
            return NumberLiteral(token.literal)
        if kind == TokenKind.STRING:
            self.advance()
            return StringLiteral(token.literal)
        if kind == TokenKind.BOOLEAN:
            self.advance()
            return BooleanLiteral(token.literal)
        if kind == TokenKind.IDENTIFIER:
            self.advance()
            return self.parse_name_reference(token.literal)
        if kind == TokenKind.ARR:
            self.advance()
            if self.starts_arr_access(token):
                return self.parse_arr_access()
            return self.parse_name_reference('arr')
        if kind == TokenKind.LBRACKET:
            return self.parse_array_literal()
        if kind == TokenKind.LPAREN:
            self.advance()
            expr = self.parse_expression()
            self.expect(TokenKind.RPAREN)
            return expr
        if kind in VALUE_FORM_KINDS:
            return self.parse_value_form()
        raise ParseError(f"unexpected token {self.describe(token)}")

    def parse_name_reference(self, name: str) -> Expression:
        if self.match(TokenKind.LPAREN):
            return FunctionCall(name, self.parse_arguments())
        if self.match(TokenKind.LBRACKET):
            return ArrayAccess(name, self.parse_index())
        return Identifier(name)

    def parse_array_literal(self) -> ArrayLiteral:
        self.expect(TokenKind.LBRACKET)
        elements: List[Expression] = []
        if not self.match(TokenKind.RBRACKET):
            elements.append(self.parse_expression())
            while self.match(TokenKind.COMMA):
                self.advance()
                elements.append(self.parse_expression())
        self.expect(TokenKind.RBRACKET)
        return ArrayLiteral(tuple(elements))


def parse_program(source: str) -> Program:
    """Parse KorvaqScrip source code into a Program AST."""
    parser = Parser(Tokenizer(source))
    return parser.parse()
