"""Tree-walking evaluator for KorvaqScrip.

The `Interpreter` owns one `Environment` and walks the AST produced by
`korvaq.parser`. Statements go through `execute`, expressions through
`evaluate`; forms that are both (array operations, JSON, utilities, file
reads and calls) are handled by `evaluate` and simply yield their value
when used as a statement.

Control flow out of nested blocks is explicit: every routine that runs a
block returns either ``None`` for a normal completion or the
`ReturnSignal` produced by a `return`, and callers hand the signal outward
until it reaches the function call that consumes it.

Output is delegated to an output collaborator (`ConsoleOutput` by default)
and file access to a `BasicIO`, so hosts and tests can substitute their own.
"""

from __future__ import annotations

import asyncio
import math
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from .ast import (
    Program, Statement, Expression,
    NumberLiteral, StringLiteral, BooleanLiteral, Identifier, ArrayLiteral,
    BinaryExpression, UnaryExpression,
    VariableDeclaration, Assignment, PrintStatement, ErrorStatement,
    AlertStatement, IfStatement, RepeatStatement, WhileStatement,
    FunctionDeclaration, DeleteVariable, DeleteFunction, ConnectStatement,
    AsyncBlock, ReturnFromFunc, FunctionCall, ReadStatement, ArrayAdd,
    ArrayRemove, ArrayLength, ArrayAccess, ToJSON, ParseJSON, MathFunction,
    StringUtility,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import KorvaqError, ParseError, ReturnSignal
from .jsontext import parse_json, to_json, to_string
from .parser import parse_program
from .std import populate_math_functions, populate_string_functions
from .std.io import BasicIO, ConsoleOutput, OutputEvent, RecordingOutput
from .types import ErrorVal, VOID, format_number, is_number, is_truthy, to_integer, type_name

NUMERIC_STRING_RE = re.compile(r'\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*')

ARITHMETIC_OPERATORS = ('-', '*', '/', '%', '**')
COMPARISON_OPERATORS = ('>', '<', '>=', '<=')


def type_error(message: str) -> KorvaqError:
    return KorvaqError(ErrorVal('TypeError', message))


def range_error(message: str) -> KorvaqError:
    return KorvaqError(ErrorVal('RangeError', message))


def io_error(message: str) -> KorvaqError:
    return KorvaqError(ErrorVal('IOError', message))


class Interpreter:
    """Core interpreter that executes KorvaqScrip ASTs."""
    def __init__(self, output: Any = None, io: Optional[BasicIO] = None,
                 debug_level: int = 0, debug_file: Optional[str] = 'debug.txt'):
        self.env = Environment()
        self.output = output if output is not None else ConsoleOutput()
        self.io = io if io is not None else BasicIO()
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp = None
        self.math_functions = populate_math_functions()
        self.string_functions = populate_string_functions()
        # absolute paths of the files currently being connected, outermost first
        self.connecting: List[str] = []

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_file is None:
                print(msg)
                return
            if self.debug_fp is None:
                self.debug_fp = open(self.debug_file, 'w', encoding='utf-8')
            self.debug_fp.write(msg + '\n')
            self.debug_fp.flush()

    def close(self):
        if self.debug_fp is not None:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def run(self, program: Program) -> Any:
        """Execute a program and return the value of its last statement."""
        try:
            return self.interpret(program.body)
        except RecursionError:
            raise KorvaqError(ErrorVal('RangeError', 'maximum call depth exceeded')) from None

    def run_source(self, source: str) -> Any:
        try:
            program = parse_program(source)
        except RecursionError:
            raise ParseError('expression nesting too deep') from None
        return self.run(program)

    def interpret(self, statements: Sequence[Statement]) -> Any:
        value = None
        for stmt in statements:
            value = self.execute(stmt)
            if isinstance(value, ReturnSignal):
                return value.value
        return value

    def execute_block(self, statements: Sequence[Statement]) -> Optional[ReturnSignal]:
        for stmt in statements:
            result = self.execute(stmt)
            # propagate return signals
            if isinstance(result, ReturnSignal):
                return result
        return None

    def execute(self, node: Statement) -> Any:
        if isinstance(node, VariableDeclaration):
            value = self.evaluate(node.value)
            self.env.declare(node.name, value, node.is_immutable)
            if self.debug_level >= 2:
                kind = 'make' if node.is_immutable else 'let'
                self.debug(f"{kind} {node.name}: {type_name(value)}")
            return None
        if isinstance(node, Assignment):
            self.env.check_assignable(node.name)
            value = self.evaluate(node.value)
            self.env.assign(node.name, value)
            if self.debug_level >= 2:
                self.debug(f"assign {node.name}: {type_name(value)}")
            return None
        if isinstance(node, (PrintStatement, ErrorStatement, AlertStatement)):
            text = to_string(self.evaluate(node.value))
            if isinstance(node, PrintStatement):
                self.output.show(text)
            elif isinstance(node, ErrorStatement):
                self.output.error(text)
            else:
                self.output.alert(text)
            return None
        if isinstance(node, IfStatement):
            cond = self.evaluate(node.condition)
            truthy = is_truthy(cond)
            if self.debug_level >= 3:
                self.debug(f"if condition {type_name(cond)} -> {truthy}")
            if truthy:
                return self.execute_block(node.then_block.statements)
            if node.else_block is not None:
                return self.execute_block(node.else_block.statements)
            return None
        if isinstance(node, WhileStatement):
            while True:
                cond = self.evaluate(node.condition)
                if self.debug_level >= 3:
                    self.debug(f"while condition {type_name(cond)} -> {is_truthy(cond)}")
                if not is_truthy(cond):
                    break
                res = self.execute_block(node.block.statements)
                if isinstance(res, ReturnSignal):
                    return res
            return None
        if isinstance(node, RepeatStatement):
            return self.execute_repeat(node)
        if isinstance(node, FunctionDeclaration):
            self.env.define_function(node.name, node.params, node.body)
            if self.debug_level >= 2:
                self.debug(f"define function {node.name}({', '.join(node.params)})")
            return None
        if isinstance(node, DeleteVariable):
            if node.name == 'all':
                self.env.delete_all()
            else:
                self.env.delete(node.name)
            if self.debug_level >= 2:
                self.debug(f"delvar {node.name}")
            return None
        if isinstance(node, DeleteFunction):
            if node.name == 'all':
                self.env.delete_all_functions()
            else:
                self.env.delete_function(node.name)
            if self.debug_level >= 2:
                self.debug(f"delfunc {node.name}")
            return None
        if isinstance(node, ConnectStatement):
            self.connect(node.file_path)
            return None
        if isinstance(node, AsyncBlock):
            return self.execute_async(node)
        if isinstance(node, ReturnFromFunc):
            value = self.evaluate(node.value) if node.value is not None else VOID
            return ReturnSignal(value)
        if isinstance(node, Expression):
            return self.evaluate(node)
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def execute_repeat(self, node: RepeatStatement) -> Optional[ReturnSignal]:
        start = self.evaluate(node.start)
        end = self.evaluate(node.end)
        if not is_number(start) or not is_number(end):
            raise type_error(f'loop bounds must be Numbers, got {type_name(start)} and {type_name(end)}')
        if not start.is_integer() or not end.is_integer():
            raise type_error(f'loop bounds must be integers, got {format_number(start)} and {format_number(end)}')
        counter = start
        try:
            while counter <= end:
                self.env.bind_global(node.identifier, counter)
                if self.debug_level >= 3:
                    self.debug(f"loop {node.identifier} = {format_number(counter)}")
                res = self.execute_block(node.block.statements)
                if isinstance(res, ReturnSignal):
                    return res
                counter += 1.0
        finally:
            self.env.unbind_global(node.identifier)
        return None

    # Connect and async

    def connect(self, file_path: str):
        if not file_path.endswith('.kq'):
            raise io_error(f'connect only accepts .kq files: {file_path}')
        resolved = self.io.resolve_path(file_path)
        if resolved in self.connecting:
            raise io_error(f'circular connect: {file_path}')
        if self.debug_level >= 1:
            self.debug(f"connect {resolved}")
        source = self.io.read_file(resolved)
        program = parse_program(source)
        self.connecting.append(resolved)
        try:
            self.interpret(program.body)
        finally:
            self.connecting.pop()

    async def run_task(self, statement: Statement) -> Any:
        return self.execute(statement)

    async def gather_tasks(self, statements: Sequence[Statement]) -> List[Any]:
        tasks = [asyncio.create_task(self.run_task(stmt)) for stmt in statements]
        return await asyncio.gather(*tasks, return_exceptions=True)

    def execute_async(self, node: AsyncBlock) -> Optional[ReturnSignal]:
        if self.debug_level >= 1:
            self.debug(f"async block with {len(node.statements)} task(s)")
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            results = asyncio.run(self.gather_tasks(node.statements))
        else:
            # already inside an async block: run the children in this task
            results = []
            for stmt in node.statements:
                try:
                    results.append(self.execute(stmt))
                except Exception as e:
                    results.append(e)
        # join barrier passed; report the first failure in statement order
        for result in results:
            if isinstance(result, BaseException):
                raise result
        for result in results:
            if isinstance(result, ReturnSignal):
                return result
        return None

    # Expressions

    def evaluate(self, node: Expression) -> Any:
        if isinstance(node, NumberLiteral):
            return float(node.value)
        if isinstance(node, (StringLiteral, BooleanLiteral)):
            return node.value
        if isinstance(node, Identifier):
            return self.env.get(node.name)
        if isinstance(node, ArrayLiteral):
            return [self.evaluate(el) for el in node.elements]
        if isinstance(node, BinaryExpression):
            op = node.operator
            if op in ('&&', '||'):
                left = is_truthy(self.evaluate(node.left))
                if op == '&&' and not left:
                    return False
                if op == '||' and left:
                    return True
                return is_truthy(self.evaluate(node.right))
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            return self.apply_binary_op(op, left, right)
        if isinstance(node, UnaryExpression):
            value = self.evaluate(node.operand)
            if node.operator == '!':
                return not is_truthy(value)
            if node.operator == '-':
                if not is_number(value):
                    raise type_error(f'unary - requires a Number, got {type_name(value)}')
                return -value
            raise type_error(f'unknown unary operator {node.operator}')
        if isinstance(node, FunctionCall):
            return self.call_function(node.name, node.args)
        if isinstance(node, ReadStatement):
            path = self.evaluate(node.path)
            if not isinstance(path, str):
                raise type_error(f'read expects a String path, got {type_name(path)}')
            return self.io.read_file(self.io.resolve_path(path))
        if isinstance(node, ArrayAdd):
            array = self.get_array(node.array)
            array.append(self.evaluate(node.element))
            return array
        if isinstance(node, ArrayRemove):
            array = self.get_array(node.array)
            self.remove_element(node.array, array, self.evaluate(node.element))
            return array
        if isinstance(node, ArrayLength):
            return float(len(self.get_array(node.array)))
        if isinstance(node, ArrayAccess):
            array = self.get_array(node.array)
            index = self.array_index(node.array, array, self.evaluate(node.index))
            return array[index]
        if isinstance(node, ToJSON):
            return to_json(self.evaluate(node.value))
        if isinstance(node, ParseJSON):
            text = self.evaluate(node.value)
            if not isinstance(text, str):
                raise type_error(f'parjson expects a String, got {type_name(text)}')
            return parse_json(text)
        if isinstance(node, MathFunction):
            return self.call_builtin(self.math_functions[node.function], [self.evaluate(node.argument)])
        if isinstance(node, StringUtility):
            return self.call_builtin(self.string_functions[node.function], [self.evaluate(node.argument)])
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    # Arrays

    def get_array(self, name: str) -> list:
        if not self.env.is_defined(name):
            raise KorvaqError(ErrorVal('NameError', f'undefined array {name}'))
        value = self.env.get(name)
        if not isinstance(value, list):
            raise type_error(f'{name} is not an Array, got {type_name(value)}')
        return value

    def array_index(self, name: str, array: list, index: Any) -> int:
        if not is_number(index):
            raise type_error(f'array index must be a Number, got {type_name(index)}')
        if not index.is_integer():
            raise type_error(f'array index must be an integer, got {format_number(index)}')
        position = int(index)
        if position < 0 or position >= len(array):
            raise range_error(f'index {position} out of range for array {name} of length {len(array)}')
        return position

    def remove_element(self, name: str, array: list, element: Any):
        if isinstance(element, str):
            for i, item in enumerate(array):
                if self.equal_values(item, element):
                    del array[i]
                    return
            raise range_error(f'value {element!r} not found in array {name}')
        if is_number(element):
            del array[self.array_index(name, array, element)]
            return
        raise type_error(f'arrdel expects a String value or Number index, got {type_name(element)}')

    # Calls

    def call_builtin(self, func: BuiltinFunction, args: List[Any]) -> Any:
        # Check arity; None means variadic
        if func.arity is not None and len(args) != func.arity:
            raise type_error(f"{func.name} expects {func.arity} argument(s)")
        return func.fn(args)

    def call_function(self, name: str, arg_nodes: Sequence[Expression]) -> Any:
        func = self.env.get_function(name)
        # arguments are evaluated in the caller's scope
        args = [self.evaluate(arg) for arg in arg_nodes]
        if self.debug_level >= 1:
            self.debug(f"call {name} with {len(args)} argument(s)")
        with self.env.call_frame() as frame:
            for i, param in enumerate(func.params):
                frame.values[param] = args[i] if i < len(args) else VOID
            res = self.execute_block(func.body.statements)
        if isinstance(res, ReturnSignal):
            return res.value
        return VOID

    # Operators

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        if op == '+':
            # If either operand is a string, concatenate textual forms
            if isinstance(a, str) or isinstance(b, str):
                return to_string(a) + to_string(b)
            if is_number(a) and is_number(b):
                return a + b
            raise type_error(f'unsupported + for {type_name(a)} and {type_name(b)}')
        if op in ARITHMETIC_OPERATORS:
            if not (is_number(a) and is_number(b)):
                raise type_error(f'unsupported {op} for {type_name(a)} and {type_name(b)}')
            return self.arithmetic(op, a, b)
        if op == '^':
            if not (is_number(a) and is_number(b)):
                raise type_error(f'unsupported ^ for {type_name(a)} and {type_name(b)}')
            return float(to_integer(a) ^ to_integer(b))
        if op in COMPARISON_OPERATORS:
            comparable = (is_number(a) and is_number(b)) or (isinstance(a, str) and isinstance(b, str))
            if not comparable:
                raise type_error(f'comparison not supported for {type_name(a)} and {type_name(b)}')
            if op == '>':
                return a > b
            if op == '<':
                return a < b
            if op == '>=':
                return a >= b
            return a <= b
        if op == '===':
            return self.equal_values(a, b)
        if op == '!==':
            return not self.equal_values(a, b)
        if op == '==':
            return self.loose_equal(a, b)
        if op == '!=':
            return not self.loose_equal(a, b)
        raise type_error(f'unknown operator {op}')

    def arithmetic(self, op: str, a: float, b: float) -> float:
        if op == '-':
            return a - b
        if op == '*':
            return a * b
        if op == '/':
            if b == 0.0:
                if a == 0.0 or math.isnan(a):
                    return math.nan
                return math.copysign(math.inf, a) * math.copysign(1.0, b)
            return a / b
        if op == '%':
            if b == 0.0 or math.isinf(a) or math.isnan(a) or math.isnan(b):
                return math.nan
            # sign follows the dividend
            return math.fmod(a, b)
        try:
            return math.pow(a, b)
        except OverflowError:
            odd_exponent = b.is_integer() and int(b) % 2 == 1
            return -math.inf if a < 0 and odd_exponent else math.inf
        except ValueError:
            if a == 0.0 and b < 0:
                return math.inf
            return math.nan

    def equal_values(self, a: Any, b: Any) -> bool:
        # Strict deep equality: same kind and equal contents
        if type_name(a) != type_name(b):
            return False
        if isinstance(a, list):
            if len(a) != len(b):
                return False
            return all(self.equal_values(x, y) for x, y in zip(a, b))
        if isinstance(a, dict):
            if a.keys() != b.keys():
                return False
            return all(self.equal_values(a[k], b[k]) for k in a)
        return a == b

    def loose_equal(self, a: Any, b: Any) -> bool:
        # Numbers and booleans compare numerically against numeric strings
        if (is_number(a) or isinstance(a, bool) or is_number(b) or isinstance(b, bool)) \
                and type_name(a) != type_name(b):
            x = self.numeric_value(a)
            y = self.numeric_value(b)
            if x is not None and y is not None:
                return x == y
            return False
        return self.equal_values(a, b)

    def numeric_value(self, value: Any) -> Optional[float]:
        if isinstance(value, bool):
            return 1.0 if value else 0.0
        if is_number(value):
            return value
        if isinstance(value, str):
            if value.strip() == '':
                return 0.0
            if NUMERIC_STRING_RE.fullmatch(value):
                return float(value)
        return None


@dataclass
class RunResult:
    """Outcome of `run_program`: output events, the error if any, and the final value."""
    events: List[OutputEvent] = field(default_factory=list)
    error: Optional[ErrorVal] = None
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def lines(self, channel: str = 'show') -> List[str]:
        return [event.text for event in self.events if event.channel == channel]


def run_program(source: str, debug_level: int = 0, io: Optional[BasicIO] = None) -> RunResult:
    """Run source text in a fresh interpreter, recording output instead of printing it.

    Language errors are captured in the result rather than raised.
    """
    output = RecordingOutput()
    interpreter = Interpreter(output=output, io=io, debug_level=debug_level)
    try:
        value = interpreter.run_source(source)
    except KorvaqError as e:
        return RunResult(output.events, e.err, None)
    finally:
        interpreter.close()
    return RunResult(output.events, None, value)


def run_file(file_path: str, debug_level: int = 0) -> Interpreter:
    """Execute a KorvaqScrip file, returning the interpreter instance."""
    interpreter = Interpreter(debug_level=debug_level)
    try:
        interpreter.run_source(interpreter.io.read_file(file_path))
    finally:
        interpreter.close()
    return interpreter
