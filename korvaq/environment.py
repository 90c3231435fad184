from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from korvaq.ast import Block
from korvaq.errors import KorvaqError
from korvaq.types import ErrorVal


def name_error(message: str) -> KorvaqError:
    return KorvaqError(ErrorVal('NameError', message))


class Scope:
    """A single mapping of identifiers to values plus the set of immutable names."""
    def __init__(self, parent: Optional['Scope'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}
        self.consts: Set[str] = set()

    def lookup(self, name: str) -> Optional['Scope']:
        """Return the innermost scope on the chain that binds `name`."""
        scope: Optional[Scope] = self
        while scope is not None:
            if name in scope.values:
                return scope
            scope = scope.parent
        return None

    def is_immutable(self, name: str) -> bool:
        owner = self.lookup(name)
        return owner is not None and name in owner.consts


@dataclass(frozen=True)
class FunctionDefinition:
    name: str
    params: Tuple[str, ...]
    body: Block


class Environment:
    """Holds the global scope, the call-frame stack and the function table.

    Each call frame's parent is the global scope, so function bodies see
    their own locals and the globals but never the caller's locals.
    """
    def __init__(self):
        self.globals = Scope()
        self.frames: List[Scope] = []
        self.functions: Dict[str, FunctionDefinition] = {}

    @property
    def current(self) -> Scope:
        return self.frames[-1] if self.frames else self.globals

    @contextmanager
    def call_frame(self) -> Iterator[Scope]:
        frame = Scope(parent=self.globals)
        self.frames.append(frame)
        try:
            yield frame
        finally:
            self.frames.pop()

    # Variables

    def is_defined(self, name: str) -> bool:
        return self.current.lookup(name) is not None

    def get(self, name: str) -> Any:
        owner = self.current.lookup(name)
        if owner is None:
            raise name_error(f'undefined variable {name}')
        return owner.values[name]

    def declare(self, name: str, value: Any, immutable: bool = False):
        if name == 'all':
            raise name_error("'all' is reserved and cannot be used as a variable name")
        scope = self.current
        if scope.is_immutable(name):
            raise name_error(f'cannot redeclare immutable variable {name}')
        if immutable and name in scope.values:
            raise name_error(f'variable {name} already declared')
        scope.values[name] = value
        if immutable:
            scope.consts.add(name)

    def check_assignable(self, name: str) -> Scope:
        """Return the scope that would receive an assignment to `name`."""
        if name == 'all':
            raise name_error("'all' is reserved and cannot be assigned")
        owner = self.current.lookup(name)
        if owner is None:
            raise name_error(f'cannot assign to undeclared variable {name}')
        if name in owner.consts:
            raise name_error(f'cannot assign to immutable variable {name}')
        return owner

    def assign(self, name: str, value: Any):
        owner = self.check_assignable(name)
        owner.values[name] = value

    def delete(self, name: str):
        owner = self.current.lookup(name)
        if owner is None:
            raise name_error(f'cannot delete undefined variable {name}')
        if name in owner.consts:
            raise name_error(f'cannot delete immutable variable {name}')
        del owner.values[name]

    def delete_all(self):
        scope = self.current
        # checked up front so that nothing is removed when one name is immutable
        for name in scope.values:
            if name in scope.consts:
                raise name_error(f'cannot delete immutable variable {name}')
        scope.values.clear()

    def bind_global(self, name: str, value: Any):
        """Bind `name` directly in the global scope (loop variables)."""
        if name == 'all':
            raise name_error("'all' is reserved and cannot be used as a variable name")
        if name in self.globals.consts:
            raise name_error(f'cannot rebind immutable variable {name}')
        if self.frames and name in self.current.values:
            raise name_error(f'loop variable {name} is hidden by a local of the same name')
        self.globals.values[name] = value

    def unbind_global(self, name: str):
        if name not in self.globals.consts:
            self.globals.values.pop(name, None)

    # Functions

    def define_function(self, name: str, params: Tuple[str, ...], body: Block) -> FunctionDefinition:
        if name == 'all':
            raise name_error("'all' is reserved and cannot be used as a function name")
        if 'all' in params:
            raise name_error(f"'all' cannot be used as a parameter name in function {name}")
        definition = FunctionDefinition(name, tuple(params), body)
        self.functions[name] = definition
        return definition

    def get_function(self, name: str) -> FunctionDefinition:
        try:
            return self.functions[name]
        except KeyError:
            raise name_error(f'undefined function {name}') from None

    def delete_function(self, name: str):
        if name not in self.functions:
            raise name_error(f'cannot delete undefined function {name}')
        del self.functions[name]

    def delete_all_functions(self):
        self.functions.clear()
