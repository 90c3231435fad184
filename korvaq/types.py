"""Runtime value model for KorvaqScrip.

KorvaqScrip values map onto plain Python objects:

* Number  -> ``float`` (the interpreter never produces ``int``)
* String  -> ``str``
* Boolean -> ``bool``
* Array   -> ``list`` (a shared, mutable reference)
* Void    -> the ``VOID`` singleton, bound to parameters that received no
  argument
* JSON objects decoded by ``parjson`` -> ``dict``

This module also holds the error value record and the helpers that decide
truthiness, type names and the textual form of numbers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import math


class Void:
    """Marker object for an argument that was not supplied."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'void'


VOID = Void()


@dataclass
class ErrorVal:
    """Represents a KorvaqScrip error.

    ``name`` is the error kind (``NameError``, ``TypeError``, ``RangeError``,
    ``IOError``, ``JSONError``, ``LexicalError`` or ``SyntaxError``) and
    ``message`` a human readable description.
    """
    name: str
    message: str

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r})"


def is_number(value: Any) -> bool:
    return isinstance(value, float)


def type_name(value: Any) -> str:
    """Return the KorvaqScrip type name of a runtime value."""
    if isinstance(value, bool):
        return 'Boolean'
    if isinstance(value, float):
        return 'Number'
    if isinstance(value, str):
        return 'String'
    if isinstance(value, list):
        return 'Array'
    if isinstance(value, dict):
        return 'Object'
    if isinstance(value, Void):
        return 'Void'
    return type(value).__name__


def is_truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return value != 0.0 and not math.isnan(value)
    if isinstance(value, str):
        return len(value) > 0
    if isinstance(value, Void):
        return False
    # arrays and objects are always truthy, even when empty
    return True


def format_number(value: float) -> str:
    """Format a number the way it is shown to programs.

    Integral values print without a fractional part (``5`` rather than
    ``5.0``); non-finite values use the ``NaN``/``Infinity`` spellings.
    """
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def to_plain(value: Any, _seen: frozenset = frozenset()) -> Any:
    """Convert a runtime value into JSON-ready Python data.

    Integral numbers become ``int`` so they serialise without ``.0``;
    non-finite numbers and Void become ``None``. Raises ``ValueError`` for
    an array that contains itself.
    """
    if isinstance(value, bool) or isinstance(value, str):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        if value.is_integer():
            return int(value)
        return value
    if isinstance(value, Void) or value is None:
        return None
    if isinstance(value, (list, dict)):
        if id(value) in _seen:
            raise ValueError('circular array cannot be serialised')
        seen = _seen | {id(value)}
        if isinstance(value, list):
            return [to_plain(item, seen) for item in value]
        return {str(k): to_plain(v, seen) for k, v in value.items()}
    raise ValueError(f'cannot serialise value of type {type_name(value)}')


def to_integer(value: float) -> int:
    """Truncate a number toward zero; NaN and infinities become 0."""
    if math.isnan(value) or math.isinf(value):
        return 0
    return int(value)
