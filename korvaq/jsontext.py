"""JSON text support for `tojson` / `parjson` and value rendering.

Decoding uses a small Lark grammar rather than the `json` module so that
the accepted text and the produced values follow KorvaqScrip's value
model directly: every number becomes a ``float``, ``null`` becomes Void
and objects become plain dicts.
"""

from __future__ import annotations

import json
from typing import Any

from lark import Lark, Transformer
from lark.exceptions import LarkError

from .errors import KorvaqError
from .types import ErrorVal, Void, VOID, format_number, to_plain


JSON_GRAMMAR = r"""
    ?start: value

    ?value: object
          | array
          | string
          | NUMBER             -> number
          | "true"             -> true
          | "false"            -> false
          | "null"             -> null

    array  : "[" [value ("," value)*] "]"
    object : "{" [pair ("," pair)*] "}"
    pair   : string ":" value

    string : ESCAPED_STRING

    NUMBER : /-?(0|[1-9][0-9]*)(\.[0-9]+)?([eE][+-]?[0-9]+)?/

    %import common.ESCAPED_STRING
    %import common.WS
    %ignore WS
"""


class JsonTransformer(Transformer):
    """Turn the JSON parse tree into runtime values."""
    def string(self, s):
        (s,) = s
        # ESCAPED_STRING keeps its quotes and escapes
        return json.loads(s)

    def number(self, n):
        (n,) = n
        return float(n)

    array = list
    pair = tuple
    object = dict

    null = lambda self, _: VOID
    true = lambda self, _: True
    false = lambda self, _: False


JSON_PARSER = Lark(
    JSON_GRAMMAR,
    parser='lalr',
    lexer='basic',
    maybe_placeholders=False,
    transformer=JsonTransformer(),
)


def json_error(message: str) -> KorvaqError:
    return KorvaqError(ErrorVal('JSONError', message))


def parse_json(text: str) -> Any:
    """Decode JSON text into a runtime value; malformed text is a JSONError."""
    try:
        return JSON_PARSER.parse(text)
    except (LarkError, ValueError) as e:
        first_line = str(e).strip().splitlines()[0] if str(e).strip() else type(e).__name__
        raise json_error(f'invalid JSON text: {first_line}') from None


def to_json(value: Any) -> str:
    """Encode a runtime value as compact JSON text."""
    try:
        plain = to_plain(value)
    except ValueError as e:
        raise json_error(str(e)) from None
    return json.dumps(plain, separators=(',', ':'), ensure_ascii=False)


def to_string(value: Any) -> str:
    """Render a value the way `show`, `error`, `alert` and `+` see it."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Void):
        return 'void'
    if isinstance(value, (list, dict)):
        return to_json(value)
    return str(value)
