"""JSON serialization/deserialization for KorvaqScrip ASTs.

This module converts between the AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Each node becomes an
object whose ``type`` key names the node class and whose remaining keys
are the dataclass fields; sequences become lists and are restored as
tuples, so a round-trip yields an equal tree.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any

from .ast import Node, NODE_TYPES


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (int, float, str, bool)):
        return node
    if isinstance(node, (list, tuple)):
        return [ast_to_obj(item) for item in node]
    if isinstance(node, Node):
        obj = {"type": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj
    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, list):
        return tuple(ast_from_obj(item) for item in obj)
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    cls = NODE_TYPES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    kwargs = {f.name: ast_from_obj(obj[f.name]) for f in fields(cls) if f.name in obj}
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Malformed {t} node: {e}") from None
