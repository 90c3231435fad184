import math
from typing import Any, Callable, Dict, List

from korvaq.builtin_function import BuiltinFunction
from korvaq.errors import KorvaqError
from korvaq.types import ErrorVal, is_number, type_name


def populate_math_functions() -> Dict[str, BuiltinFunction]:
    def numeric(name: str, op: Callable[[float], float]) -> BuiltinFunction:
        def fn(args: List[Any]) -> Any:
            x = args[0]
            if not is_number(x):
                raise KorvaqError(ErrorVal('TypeError', f'{name} expects a Number, got {type_name(x)}'))
            try:
                return float(op(x))
            except (ValueError, OverflowError):
                # domain errors follow IEEE and produce NaN
                return math.nan
        return BuiltinFunction(name, 1, fn)

    def floor(x: float) -> float:
        if math.isnan(x) or math.isinf(x):
            return x
        return math.floor(x)

    def round_half_up(x: float) -> float:
        if math.isnan(x) or math.isinf(x):
            return x
        return math.floor(x + 0.5)

    def sqrt(x: float) -> float:
        if x < 0:
            return math.nan
        return math.sqrt(x)

    return {
        'floor': numeric('floor', floor),
        'round': numeric('round', round_half_up),
        'sqrt': numeric('sqrt', sqrt),
        'sin': numeric('sin', math.sin),
        'cos': numeric('cos', math.cos),
        'tan': numeric('tan', math.tan),
    }
