import re
from typing import Any, Callable, Dict, List

from korvaq.builtin_function import BuiltinFunction
from korvaq.errors import KorvaqError
from korvaq.types import ErrorVal, format_number, is_number, type_name

PUNCTUATION_RE = re.compile(r"[^\w\s]")


def populate_string_functions() -> Dict[str, BuiltinFunction]:
    def text_argument(name: str, value: Any) -> str:
        if isinstance(value, str):
            return value
        if is_number(value):
            return format_number(value)
        raise KorvaqError(ErrorVal('TypeError', f'{name} expects a String or Number, got {type_name(value)}'))

    def textual(name: str, op: Callable[[str], Any]) -> BuiltinFunction:
        def fn(args: List[Any]) -> Any:
            return op(text_argument(name, args[0]))
        return BuiltinFunction(name, 1, fn)

    def std_tokenize(text: str) -> List[str]:
        return PUNCTUATION_RE.sub('', text).split()

    def std_reverse(args: List[Any]) -> Any:
        # arrays reverse into a new array; the original is left untouched
        if isinstance(args[0], list):
            return list(reversed(args[0]))
        return text_argument('reverse', args[0])[::-1]

    return {
        'tokenize': textual('tokenize', std_tokenize),
        'uppercase': textual('uppercase', str.upper),
        'lowercase': textual('lowercase', str.lower),
        'reverse': BuiltinFunction('reverse', 1, std_reverse),
    }
