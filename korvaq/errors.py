from typing import Any
from korvaq.types import ErrorVal


class KorvaqError(Exception):
    """Exception type used to propagate KorvaqScrip errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"{err.name}: {err.message}")
        self.err = err

    @property
    def kind(self) -> str:
        return self.err.name

    @property
    def message(self) -> str:
        return self.err.message


class LexerError(KorvaqError):
    """Raised by the tokenizer for malformed source text."""
    def __init__(self, message: str):
        super().__init__(ErrorVal('LexicalError', message))


class ParseError(KorvaqError):
    """Raised by the parser for unexpected or missing tokens."""
    def __init__(self, message: str):
        super().__init__(ErrorVal('SyntaxError', message))


class ReturnSignal:
    """Completion record produced by a `return` statement.

    Block executors hand it back to their caller instead of a normal
    (``None``) completion until it reaches the function call.
    """
    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"
