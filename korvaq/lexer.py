"""Tokenizer for KorvaqScrip source text.

The tokenizer is a single pass cursor over the source. Tokens are produced
on demand by `Tokenizer.next_token`, which returns ``None`` once the input
is exhausted; iterating a `Tokenizer` yields the same tokens lazily. To
start again from the beginning, construct a new tokenizer.

Whitespace, semicolons and ``//`` comments are skipped. Semicolons are
optional statement terminators and carry no meaning for the parser.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union

from .errors import LexerError


class TokenKind(Enum):
    # keywords
    LET = 'let'
    MAKE = 'make'
    SHOW = 'show'
    ERROR = 'error'
    ALERT = 'alert'
    IF = 'if'
    ELSE = 'else'
    LOOP = 'loop'
    WHILE = 'while'
    FUNC = 'func'
    RETURN = 'return'
    DELVAR = 'delvar'
    DELFUNC = 'delfunc'
    CONNECT = 'connect'
    ASYNC = 'async'
    READ = 'read'
    CALL = 'call'
    ARR = 'arr'
    ARRADD = 'arradd'
    ARRDEL = 'arrdel'
    ARRSIZE = 'arrsize'
    TOJSON = 'tojson'
    PARJSON = 'parjson'
    FLOOR = 'floor'
    ROUND = 'round'
    SQRT = 'sqrt'
    SIN = 'sin'
    COS = 'cos'
    TAN = 'tan'
    TOKENIZE = 'tokenize'
    UPPERCASE = 'uppercase'
    LOWERCASE = 'lowercase'
    REVERSE = 'reverse'
    # punctuation
    LPAREN = '('
    RPAREN = ')'
    LBRACE = '{'
    RBRACE = '}'
    LBRACKET = '['
    RBRACKET = ']'
    COMMA = ','
    ASSIGN = '='
    NOT = '!'
    # binary operators share one kind; the literal tells them apart
    OPERATOR = 'operator'
    # literals
    NUMBER = 'number'
    STRING = 'string'
    BOOLEAN = 'boolean'
    IDENTIFIER = 'identifier'


KEYWORDS = {
    kind.value: kind
    for kind in TokenKind
    if kind.value.isalpha() and kind not in (
        TokenKind.OPERATOR, TokenKind.NUMBER, TokenKind.STRING,
        TokenKind.BOOLEAN, TokenKind.IDENTIFIER,
    )
}

# Vocabulary of common host languages that may not appear in programs.
RESTRICTED_WORDS = frozenset({
    'var', 'const', 'for', 'switch', 'case', 'break',
    'continue', 'default', 'class', 'extends', 'super', 'this',
    'typeof', 'instanceof', 'delete', 'new', 'in',
    'try', 'catch', 'finally', 'throw', 'debugger',
})

PUNCTUATION = {
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
    '{': TokenKind.LBRACE,
    '}': TokenKind.RBRACE,
    '[': TokenKind.LBRACKET,
    ']': TokenKind.RBRACKET,
    ',': TokenKind.COMMA,
}

# Longest operators first so that `===` wins over `==` and `=`.
OPERATORS = ('===', '!==', '==', '!=', '>=', '<=', '&&', '||', '**',
             '+', '-', '*', '/', '%', '^', '>', '<')

QUOTES = ('"', "'", '`')


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    literal: Union[str, float, bool]
    position: int

    def __repr__(self) -> str:
        return f"{self.kind.name}({self.literal!r})"


def _is_word_start(c: str) -> bool:
    return c == '_' or ('a' <= c <= 'z') or ('A' <= c <= 'Z')


def _is_word_char(c: str) -> bool:
    return _is_word_start(c) or ('0' <= c <= '9')


class Tokenizer:
    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            if token is None:
                return
            yield token

    def location(self, position: int) -> Tuple[int, int]:
        """Translate a source offset into a 1-based (line, column) pair."""
        line = self.source.count('\n', 0, position) + 1
        line_start = self.source.rfind('\n', 0, position) + 1
        return line, position - line_start + 1

    def describe(self, position: int) -> str:
        line, column = self.location(position)
        return f"{line}:{column}"

    def next_token(self) -> Optional[Token]:
        source = self.source
        length = len(source)
        while self.pos < length:
            c = source[self.pos]
            # Skip whitespace and statement separators
            if c.isspace() or c == ';':
                self.pos += 1
                continue
            # Single-line comments
            if c == '/' and source.startswith('//', self.pos):
                end = source.find('\n', self.pos)
                self.pos = length if end == -1 else end + 1
                continue
            if '0' <= c <= '9':
                return self.read_number()
            if c in QUOTES:
                return self.read_string(c)
            if _is_word_start(c):
                return self.read_word()
            if c in PUNCTUATION:
                self.pos += 1
                return Token(PUNCTUATION[c], c, self.pos - 1)
            return self.read_operator()
        return None

    def read_number(self) -> Token:
        start = self.pos
        seen_dot = False
        while self.pos < len(self.source):
            c = self.source[self.pos]
            if '0' <= c <= '9':
                self.pos += 1
            elif c == '.' and not seen_dot:
                seen_dot = True
                self.pos += 1
            else:
                break
        return Token(TokenKind.NUMBER, float(self.source[start:self.pos]), start)

    def read_string(self, quote: str) -> Token:
        start = self.pos
        end = self.source.find(quote, start + 1)
        if end == -1:
            raise LexerError(f"unterminated string literal at {self.describe(start)}")
        self.pos = end + 1
        return Token(TokenKind.STRING, self.source[start + 1:end], start)

    def read_word(self) -> Token:
        start = self.pos
        while self.pos < len(self.source) and _is_word_char(self.source[self.pos]):
            self.pos += 1
        word = self.source[start:self.pos]
        if word in ('true', 'false'):
            return Token(TokenKind.BOOLEAN, word == 'true', start)
        if word in RESTRICTED_WORDS:
            raise LexerError(f"restricted keyword used: {word} at {self.describe(start)}")
        kind = KEYWORDS.get(word, TokenKind.IDENTIFIER)
        return Token(kind, word, start)

    def read_operator(self) -> Token:
        start = self.pos
        for op in OPERATORS:
            if self.source.startswith(op, start):
                self.pos += len(op)
                return Token(TokenKind.OPERATOR, op, start)
        c = self.source[start]
        if c == '=':
            self.pos += 1
            return Token(TokenKind.ASSIGN, c, start)
        if c == '!':
            self.pos += 1
            return Token(TokenKind.NOT, c, start)
        raise LexerError(f"unexpected character {c!r} at {self.describe(start)}")


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens."""
    return list(Tokenizer(source))
