import enum
from dataclasses import dataclass
from typing import Iterator, Optional

from exprcalc.builtins import find_builtin
from exprcalc.utils import PrintableEnum, SourceError


@dataclass
class TokenizerError(SourceError):
    label = "Tokenizer error"


class TokenType(PrintableEnum):
    NUMBER = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    STAR = enum.auto()
    SLASH = enum.auto()
    CARET = enum.auto()
    PERCENT = enum.auto()
    BRACKET_OPEN = enum.auto()
    BRACKET_CLOSE = enum.auto()
    COMMA = enum.auto()
    BUILTIN = enum.auto()
    ERROR = enum.auto()
    END = enum.auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    start: int
    end: int
    builtin: Optional[int] = None  # index into BUILTINS for BUILTIN tokens
    errmsg: Optional[str] = None  # set for ERROR tokens only

    def __str__(self) -> str:
        return f"<{self.type}>{self.lexeme}"


WHITESPACE = frozenset(" \t\n\r")

SINGLE_CHAR_TOKENS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "^": TokenType.CARET,
    "%": TokenType.PERCENT,
    "(": TokenType.BRACKET_OPEN,
    ")": TokenType.BRACKET_CLOSE,
    ",": TokenType.COMMA,
}


def _is_valid_in_number(s: str) -> bool:
    # at most one decimal point is checked later, when the literal is parsed
    return s.isdecimal() or s == "."


def _is_valid_in_identifier(s: str) -> bool:
    return s.isalnum() or s == "_"


class Tokenizer:
    """Pull-based lexer over a single source string.

    Every call to ``next`` returns exactly one token. Once the input is
    exhausted it keeps returning END tokens, so callers may look ahead past
    the end freely. Bad input never stops the scan: it produces ERROR tokens
    and lexing continues after them.
    """

    def __init__(self, code: str) -> None:
        self.code = code
        self.pos = 0

    def next(self) -> Token:
        code = self.code
        while self.pos < len(code) and code[self.pos] in WHITESPACE:
            self.pos += 1

        start = self.pos
        if start >= len(code):
            return Token(type=TokenType.END, lexeme="", start=start, end=start)

        char = code[start]
        if char.isdecimal():
            end = self._scan_while(start + 1, _is_valid_in_number)
            return self._make(TokenType.NUMBER, start, end)
        elif char.isalpha():
            end = self._scan_while(start + 1, _is_valid_in_identifier)
            name = code[start:end]
            idx = find_builtin(name)
            if idx is None:
                return self._make(TokenType.ERROR, start, end, errmsg=f"Unknown function {name!r} at pos {start}")
            return self._make(TokenType.BUILTIN, start, end, builtin=idx)
        elif char in SINGLE_CHAR_TOKENS:
            return self._make(SINGLE_CHAR_TOKENS[char], start, start + 1)
        else:
            return self._make(TokenType.ERROR, start, start + 1, errmsg=f"Unexpected character {char!r} at pos {start}")

    def _scan_while(self, idx: int, predicate) -> int:
        while idx < len(self.code) and predicate(self.code[idx]):
            idx += 1
        return idx

    def _make(self, type_: TokenType, start: int, end: int, **kwargs) -> Token:
        self.pos = end
        return Token(type=type_, lexeme=self.code[start:end], start=start, end=end, **kwargs)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next()
            yield token
            if token.type is TokenType.END:
                return


def tokenize(code: str) -> list[Token]:
    """All tokens of ``code``, the trailing END token included."""
    return list(Tokenizer(code))


def as_error(token: Token, code: str) -> TokenizerError:
    return TokenizerError(token.errmsg or f"Invalid token {token.lexeme!r}", code=code, error_char_idx=token.start)


def scan_errors(code: str) -> list[TokenizerError]:
    """Every lexical error in ``code``, found in a single pass."""
    return [as_error(t, code) for t in Tokenizer(code) if t.type is TokenType.ERROR]
