"""Recursive descent parser producing an immutable expression tree.

Grammar, loosest binding first::

    Expr -> Mod
    Mod  -> Sum ( "%" Sum )*
    Sum  -> Fact ( ("+" | "-") Fact )*
    Fact -> Exp ( ("*" | "/") Exp )*
    Exp  -> Term ( "^" Exp )?
    Term -> Number | "(" Expr ")" | Builtin "(" Expr ( "," Expr ){arity - 1} ")"

Every level is left-associative except ``^``, which nests to the right.
The first error aborts the parse; no partial tree is ever returned.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Callable

from exprcalc.builtins import arg_count, builtin_name
from exprcalc.tokenizer import Token, Tokenizer, TokenType, as_error
from exprcalc.utils import PrintableEnum, SourceError

logger = logging.getLogger(__name__)


@dataclass
class ParserError(SourceError):
    label = "Parser error"


@dataclass
class InvalidNumberError(ParserError):
    label = "Invalid number"


class BinaryOperator(PrintableEnum):
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    POW = enum.auto()
    MOD = enum.auto()


@dataclass(frozen=True)
class BinaryOperation:
    operator: BinaryOperator
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class FunctionCall:
    builtin: int
    args: tuple["Expression", ...]


Expression = float | BinaryOperation | FunctionCall


BINARY_OPERATORS = {
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUB,
    TokenType.STAR: BinaryOperator.MUL,
    TokenType.SLASH: BinaryOperator.DIV,
    TokenType.CARET: BinaryOperator.POW,
    TokenType.PERCENT: BinaryOperator.MOD,
}

OPERATOR_SYMBOLS = {
    BinaryOperator.ADD: "+",
    BinaryOperator.SUB: "-",
    BinaryOperator.MUL: "*",
    BinaryOperator.DIV: "/",
    BinaryOperator.POW: "^",
    BinaryOperator.MOD: "%",
}


def _describe(token: Token) -> str:
    if token.type is TokenType.END:
        return "end of input"
    return f"{token.lexeme!r} ({token.type})"


class Parser:
    def __init__(self, code: str) -> None:
        self.code = code
        self.tokenizer = Tokenizer(code)
        self.current = Token(type=TokenType.END, lexeme="", start=0, end=0)
        self.lookahead = self.current

    def advance(self) -> Token:
        consumed = self.current
        self.current = self.lookahead
        self.lookahead = self.tokenizer.next()
        return consumed

    def error(self, errmsg: str) -> ParserError:
        if self.current.type is TokenType.ERROR:
            return as_error(self.current, self.code)
        return ParserError(
            f"{errmsg}, found {_describe(self.current)} at pos {self.current.start}",
            code=self.code,
            error_char_idx=self.current.start,
        )

    def expect(self, token_type: TokenType, errmsg: str) -> Token:
        if self.current.type is not token_type:
            raise self.error(errmsg)
        return self.advance()

    def parse(self, require_end: bool = True) -> Expression:
        """Parse one expression.

        With ``require_end`` the whole input must be consumed, otherwise
        whatever follows the first complete expression is ignored.
        """
        self.advance()
        self.advance()
        try:
            expression = self.parse_expr()
        except RecursionError:
            raise ParserError(
                "Expression is nested too deeply", code=self.code, error_char_idx=self.current.start
            ) from None
        if require_end and self.current.type is not TokenType.END:
            raise self.error("Unexpected trailing input")
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Parsed %r into %s", self.code, format_expression(expression))
        return expression

    def parse_expr(self) -> Expression:
        return self.parse_mod()

    def parse_mod(self) -> Expression:
        return self._fold_left(self.parse_sum, (TokenType.PERCENT,))

    def parse_sum(self) -> Expression:
        return self._fold_left(self.parse_fact, (TokenType.PLUS, TokenType.MINUS))

    def parse_fact(self) -> Expression:
        return self._fold_left(self.parse_exp, (TokenType.STAR, TokenType.SLASH))

    def parse_exp(self) -> Expression:
        base = self.parse_term()
        if self.current.type is not TokenType.CARET:
            return base
        self.advance()
        return BinaryOperation(operator=BinaryOperator.POW, left=base, right=self.parse_exp())

    def _fold_left(self, parse_operand: Callable[[], Expression], token_types: tuple[TokenType, ...]) -> Expression:
        result = parse_operand()
        while self.current.type in token_types:
            operator = BINARY_OPERATORS[self.advance().type]
            result = BinaryOperation(operator=operator, left=result, right=parse_operand())
        return result

    def parse_term(self) -> Expression:
        token = self.current
        if token.type is TokenType.NUMBER:
            self.advance()
            try:
                return float(token.lexeme)
            except ValueError:
                raise InvalidNumberError(
                    f"Invalid decimal number {token.lexeme!r} at pos {token.start}",
                    code=self.code,
                    error_char_idx=token.start,
                ) from None
        elif token.type is TokenType.BRACKET_OPEN:
            self.advance()
            expression = self.parse_expr()
            self.expect(TokenType.BRACKET_CLOSE, "Expected ')'")
            return expression
        elif token.type is TokenType.BUILTIN:
            builtin = token.builtin
            if builtin is None:
                raise self.error("Unresolved function")
            self.advance()
            name = builtin_name(builtin)
            self.expect(TokenType.BRACKET_OPEN, f"Expected '(' after function {name!r}")
            args: list[Expression] = []
            for i in range(arg_count(builtin)):
                if i > 0:
                    self.expect(TokenType.COMMA, f"Expected ',' between arguments of {name!r}")
                args.append(self.parse_expr())
            self.expect(TokenType.BRACKET_CLOSE, f"Expected ')' after arguments of {name!r}")
            return FunctionCall(builtin=builtin, args=tuple(args))
        else:
            raise self.error("Unexpected token")


def parse(code: str, require_end: bool = True) -> Expression:
    return Parser(code).parse(require_end=require_end)


def format_expression(expression: Expression) -> str:
    """Fully parenthesised infix rendering of a tree, for display."""
    parts: list[str] = []
    pending: list[tuple[Expression, bool]] = [(expression, False)]
    while pending:
        node, children_done = pending.pop()
        if isinstance(node, float):
            parts.append(repr(node))
        elif isinstance(node, BinaryOperation):
            if not children_done:
                pending.extend([(node, True), (node.right, False), (node.left, False)])
                continue
            right = parts.pop()
            left = parts.pop()
            parts.append(f"({left} {OPERATOR_SYMBOLS[node.operator]} {right})")
        elif isinstance(node, FunctionCall):
            if not children_done:
                pending.append((node, True))
                pending.extend((arg, False) for arg in reversed(node.args))
                continue
            first_arg_idx = len(parts) - len(node.args)
            args = ", ".join(parts[first_arg_idx:])
            del parts[first_arg_idx:]
            parts.append(f"{builtin_name(node.builtin)}({args})")
        else:
            raise RuntimeError(f"Unexpected expression type: {node}")
    return parts.pop()
