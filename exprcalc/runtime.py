import logging
import math
from typing import Callable

from exprcalc.builtins import exec_builtin
from exprcalc.parser import BinaryOperation, BinaryOperator, Expression, FunctionCall, parse

logger = logging.getLogger(__name__)

BinaryOperationImpl = Callable[[float, float], float]


def calculate(code: str, require_end: bool = True) -> float:
    return evaluate(parse(code, require_end=require_end))


def evaluate(expression: Expression) -> float:
    result = evaluate_expression(expression)
    logger.debug("Evaluated to %r", result)
    return result


def evaluate_expression(expression: Expression) -> float:
    # post-order walk with explicit stacks: flat chains like "1 + 1 + ... + 1"
    # build trees far deeper than the interpreter recursion limit
    values: list[float] = []
    pending: list[tuple[Expression, bool]] = [(expression, False)]
    while pending:
        node, children_done = pending.pop()
        if isinstance(node, float):
            values.append(node)
        elif isinstance(node, BinaryOperation):
            if not children_done:
                pending.append((node, True))
                pending.append((node.right, False))
                pending.append((node.left, False))
                continue
            right_res = values.pop()
            left_res = values.pop()
            impl = binary_operation_impls.get(node.operator)
            if impl is None:
                raise RuntimeError(f"Unexpected binary operator: {node.operator}")
            values.append(impl(left_res, right_res))
        elif isinstance(node, FunctionCall):
            if not children_done:
                pending.append((node, True))
                pending.extend((arg, False) for arg in reversed(node.args))
                continue
            first_arg_idx = len(values) - len(node.args)
            args = values[first_arg_idx:]
            del values[first_arg_idx:]
            values.append(exec_builtin(node.builtin, args))
        else:
            raise RuntimeError(f"Unexpected expression type: {node}")
    return values.pop()


# Python raises where IEEE-754 arithmetic yields inf or nan; these helpers
# give back the IEEE-754 result instead.


def _div(a: float, b: float) -> float:
    try:
        return a / b
    except ZeroDivisionError:
        logger.debug("Division by zero: %r / %r", a, b)
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x.is_integer() and x % 2 == 1


def _pow(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and _is_odd_integer(b) else math.inf
    except ValueError:
        logger.debug("Power outside of domain: %r ^ %r", a, b)
        if a == 0.0 and b < 0:
            return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
        return math.nan


def _mod(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        logger.debug("Remainder outside of domain: %r %% %r", a, b)
        return math.nan


binary_operation_impls: dict[BinaryOperator, BinaryOperationImpl] = {
    BinaryOperator.ADD: lambda a, b: a + b,
    BinaryOperator.SUB: lambda a, b: a - b,
    BinaryOperator.MUL: lambda a, b: a * b,
    BinaryOperator.DIV: _div,
    BinaryOperator.POW: _pow,
    BinaryOperator.MOD: _mod,
}
