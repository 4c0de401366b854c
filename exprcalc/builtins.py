"""Fixed table of the named functions an expression may call.

The table is built once at import time and never changes afterwards, so any
number of threads can read it without locking. Functions are addressed by
their position in ``BUILTINS``; the tokenizer resolves names to positions and
the runtime calls them back by position.

All entries follow IEEE-754 conventions: arguments outside a function's
domain give ``nan`` and results too large to represent give an infinity, where
the ``math`` module would raise instead.
"""
import math
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

BuiltinImpl = Callable[..., float]


@dataclass(frozen=True)
class Builtin:
    name: str
    arity: int
    fn: BuiltinImpl


_builtins: list[Builtin] = []


def register_builtin_func(name: str, arity: int = 1):
    def decorator(fn: BuiltinImpl) -> BuiltinImpl:
        _builtins.append(Builtin(name=name, arity=arity, fn=fn))
        return fn

    return decorator


def _ieee_unary(fn: Callable[[float], float], overflow_sign: Callable[[float], float]) -> BuiltinImpl:
    def wrapped(x: float) -> float:
        try:
            return fn(x)
        except ValueError:
            return math.nan
        except OverflowError:
            return math.copysign(math.inf, overflow_sign(x))

    wrapped.__name__ = fn.__name__
    return wrapped


def _positive(x: float) -> float:
    return 1.0


def _same_sign(x: float) -> float:
    return x


for _name, _fn, _overflow_sign in [
    ("sin", math.sin, _positive),
    ("cos", math.cos, _positive),
    ("tan", math.tan, _positive),
    ("asin", math.asin, _positive),
    ("acos", math.acos, _positive),
    ("atan", math.atan, _positive),
    ("sinh", math.sinh, _same_sign),
    ("cosh", math.cosh, _positive),
    ("tanh", math.tanh, _positive),
    ("asinh", math.asinh, _positive),
    ("acosh", math.acosh, _positive),
]:
    register_builtin_func(_name)(_ieee_unary(_fn, _overflow_sign))


@register_builtin_func("atanh")
def atanh_(x: float) -> float:
    # atanh(+-1) is a pole, not a domain error
    if abs(x) == 1.0:
        return math.copysign(math.inf, x)
    try:
        return math.atanh(x)
    except ValueError:
        return math.nan


@register_builtin_func("abs")
def abs_(x: float) -> float:
    return math.fabs(x)


@register_builtin_func("deg")
def deg_(x: float) -> float:
    return math.degrees(x)


@register_builtin_func("rad")
def rad_(x: float) -> float:
    return math.radians(x)


BUILTINS: tuple[Builtin, ...] = tuple(_builtins)

_INDEX_BY_NAME: dict[str, int] = {b.name: idx for idx, b in enumerate(BUILTINS)}


def find_builtin(name: str) -> Optional[int]:
    return _INDEX_BY_NAME.get(name)


def arg_count(idx: int) -> int:
    return BUILTINS[idx].arity


def builtin_name(idx: int) -> str:
    return BUILTINS[idx].name


def exec_builtin(idx: int, args: Sequence[float]) -> float:
    builtin = BUILTINS[idx]
    if len(args) != builtin.arity:
        raise TypeError(f"{builtin.name!r} takes {builtin.arity} argument(s), {len(args)} given")
    return builtin.fn(*args)
