"""Differential fuzzing against Python's own float arithmetic.

Random trees are rendered twice: as calculator code with only the brackets
the precedence rules need, and as fully bracketed Python built from the same
``math`` calls the runtime uses. Both sides must give the same float.
"""
import math
import random
from typing import Optional

from exprcalc.runtime import calculate
from exprcalc.utils import SourceError

PRECEDENCE = {"%": 0, "+": 1, "-": 1, "*": 2, "/": 2, "^": 3}
ATOM_PRECEDENCE = 4

PY_OPERATORS = {
    "+": "({} + {})",
    "-": "({} - {})",
    "*": "({} * {})",
    "/": "({} / {})",
    "%": "math.fmod({}, {})",
    "^": "math.pow({}, {})",
}

PY_FUNCS = {
    "sin": "math.sin",
    "cos": "math.cos",
    "tan": "math.tan",
    "asin": "math.asin",
    "acos": "math.acos",
    "atan": "math.atan",
    "sinh": "math.sinh",
    "cosh": "math.cosh",
    "tanh": "math.tanh",
    "asinh": "math.asinh",
    "acosh": "math.acosh",
    "atanh": "math.atanh",
    "abs": "math.fabs",
    "deg": "math.degrees",
    "rad": "math.radians",
}


def generate(rng: random.Random, depth: int) -> tuple[str, str, int]:
    """(calculator code, python code, precedence of the outermost operator)"""
    if depth == 0 or rng.random() < 0.25:
        literal = str(rng.randint(0, 20))
        if rng.random() < 0.3:
            literal += f".{rng.randint(0, 99)}"
        return literal, repr(float(literal)), ATOM_PRECEDENCE

    if rng.random() < 0.2:
        name = rng.choice(list(PY_FUNCS))
        arg, py_arg, _ = generate(rng, depth - 1)
        return f"{name}({arg})", f"{PY_FUNCS[name]}({py_arg})", ATOM_PRECEDENCE

    op = rng.choice(list(PRECEDENCE))
    precedence = PRECEDENCE[op]
    left, py_left, left_precedence = generate(rng, depth - 1)
    right, py_right, right_precedence = generate(rng, depth - 1)
    # "^" groups to the right, everything else to the left
    if left_precedence < precedence or (op == "^" and left_precedence == precedence) or rng.random() < 0.1:
        left = f"({left})"
    if right_precedence < precedence or (op != "^" and right_precedence == precedence) or rng.random() < 0.1:
        right = f"({right})"
    return f"{left} {op} {right}", PY_OPERATORS[op].format(py_left, py_right), precedence


def eval_py(code: str) -> Optional[float]:
    """None where Python raises instead of producing inf or nan."""
    try:
        return float(eval(code, {"math": math}))
    except (ArithmeticError, ValueError):
        return None


def eval_my(code: str) -> float | str:
    try:
        return calculate(code)
    except SourceError as e:
        return str(e)


def agree(res_my: float | str, res_py: Optional[float]) -> bool:
    if isinstance(res_my, str):
        return False
    if res_py is None:
        return True
    if math.isnan(res_py) or math.isnan(res_my):
        return math.isnan(res_py) and math.isnan(res_my)
    return res_my == res_py or math.isclose(res_my, res_py, rel_tol=1e-9)


if __name__ == "__main__":
    rng = random.Random()
    while True:
        code, py_code, _ = generate(rng, depth=4)
        res_my = eval_my(code)
        res_py = eval_py(py_code)
        if not agree(res_my, res_py):
            print(f"{code!r}\n{py_code}\npy: {res_py}\nmy: {res_my}\n\n")
