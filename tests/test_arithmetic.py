import math

import pytest

from exprcalc.parser import parse
from exprcalc.runtime import calculate, evaluate


@pytest.mark.parametrize(
    "code, expected_ret_val",
    [
        pytest.param("1", 1.0),
        pytest.param("1+2", 3.0),
        pytest.param("(1+2)", 3.0),
        pytest.param("(((1)))", 1.0),
        pytest.param("1 * 4 + 5", 9.0),
        pytest.param("1 + 4 * 5", 21.0),
        pytest.param("1 + 2 * 3", 7.0),
        pytest.param("10 / 5 / 2 / 2", 0.5),
        pytest.param("10 + 2 * (5 + 3 - 1)", 24.0),
        pytest.param("1 + 2 * 3 / 4", 2.5),
        pytest.param("1 - 2 - 3", -4.0),
        pytest.param("1 - (2 - 3)", 2.0),
        pytest.param("(((((1 + 2) * 3) - 4) / 5) ^ 6)", 1.0),
        pytest.param("1 + 2 - 3 * 4 / 5 ^ 6", 2.999232),
        # power
        pytest.param("2 ^ 2 ^ 3", 256.0),
        pytest.param("(2 ^ 2) ^ 3", 64.0),
        pytest.param("2 * 3 ^ 2", 18.0),
        pytest.param("4 ^ 0.5", 2.0),
        # modulo binds loosest
        pytest.param("7 % 4", 3.0),
        pytest.param("1 + 9 % 4", 2.0),
        pytest.param("10 % 4 % 3", 2.0),
        pytest.param("(0 - 7) % 4", -3.0),
        pytest.param("7.5 % 2", 1.5),
        # funcs
        pytest.param("sin(rad(90))", 1.0),
        pytest.param("abs(1234)", 1234.0),
        pytest.param("abs(1 - 1234)", 1233.0),
        pytest.param("deg(rad(45))", 45.0),
        pytest.param("2 * abs(3 - 5) ^ 2", 8.0),
    ],
)
def test_eval_arithmetic(code: str, expected_ret_val: float) -> None:
    assert calculate(code) == pytest.approx(expected_ret_val)


@pytest.mark.parametrize(
    "code",
    [
        pytest.param("1 / 0"),
        pytest.param("2 ^ 10000"),
        pytest.param("0 ^ (0 - 1)"),
        pytest.param("sinh(1000)"),
        pytest.param("cosh(1000)"),
        pytest.param("atanh(1)"),
    ],
)
def test_positive_infinity(code: str) -> None:
    result = calculate(code)
    assert math.isinf(result) and result > 0


@pytest.mark.parametrize(
    "code",
    [
        pytest.param("(0 - 1) / 0"),
        pytest.param("(0 - 2) ^ 10001"),
        pytest.param("sinh(0 - 1000)"),
        pytest.param("atanh(0 - 1)"),
    ],
)
def test_negative_infinity(code: str) -> None:
    result = calculate(code)
    assert math.isinf(result) and result < 0


@pytest.mark.parametrize(
    "code",
    [
        pytest.param("0 / 0"),
        pytest.param("5 % 0"),
        pytest.param("(1 / 0) % 2"),
        pytest.param("(0 - 8) ^ (1 / 3)"),
        pytest.param("acos(2)"),
        pytest.param("asin(0 - 2)"),
        pytest.param("acosh(0)"),
        pytest.param("atanh(2)"),
        pytest.param("sin(1 / 0)"),
        pytest.param("0 / 0 + 1"),
    ],
)
def test_not_a_number(code: str) -> None:
    assert math.isnan(calculate(code))


def test_evaluate_does_not_change_tree() -> None:
    tree = parse("sin(1) + 2 * 3")
    assert evaluate(tree) == evaluate(tree)
    assert tree == parse("sin(1) + 2 * 3")


def test_trailing_input_ignored_on_request() -> None:
    assert calculate("1 + 2 )", require_end=False) == 3.0


@pytest.mark.parametrize(
    "code, expected_ret_val",
    [
        pytest.param(" + ".join(["1"] * 5000), 5000.0),
        pytest.param(" % ".join(["7"] + ["5"] * 4999), 2.0),
        pytest.param(" - ".join(["0"] + ["1"] * 4999), -4999.0),
        pytest.param("abs(" + " * ".join(["1"] * 5000) + ")", 1.0),
    ],
)
def test_long_flat_chain(code: str, expected_ret_val: float) -> None:
    assert calculate(code) == expected_ret_val
