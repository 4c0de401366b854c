import pytest

from exprcalc.builtins import BUILTINS
from exprcalc.tokenizer import Token, Tokenizer, TokenType, scan_errors, tokenize


def _types(code: str) -> list[TokenType]:
    return [t.type for t in tokenize(code)]


@pytest.mark.parametrize(
    "code, expected_types",
    [
        pytest.param("", [TokenType.END]),
        pytest.param(" \t\r\n ", [TokenType.END]),
        pytest.param("1", [TokenType.NUMBER, TokenType.END]),
        pytest.param(
            "+-*/^%(),",
            [
                TokenType.PLUS,
                TokenType.MINUS,
                TokenType.STAR,
                TokenType.SLASH,
                TokenType.CARET,
                TokenType.PERCENT,
                TokenType.BRACKET_OPEN,
                TokenType.BRACKET_CLOSE,
                TokenType.COMMA,
                TokenType.END,
            ],
        ),
        pytest.param("12 +\n 3.5", [TokenType.NUMBER, TokenType.PLUS, TokenType.NUMBER, TokenType.END]),
        pytest.param("2sin", [TokenType.NUMBER, TokenType.BUILTIN, TokenType.END]),
        pytest.param("1 $ 2", [TokenType.NUMBER, TokenType.ERROR, TokenType.NUMBER, TokenType.END]),
        pytest.param("sincos tanacos degrad absabs", [TokenType.ERROR] * 4 + [TokenType.END]),
        pytest.param("sin_1", [TokenType.ERROR, TokenType.END]),
        pytest.param("2\u00b2", [TokenType.NUMBER, TokenType.ERROR, TokenType.END]),
        pytest.param("\u0663", [TokenType.NUMBER, TokenType.END]),
    ],
)
def test_token_types(code: str, expected_types: list[TokenType]) -> None:
    assert _types(code) == expected_types


def test_every_builtin_name_resolves_to_its_index() -> None:
    tokens = tokenize(" ".join(b.name for b in BUILTINS))
    assert [t.builtin for t in tokens[:-1]] == list(range(len(BUILTINS)))
    assert all(t.type is TokenType.BUILTIN for t in tokens[:-1])


def test_number_keeps_every_decimal_point() -> None:
    tokens = tokenize("1.2.3+4")
    assert tokens[0] == Token(type=TokenType.NUMBER, lexeme="1.2.3", start=0, end=5)
    assert tokens[1].type is TokenType.PLUS


def test_offsets_are_half_open_ranges() -> None:
    code = "  abs( 12.5 )"
    for token in tokenize(code):
        assert code[token.start : token.end] == token.lexeme
    assert [(t.start, t.end) for t in tokenize(code)] == [(2, 5), (5, 6), (7, 11), (12, 13), (13, 13)]


def test_end_is_repeated() -> None:
    tokenizer = Tokenizer("1")
    assert tokenizer.next().type is TokenType.NUMBER
    for _ in range(3):
        assert tokenizer.next().type is TokenType.END


def test_scan_errors_reports_every_error() -> None:
    errors = scan_errors("foo + 1 $ bar(2)")
    assert [e.error_char_idx for e in errors] == [0, 8, 10]
    assert "Unknown function 'foo'" in errors[0].errmsg
    assert "Unexpected character '$'" in errors[1].errmsg
    assert "Unknown function 'bar'" in errors[2].errmsg


def test_scan_errors_clean_input() -> None:
    assert scan_errors("sin(1) + 2") == []


def test_tokenizer_error_points_at_offset() -> None:
    (error,) = scan_errors("1 + 2 # 3")
    lines = str(error).split("\n")
    assert lines[0].startswith("[Tokenizer error]")
    assert lines[1] == "1 + 2 # 3"
    assert lines[2] == "      ^"
