"""Tests for the Manifast lexer."""

import pytest

from manifast import LexicalError, tokenize


def kinds(source):
    return [(t.type, t.value) for t in tokenize(source)]


def test_declaration():
    assert kinds("lokal x = 10") == [
        ("keyword", "lokal"),
        ("identifier", "x"),
        ("operator", "="),
        ("number", 10.0),
        ("eof", None),
    ]


def test_numbers_are_floats():
    values = [t.value for t in tokenize("0x1F 0b101 0o17 1_000 1.5e3 2E-2 3.25") if t.type == "number"]
    assert values == [31.0, 5.0, 15.0, 1000.0, 1500.0, 0.02, 3.25]
    assert all(isinstance(v, float) for v in values)


def test_dot_after_number_is_not_a_fraction():
    assert kinds("1.x")[:3] == [("number", 1.0), ("operator", "."), ("identifier", "x")]


def test_string_escapes():
    tokens = list(tokenize(r'"a\nb\t\"c\"\\"'))
    assert tokens[0].type == "string"
    assert tokens[0].value == 'a\nb\t"c"\\'


def test_multiline_string_keeps_start_position():
    tokens = list(tokenize('x = "satu\ndua" y'))
    assert tokens[2].value == "satu\ndua"
    assert (tokens[2].line, tokens[2].column) == (1, 5)
    assert (tokens[3].line, tokens[3].column) == (2, 6)


def test_keywords_and_identifiers():
    assert kinds("jika kalau sebaliknya tutup jikalau") == [
        ("keyword", "jika"),
        ("keyword", "kalau"),
        ("keyword", "sebaliknya"),
        ("keyword", "tutup"),
        ("identifier", "jikalau"),
        ("eof", None),
    ]


def test_operators_prefer_longest_match():
    values = [t.value for t in tokenize("a += 1; b != c <= d == e ! f") if t.type == "operator"]
    assert values == ["+=", ";", "!=", "<=", "==", "!"]


def test_comments_are_skipped():
    tokens = list(tokenize("-- komentar\nx --[[ blok\n baris ]] y"))
    assert [t.value for t in tokens] == ["x", "y", None]
    assert (tokens[0].line, tokens[0].column) == (2, 1)
    assert (tokens[1].line, tokens[1].column) == (3, 11)


def test_positions():
    tokens = list(tokenize("lokal\n  x"))
    assert (tokens[1].line, tokens[1].column) == (2, 3)


def test_tokenize_is_lazy():
    tokens = tokenize("x @")
    assert next(tokens).value == "x"
    with pytest.raises(LexicalError):
        next(tokens)


@pytest.mark.parametrize("source", ["@", '"abc', "0x", "12abc", "0b102", "--[[ tidak ditutup"])
def test_lexical_errors(source):
    with pytest.raises(LexicalError):
        list(tokenize(source))


def test_lexical_error_position():
    with pytest.raises(LexicalError) as info:
        list(tokenize("lokal a = 1\nlokal b = #"))
    assert (info.value.line, info.value.column) == (2, 11)
    assert "Karakter tidak dikenal" in str(info.value)
