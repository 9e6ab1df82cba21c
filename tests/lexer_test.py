import io

from errors import Diagnostics
from lexer import Lexer


def lex(source):
    err = io.StringIO()
    tokens = list(Lexer(source, Diagnostics(err)))
    return tokens, err.getvalue()


def kinds(source):
    tokens, _ = lex(source)
    return [t.type for t in tokens]


def test_keywords_and_identifiers():
    assert kinds("int x list void whilst") == ["INT", "IDENT", "LIST", "VOID", "IDENT", "EOF"]
    assert kinds("add remove length include") == ["ADD", "REMOVE", "LENGTH", "INCLUDE", "EOF"]


def test_true_false_become_bool_literals():
    tokens, _ = lex("true false truth")
    assert [(t.type, t.lexeme) for t in tokens[:3]] == [
        ("BOOL_LITERAL", "true"),
        ("BOOL_LITERAL", "false"),
        ("IDENT", "truth"),
    ]


def test_int_and_float_literals():
    tokens, _ = lex("42 3.14 7.")
    assert [(t.type, t.lexeme) for t in tokens] == [
        ("INT_LITERAL", "42"),
        ("FLOAT_LITERAL", "3.14"),
        ("INT_LITERAL", "7"),
        ("DOT", "."),
        ("EOF", ""),
    ]


def test_two_char_operators():
    assert kinds("! != = == < <= > >=") == [
        "BANG", "NOTEQ", "ASSIGN", "EQEQ", "LT", "LTE", "GT", "GTE", "EOF",
    ]


def test_string_with_escaped_quote():
    tokens, _ = lex(r'"say \"hi\" \n"')
    assert tokens[0].type == "STRING_LITERAL"
    assert tokens[0].lexeme == r'say "hi" \n'


def test_unterminated_string_is_error_token():
    tokens, _ = lex('"abc')
    assert tokens[0].type == "ERROR"
    assert tokens[0].lexeme == "Unterminated string."
    assert tokens[-1].type == "EOF"


def test_unexpected_character():
    tokens, _ = lex("a @ b")
    assert [t.type for t in tokens] == ["IDENT", "ERROR", "IDENT", "EOF"]
    assert tokens[1].lexeme == "Unexpected character."


def test_comments_are_skipped_and_nest():
    assert kinds("a // b c\n/* x /* y */ z */ d") == ["IDENT", "IDENT", "EOF"]


def test_unclosed_comment_warns_once():
    lexer = Lexer("a /* /* */", Diagnostics(io.StringIO()))
    err = lexer.diagnostics.stream
    lexer.get_next_token()
    assert lexer.peek_token().type == "EOF"
    assert lexer.get_next_token().type == "EOF"
    assert err.getvalue().count("Warning: Unclosed comment") == 1


def test_line_and_column_tracking():
    tokens, _ = lex("int x;\n  x = 5;")
    x2 = tokens[3]
    assert (x2.lexeme, x2.line, x2.column) == ("x", 2, 3)
    five = tokens[5]
    assert (five.lexeme, five.line, five.column) == ("5", 2, 7)


def test_peek_token_does_not_consume():
    lexer = Lexer("foo ( bar", Diagnostics(io.StringIO()))
    assert lexer.get_next_token().lexeme == "foo"
    assert lexer.peek_token().type == "LPAREN"
    assert lexer.peek_token().type == "LPAREN"
    assert lexer.get_next_token().type == "LPAREN"
    assert lexer.get_next_token().lexeme == "bar"


def test_integer_literal_round_trip():
    for n in (0, 1, 9, 10, 255, 65536, 2147483647, 9223372036854775807, 10 ** 30):
        tokens, _ = lex(str(n))
        value = int(tokens[0].lexeme)
        relexed, _ = lex(str(value))
        assert relexed[0].type == "INT_LITERAL"
        assert int(relexed[0].lexeme) == value == n


if __name__ == "__main__":
    import sys

    import pytest

    sys.exit(pytest.main([__file__]))
