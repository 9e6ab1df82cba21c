import io

from ast_nodes import Binary, Block, For, FunctionDecl, ListAccess, Literal, VarDecl
from ast_printer import ast_to_dict
from errors import Diagnostics
from lexer import Lexer
from parser import Parser


def parse(source):
    err = io.StringIO()
    statements, had_error = Parser(Lexer(source, Diagnostics(err))).parse_program()
    return statements, had_error, err.getvalue()


def parse_ok(source):
    statements, had_error, err = parse(source)
    if had_error:
        raise AssertionError(f"Source did not parse.\nERR:\n{err}")
    return statements


def test_precedence_multiplication_binds_tighter():
    stmt = parse_ok("1 + 2 * 3;")[0]
    assert ast_to_dict(stmt.expr) == {
        "type": "Binary",
        "op": "+",
        "left": {"type": "Literal", "kind": "INT_LITERAL", "value": "1"},
        "right": {
            "type": "Binary",
            "op": "*",
            "left": {"type": "Literal", "kind": "INT_LITERAL", "value": "2"},
            "right": {"type": "Literal", "kind": "INT_LITERAL", "value": "3"},
        },
    }


def test_comparison_below_arithmetic_and_unary_above():
    expr = parse_ok("-a + 1 < b == 1;")[0].expr
    assert expr.op.lexeme == "=="
    assert expr.left.op.lexeme == "<"
    assert expr.left.left.op.lexeme == "+"
    assert expr.left.left.left.__class__.__name__ == "Unary"


def test_assignment_is_right_associative():
    expr = parse_ok("a = b = 3;")[0].expr
    assert ast_to_dict(expr)["type"] == "Assign"
    assert ast_to_dict(expr)["value"]["type"] == "Assign"


def test_function_and_variable_declarations_are_told_apart():
    fn, var = parse_ok("int add(int a, int b) { return a + b; }\nint add2 = 5;")
    assert isinstance(fn, FunctionDecl)
    assert [p.lexeme for p in fn.params] == ["a", "b"]
    assert [str(t) for t in fn.param_types] == ["int", "int"]
    assert isinstance(var, VarDecl)
    assert str(var.var_type) == "int"


def test_list_words_parse_as_names_outside_member_access():
    decl, assign, prop, call = parse_ok("int length = 1;\nlength = 2;\nl.length;\nadd(1, 2);")
    if decl.name.lexeme != "length":
        raise AssertionError(f"Unexpected declaration: {ast_to_dict(decl)}")
    if ast_to_dict(assign.expr)["type"] != "Assign":
        raise AssertionError(f"Unexpected assignment: {ast_to_dict(assign.expr)}")
    if ast_to_dict(prop.expr)["type"] != "ListProperty":
        raise AssertionError(f"Unexpected member access: {ast_to_dict(prop.expr)}")
    tree = ast_to_dict(call.expr)
    if tree["type"] != "Call" or tree["callee"] != {"type": "Variable", "name": "add"}:
        raise AssertionError(f"Unexpected call: {tree}")


def test_comma_declarations_desugar_to_block():
    stmt = parse_ok("int a = 1, b, c = 3;")[0]
    assert isinstance(stmt, Block)
    assert [d.name.lexeme for d in stmt.statements] == ["a", "b", "c"]
    assert stmt.statements[1].initializer is None


def test_list_index_assignment_is_binary_equals():
    expr = parse_ok("l[0] = 5;")[0].expr
    assert isinstance(expr, Binary)
    assert expr.op.lexeme == "="
    assert isinstance(expr.left, ListAccess)


def test_list_postfix_chain():
    d = ast_to_dict(parse_ok("l.add(1); l.remove(0); l.length;")[2].expr)
    assert d == {"type": "ListProperty", "list": {"type": "Variable", "name": "l"}, "property": "length"}


def test_for_without_condition_gets_true_literal():
    stmt = parse_ok("for (;;) { }")[0]
    assert isinstance(stmt, For)
    assert stmt.init is None and stmt.increment is None
    assert isinstance(stmt.condition, Literal)
    assert stmt.condition.token.lexeme == "true"


def test_include_statement():
    d = ast_to_dict(parse_ok('include "math.fl";')[0])
    assert d == {"type": "Include", "path": "math.fl"}


def test_error_message_format():
    _, had_error, err = parse("int x = ;")
    assert had_error
    assert err.strip() == "[line 1] Error at ';': Expect expression."


def test_error_at_end():
    _, had_error, err = parse("int x = 1")
    assert had_error
    assert "[line 1] Error at end: Expect ';' after variable declaration." in err


def test_lexer_error_tokens_are_reported_by_parser():
    _, had_error, err = parse("int x = 1 @ 2;")
    assert had_error
    assert err.splitlines()[0] == "[line 1] Error: Unexpected character."


def test_panic_mode_reports_first_error_per_statement():
    _, had_error, err = parse("int x = (1 + ;\nint y = 2;\nz = ;\n")
    assert had_error
    lines = err.strip().splitlines()
    assert lines == [
        "[line 1] Error at ';': Expect expression.",
        "[line 3] Error at ';': Expect expression.",
    ]


def test_parser_always_terminates_on_garbage():
    _, had_error, _ = parse(") ) } ] else , . ;")
    assert had_error


def test_invalid_assignment_target():
    _, had_error, err = parse("1 + 2 = 3;")
    assert had_error
    assert "Error at '=': Invalid assignment target." in err


def test_main_must_be_void_without_parameters():
    _, had_error, err = parse("int main() { return 0; }")
    assert had_error
    assert "The 'main' function must return void and take no parameters." in err

    _, had_error, _ = parse("void main(int a) { }")
    assert had_error

    parse_ok("void main() { }")


def test_builtins_cannot_be_redeclared():
    _, had_error, err = parse("void print(int a) { }")
    assert had_error
    assert "Cannot redeclare built-in 'print'." in err

    _, had_error, _ = parse("int println = 3;")
    assert had_error


def test_argument_cap():
    args = ", ".join(["1"] * 256)
    _, had_error, err = parse(f"f({args});")
    assert had_error
    assert "Cannot have more than 255 arguments." in err

    args = ", ".join(["1"] * 255)
    parse_ok(f"f({args});")


def test_parameter_cap():
    params = ", ".join(f"int p{i}" for i in range(256))
    _, had_error, err = parse(f"void f({params}) {{ }}")
    assert had_error
    assert "Cannot have more than 255 parameters." in err


def test_void_variables_are_rejected():
    _, had_error, err = parse("void v;")
    assert had_error
    assert "Variables cannot have type void." in err


if __name__ == "__main__":
    import sys

    import pytest

    sys.exit(pytest.main([__file__]))
