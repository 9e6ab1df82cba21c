import sys

import colorama

from ast_nodes import DeclaredType, Expression, Assign, Binary
from ast_printer import dump_ast
from errors import Diagnostics, ScriptIOError
from interpreter import Interpreter
from lexer import Lexer
from parser import Parser
from runtime import format_value


# sysexits.h codes
EXIT_OK = 0
EXIT_USAGE = 64
EXIT_DATAERR = 65
EXIT_SOFTWARE = 70
EXIT_IOERR = 74

USAGE = """Usage:
  fulani [--debug] <script.fl>
  fulani repl"""


def read_script(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ScriptIOError(path, getattr(e, "strerror", None) or str(e))


def cmd_run(path, debug: bool = False) -> int:
    diagnostics = Diagnostics()
    try:
        source = read_script(path)
    except ScriptIOError as e:
        diagnostics.error(str(e))
        return EXIT_IOERR

    parser = Parser(Lexer(source, diagnostics))
    statements, had_error = parser.parse_program()
    if had_error:
        return EXIT_DATAERR

    if debug:
        dump_ast(statements)

    interpreter = Interpreter(diagnostics=diagnostics, debug=debug)
    try:
        interpreter.interpret(statements)
    except RecursionError:
        interpreter.runtime_error(None, "Stack overflow.")
    finally:
        sys.stdout.flush()

    if interpreter.io_error:
        return EXIT_IOERR
    if interpreter.had_error:
        return EXIT_SOFTWARE
    return EXIT_OK


def _count_braces_delta(line: str) -> int:
    # net "{" minus "}" on one REPL line; braces in "..." or after // do not count
    delta = 0
    in_string = False
    i = 0
    while i < len(line):
        ch = line[i]
        if in_string:
            if ch == "\\" and line[i + 1:i + 2] == '"':
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "/" and line[i + 1:i + 2] == "/":
            break
        elif ch == "{":
            delta += 1
        elif ch == "}":
            delta -= 1
        i += 1
    return delta


def _complete_chunk(source: str) -> str:
    text = source.rstrip()
    if text and not text.endswith((";", "}")):
        text += ";"
    return text + "\n"


def _is_bare_expression(statements) -> bool:
    if len(statements) != 1 or not isinstance(statements[0], Expression):
        return False
    expr = statements[0].expr
    if isinstance(expr, Assign):
        return False
    return not (isinstance(expr, Binary) and expr.op.type == "ASSIGN")


def run_repl_chunk(interpreter, source, debug: bool = False):
    parser = Parser(Lexer(source, interpreter.diagnostics))
    statements, had_error = parser.parse_program()
    if had_error:
        return

    if debug:
        dump_ast(statements)

    try:
        if _is_bare_expression(statements):
            value = interpreter.evaluate(statements[0].expr)
            if not interpreter.had_error and value.type is not DeclaredType.VOID:
                print(format_value(value))
        else:
            interpreter.interpret(statements)
    except RecursionError:
        interpreter.environment = interpreter.globals
        interpreter.runtime_error(None, "Stack overflow.")
    finally:
        # a failed entry must not poison the rest of the session
        interpreter.reset_error()


def cmd_repl(debug: bool = False):
    interpreter = Interpreter(diagnostics=Diagnostics(), debug=debug)

    print("fulani REPL. Type :q to quit.")

    buffer_lines = []
    brace_depth = 0
    while True:
        prompt = "fulani> " if not buffer_lines else "...> "
        try:
            line = input(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        stripped = line.strip()
        if not buffer_lines and stripped in (":q", ":quit", "quit", "exit"):
            break

        if not stripped and not buffer_lines:
            continue

        buffer_lines.append(line)
        brace_depth += _count_braces_delta(line)

        # keep reading until every opened block is closed
        if brace_depth > 0:
            continue

        source = _complete_chunk("\n".join(buffer_lines))
        buffer_lines = []
        brace_depth = 0

        run_repl_chunk(interpreter, source, debug=debug)
        sys.stdout.flush()


def main(argv=None) -> int:
    colorama.just_fix_windows_console()

    args = list(sys.argv[1:] if argv is None else argv)
    debug = False
    if "--debug" in args:
        debug = True
        args.remove("--debug")

    if args == ["repl"]:
        cmd_repl(debug=debug)
        return EXIT_OK

    if len(args) != 1:
        print(USAGE, file=sys.stderr)
        return EXIT_USAGE

    return cmd_run(args[0], debug=debug)


if __name__ == "__main__":
    sys.exit(main())
