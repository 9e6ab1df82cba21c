import os
import subprocess
import sys


def run_repl_with_input(inp: str) -> str:
    root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    cli = os.path.join(root, "cli.py")

    proc = subprocess.run(
        [sys.executable, cli, "repl"],
        input=inp,
        text=True,
        capture_output=True,
        cwd=root,
        timeout=10,
        env={**os.environ, "NO_COLOR": "1"},
    )

    # REPL should exit cleanly after :q or EOF
    if proc.returncode != 0:
        raise AssertionError(f"REPL exited with code {proc.returncode}\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}")

    return proc.stdout + proc.stderr


def test_auto_print_expression():
    out = run_repl_with_input("1 + 2\n:q\n")
    if "3" not in out:
        raise AssertionError(f"Expected 3 in output.\nOUT:\n{out}")


def test_persistent_state_expression():
    out = run_repl_with_input("int x = 2;\nx + 5\n:q\n")
    if "7" not in out:
        raise AssertionError(f"Expected 7 in output.\nOUT:\n{out}")


def test_multiline_function_definition():
    inp = "int sq(int n) {\n  return n * n; // {\n}\nsq(9)\n"
    out = run_repl_with_input(inp)
    if "81" not in out:
        raise AssertionError(f"Expected 81 in output.\nOUT:\n{out}")


def test_error_does_not_end_session():
    out = run_repl_with_input("int y = 1 / 0;\nint z = 4\nz * 10\nquit\n")
    if "Division by zero." not in out:
        raise AssertionError(f"Expected runtime error in output.\nOUT:\n{out}")
    if "40" not in out:
        raise AssertionError(f"Expected 40 in output.\nOUT:\n{out}")


if __name__ == "__main__":
    test_auto_print_expression()
    test_persistent_state_expression()
    test_multiline_function_definition()
    test_error_does_not_end_session()
    print("ok")
