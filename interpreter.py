"""Tree-walking evaluator.

Statements run against a chain of `Environment` frames; `self.environment` is the frame
currently in effect and is saved/restored around blocks, loops and calls. Runtime errors
are reported once, set the sticky `had_error` flag and hand back a placeholder value so
the surrounding expression can finish; every block and loop stops at its next statement.
"""

import os
import sys

from ast_nodes import (
    DeclaredType,
    Literal, Binary, Unary, Variable, Assign, Call, ListAccess, ListMethod, ListProperty,
    Expression, VarDecl, Block, If, While, For, Return, FunctionDecl, Include,
)
from ast_printer import dump_ast
from errors import Diagnostics
from lexer import Lexer
from parser import Parser
from runtime import (
    FUNCTION, INTEGER_TYPES, REAL_TYPES, NUMERIC_TYPES, SCALAR_TYPES,
    Value, FunctionValue, BuiltinFunction, Environment,
    coerce, type_name, format_value,
)


def builtin_print(interpreter, args):
    interpreter.out.write(" ".join(format_value(a) for a in args))
    return Value.void()


def builtin_println(interpreter, args):
    interpreter.out.write(" ".join(format_value(a) for a in args) + "\n")
    return Value.void()


BUILTINS = {
    "print": builtin_print,
    "println": builtin_println,
}


# integer division/modulo as C does it: truncate toward zero, remainder takes the dividend's sign
def int_div(a, b):
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def int_mod(a, b):
    return a - b * int_div(a, b)


class ReturnSlot:
    """Out-parameter filled by a `return` statement."""

    def __init__(self):
        self.returned = False
        self.value = None


class Interpreter:
    def __init__(self, out=None, diagnostics=None, stdlib_dir="lib/stdlib", debug=False):
        self.out = out if out is not None else sys.stdout
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.stdlib_dir = stdlib_dir
        self.debug = debug

        self.globals = Environment()
        self.environment = self.globals
        for name, impl in BUILTINS.items():
            self.globals.define(name, FUNCTION, BuiltinFunction(name, impl))

        self.had_error = False
        self.io_error = False        # an included file existed but could not be read
        self.including = set()       # real paths of includes currently executing

    # ---------- ERRORS ----------
    def runtime_error(self, line, message):
        # Only the first error of a run is printed. Later ones come from the placeholder
        # values handed back after it, and execution stops at the next statement anyway.
        if not self.had_error:
            self.diagnostics.runtime_error(message, line)
        self.had_error = True
        return Value(DeclaredType.INT, 0)

    def reset_error(self):
        self.had_error = False
        self.io_error = False

    # ---------- TOP LEVEL ----------
    def interpret(self, statements):
        for stmt in statements:
            self.execute(stmt, ReturnSlot())
            if self.had_error:
                break
        return not self.had_error

    # ---------- STATEMENTS ----------
    def execute(self, stmt, slot):
        if isinstance(stmt, Expression):
            self.evaluate(stmt.expr)
        elif isinstance(stmt, VarDecl):
            self.execute_var_decl(stmt)
        elif isinstance(stmt, Block):
            self.execute_block(stmt, slot)
        elif isinstance(stmt, If):
            if self.condition(stmt.condition, "if"):
                self.execute(stmt.then_branch, slot)
            elif stmt.else_branch is not None and not self.had_error:
                self.execute(stmt.else_branch, slot)
        elif isinstance(stmt, While):
            while self.condition(stmt.condition, "while"):
                self.execute(stmt.body, slot)
                if self.had_error or slot.returned:
                    break
        elif isinstance(stmt, For):
            self.execute_for(stmt, slot)
        elif isinstance(stmt, Return):
            slot.value = self.evaluate(stmt.value) if stmt.value is not None else Value.void()
            slot.returned = True
        elif isinstance(stmt, FunctionDecl):
            fn = FunctionValue(stmt, self.environment)
            self.environment.define(fn.name, FUNCTION, fn)
            if fn.name == "main":
                self.call_function(fn, [], stmt.line)
        elif isinstance(stmt, Include):
            self.execute_include(stmt)
        else:
            raise TypeError(f"Unknown statement node: {stmt.__class__.__name__}")

    def execute_statements(self, statements, slot):
        for stmt in statements:
            self.execute(stmt, slot)
            if self.had_error or slot.returned:
                return

    def execute_block(self, block, slot):
        statements = block.statements
        # a block that opens with a declaration runs in the enclosing frame, so its
        # variables outlive it (this is how `int a, b;` lands in the caller's scope)
        if statements and isinstance(statements[0], VarDecl):
            self.execute_statements(statements, slot)
            return

        previous = self.environment
        self.environment = Environment(previous)
        try:
            self.execute_statements(statements, slot)
        finally:
            self.environment = previous

    def execute_var_decl(self, stmt):
        name = stmt.name.lexeme
        # the name exists (holding its default) while the initializer runs,
        # so `int x = x + 1;` in a fresh frame reads the new x, not an outer one
        frame = self.environment
        frame.define(name, stmt.var_type, Value.default(stmt.var_type))
        if stmt.initializer is None:
            return

        value = self.evaluate(stmt.initializer)
        if self.had_error:
            return
        coerced = coerce(stmt.var_type, value)
        if coerced is None:
            self.runtime_error(
                stmt.line,
                f"Type mismatch in initialization of '{name}': expected {stmt.var_type}, got {type_name(value)}.",
            )
            return
        frame.values[name].value = coerced

    def execute_for(self, stmt, slot):
        previous = self.environment
        self.environment = Environment(previous)
        try:
            if stmt.init is not None:
                self.execute(stmt.init, slot)
                if self.had_error:
                    return
            while self.condition(stmt.condition, "for"):
                self.execute(stmt.body, slot)
                if self.had_error or slot.returned:
                    return
                if stmt.increment is not None:
                    self.evaluate(stmt.increment)
                    if self.had_error:
                        return
        finally:
            self.environment = previous

    def condition(self, expr, keyword):
        value = self.evaluate(expr)
        if self.had_error:
            return False
        if value.type is DeclaredType.INT:
            return value.data != 0
        if value.type is DeclaredType.BOOL:
            return value.data
        self.runtime_error(expr.line, f"Condition of '{keyword}' must be an int or bool, got {type_name(value)}.")
        return False

    # ---------- INCLUDES ----------
    def resolve_include(self, requested):
        # absolute and explicitly relative paths are taken as written
        if os.path.isabs(requested) or requested.startswith(("./", "../")):
            return requested if os.path.exists(requested) else None

        for candidate in (os.path.join(self.stdlib_dir, requested), requested):
            if os.path.isfile(candidate):
                return candidate
        return None

    def execute_include(self, stmt):
        requested = stmt.path.lexeme
        path = self.resolve_include(requested)
        if path is None:
            self.runtime_error(stmt.line, f"Could not find included file \"{requested}\".")
            return

        key = os.path.realpath(path)
        if key in self.including:
            # include cycle: the file is already being executed further up
            return

        try:
            with open(path, "r", encoding="utf-8") as f:
                source = f.read()
        except (OSError, UnicodeDecodeError) as e:
            self.io_error = True
            self.runtime_error(stmt.line, f"Could not read included file \"{path}\": {e}")
            return

        if self.debug:
            self.diagnostics.note(f"Including file: {path}")

        parser = Parser(Lexer(source, self.diagnostics))
        statements, had_error = parser.parse_program()
        if had_error:
            self.runtime_error(stmt.line, f"Failed to parse included file \"{path}\".")
            return

        if self.debug:
            dump_ast(statements, self.out)

        self.including.add(key)
        try:
            for included in statements:
                self.execute(included, ReturnSlot())
                if self.had_error:
                    break
        finally:
            self.including.discard(key)

    # ---------- EXPRESSIONS ----------
    def evaluate(self, expr):
        if isinstance(expr, Literal):
            return self.evaluate_literal(expr)
        if isinstance(expr, Binary):
            if expr.op.type == "ASSIGN":
                return self.store_list_item(expr)
            return self.evaluate_binary(expr)
        if isinstance(expr, Unary):
            return self.evaluate_unary(expr)
        if isinstance(expr, Variable):
            var = self.environment.lookup(expr.name.lexeme)
            if var is None:
                return self.runtime_error(expr.line, f"Undefined variable '{expr.name.lexeme}'.")
            return var.value
        if isinstance(expr, Assign):
            return self.evaluate_assign(expr)
        if isinstance(expr, Call):
            return self.evaluate_call(expr)
        if isinstance(expr, ListAccess):
            return self.evaluate_list_access(expr)
        if isinstance(expr, ListMethod):
            return self.evaluate_list_method(expr)
        if isinstance(expr, ListProperty):
            lst = self.evaluate(expr.list_expr)
            if self.had_error:
                return Value(DeclaredType.INT, 0)
            if lst.type is not DeclaredType.LIST:
                return self.runtime_error(expr.line, "Cannot access property on a non-list value.")
            return Value(DeclaredType.INT, len(lst.data))
        raise TypeError(f"Unknown expression node: {expr.__class__.__name__}")

    def evaluate_literal(self, expr):
        tok = expr.token
        if tok.type == "INT_LITERAL":
            return Value(DeclaredType.INT, int(tok.lexeme))
        if tok.type == "FLOAT_LITERAL":
            return Value(DeclaredType.FLOAT, float(tok.lexeme))
        if tok.type == "STRING_LITERAL":
            return Value(DeclaredType.STRING, tok.lexeme)
        if tok.type == "BOOL_LITERAL":
            return Value(DeclaredType.BOOL, tok.lexeme == "true")
        return self.runtime_error(expr.line, f"Invalid literal '{tok.lexeme}'.")

    def evaluate_assign(self, expr):
        name = expr.name.lexeme
        var = self.environment.lookup(name)
        if var is None:
            return self.runtime_error(expr.line, f"Undefined variable '{name}'.")

        value = self.evaluate(expr.value)
        if self.had_error:
            return value
        coerced = coerce(var.type, value)
        if coerced is None:
            return self.runtime_error(
                expr.line,
                f"Type mismatch in assignment to '{name}': expected {var.type}, got {type_name(value)}.",
            )
        var.value = coerced
        return coerced

    def evaluate_unary(self, expr):
        operand = self.evaluate(expr.operand)
        if self.had_error:
            return operand
        if expr.op.type == "MINUS" and operand.type in NUMERIC_TYPES:
            return Value(operand.type, -operand.data)
        return self.runtime_error(expr.line, f"Operand of '{expr.op.lexeme}' must be a number, got {type_name(operand)}.")

    def evaluate_binary(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        if self.had_error:
            return Value(DeclaredType.INT, 0)

        op = expr.op.type
        if left.type is not right.type:
            return self.runtime_error(
                expr.line,
                f"Operands of '{expr.op.lexeme}' must be of the same type, got {type_name(left)} and {type_name(right)}.",
            )
        kind = left.type

        if op in ("EQEQ", "NOTEQ"):
            if kind not in SCALAR_TYPES:
                return self.runtime_error(expr.line, f"Cannot compare values of type {kind}.")
            equal = left.data == right.data
            return Value(DeclaredType.INT, int(equal if op == "EQEQ" else not equal))

        if op == "PLUS" and kind is DeclaredType.STRING:
            return Value(kind, left.data + right.data)

        if kind not in NUMERIC_TYPES:
            return self.runtime_error(expr.line, f"Unsupported operand type for '{expr.op.lexeme}': {kind}.")

        a, b = left.data, right.data
        if op == "PLUS":
            return Value(kind, a + b)
        if op == "MINUS":
            return Value(kind, a - b)
        if op == "STAR":
            return Value(kind, a * b)
        if op == "SLASH":
            if b == 0:
                return self.runtime_error(expr.line, "Division by zero.")
            return Value(kind, a / b if kind in REAL_TYPES else int_div(a, b))
        if op == "PERCENT":
            if kind in REAL_TYPES:
                return self.runtime_error(expr.line, "Modulo operation not supported for float values.")
            if b == 0:
                return self.runtime_error(expr.line, "Modulo by zero.")
            return Value(kind, int_mod(a, b))
        if op == "LT":
            return Value(DeclaredType.INT, int(a < b))
        if op == "LTE":
            return Value(DeclaredType.INT, int(a <= b))
        if op == "GT":
            return Value(DeclaredType.INT, int(a > b))
        if op == "GTE":
            return Value(DeclaredType.INT, int(a >= b))

        return self.runtime_error(expr.line, f"Invalid binary operator '{expr.op.lexeme}'.")

    # ---------- CALLS ----------
    def evaluate_call(self, expr):
        callee = self.evaluate(expr.callee)
        if self.had_error:
            return callee
        if callee.type is not FUNCTION:
            return self.runtime_error(expr.line, "Can only call functions.")

        # arguments are evaluated in the caller's frame
        args = []
        for arg in expr.args:
            args.append(self.evaluate(arg))
            if self.had_error:
                return Value(DeclaredType.INT, 0)

        if isinstance(callee, BuiltinFunction):
            return callee.impl(self, args)
        return self.call_function(callee, args, expr.line)

    def call_function(self, fn, args, line):
        decl = fn.declaration
        if len(args) != len(decl.params):
            return self.runtime_error(line, f"Expected {len(decl.params)} arguments but got {len(args)}.")

        frame = Environment(fn.closure)
        for param, param_type, arg in zip(decl.params, decl.param_types, args):
            value = coerce(param_type, arg)
            if value is None:
                return self.runtime_error(
                    line,
                    f"Type mismatch for parameter '{param.lexeme}' of '{fn.name}': "
                    f"expected {param_type}, got {type_name(arg)}.",
                )
            frame.define(param.lexeme, param_type, value)

        slot = ReturnSlot()
        previous = self.environment
        self.environment = frame
        try:
            self.execute_statements(decl.body.statements, slot)
        finally:
            self.environment = previous

        if self.had_error:
            return Value(DeclaredType.INT, 0)
        if not slot.returned:
            return Value.default(decl.return_type)

        result = coerce(decl.return_type, slot.value)
        if result is None:
            return self.runtime_error(
                line,
                f"Function '{fn.name}' must return {decl.return_type}, got {type_name(slot.value)}.",
            )
        return result

    # ---------- LISTS ----------
    def list_and_index(self, expr):
        """Evaluates `list[index]` operands; returns (ListValue, int) or None after an error."""
        lst = self.evaluate(expr.list_expr)
        index = self.evaluate(expr.index)
        if self.had_error:
            return None
        if lst.type is not DeclaredType.LIST:
            self.runtime_error(expr.line, "Cannot index a non-list value.")
            return None
        return lst.data, self.checked_index(lst.data, index, expr.line)

    def checked_index(self, items, index, line):
        if index.type not in INTEGER_TYPES:
            self.runtime_error(line, f"List index must be an integer, got {type_name(index)}.")
            return None
        if not items.in_bounds(index.data):
            self.runtime_error(line, f"List index out of bounds: {index.data} (size: {len(items)}).")
            return None
        return index.data

    def evaluate_list_access(self, expr):
        found = self.list_and_index(expr)
        if found is None or found[1] is None:
            return Value(DeclaredType.INT, 0)
        items, i = found
        return items.items[i]

    def store_list_item(self, expr):
        # `target[index] = value`
        found = self.list_and_index(expr.left)
        value = self.evaluate(expr.right)
        if found is None or found[1] is None or self.had_error:
            return Value(DeclaredType.INT, 0)
        items, i = found
        if value.type is not items.item_type:
            return self.runtime_error(
                expr.line,
                f"Cannot assign value of type {type_name(value)} to list of type {items.item_type}.",
            )
        items.items[i] = value
        return value

    def evaluate_list_method(self, expr):
        lst = self.evaluate(expr.list_expr)
        argument = self.evaluate(expr.argument)
        if self.had_error:
            return Value(DeclaredType.INT, 0)
        if lst.type is not DeclaredType.LIST:
            return self.runtime_error(expr.line, "Cannot call method on a non-list value.")

        items = lst.data
        if expr.method.type == "ADD":
            if not items.accepts(argument):
                if argument.type not in SCALAR_TYPES:
                    return self.runtime_error(expr.line, f"Lists cannot hold values of type {type_name(argument)}.")
                return self.runtime_error(
                    expr.line,
                    f"Cannot add item of type {type_name(argument)} to list of type {items.item_type}.",
                )
            items.append(argument)
            return Value.void()

        i = self.checked_index(items, argument, expr.line)
        if i is None:
            return Value(DeclaredType.INT, 0)
        return items.remove(i)
