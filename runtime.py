"""Runtime value model shared by the interpreter and its built-ins.

Every runtime value is a tagged pair: a `Value` carries one of the declared types plus its
Python payload, while functions are `FunctionValue` (a declaration and the environment it
closes over) or `BuiltinFunction`. Scalars are immutable; a `ListValue` is shared by
reference between every variable and argument that holds it.
"""

from ast_nodes import DeclaredType


FUNCTION = "function"

# names bound in the global frame before any script runs; scripts may not declare them
BUILTIN_NAMES = ("print", "println")

INTEGER_TYPES = (DeclaredType.INT, DeclaredType.LONG)
REAL_TYPES = (DeclaredType.FLOAT, DeclaredType.DOUBLE)
NUMERIC_TYPES = INTEGER_TYPES + REAL_TYPES
SCALAR_TYPES = NUMERIC_TYPES + (DeclaredType.STRING, DeclaredType.BOOL)

# declared type -> the one runtime type it accepts besides its own
WIDENINGS = {
    DeclaredType.BOOL: DeclaredType.INT,
    DeclaredType.LONG: DeclaredType.INT,
    DeclaredType.DOUBLE: DeclaredType.FLOAT,
}


class ListValue:
    def __init__(self, items=None, item_type=None):
        self.items = list(items) if items else []
        # fixed by the first element ever added; free again once the list is empty
        self.item_type = item_type if self.items else None

    def accepts(self, value):
        if value.type not in SCALAR_TYPES:
            return False
        return not self.items or value.type is self.item_type

    def append(self, value):
        if not self.items:
            self.item_type = value.type
        self.items.append(value)

    def remove(self, index):
        removed = self.items.pop(index)
        if not self.items:
            self.item_type = None
        return removed

    def in_bounds(self, index):
        return 0 <= index < len(self.items)

    def __len__(self):
        return len(self.items)

    def __eq__(self, other):
        return isinstance(other, ListValue) and self.item_type == other.item_type and self.items == other.items

    def __repr__(self):
        return f"ListValue({self.items!r}, item_type={self.item_type})"


class Value:
    def __init__(self, type, data):
        self.type = type  # DeclaredType
        self.data = data

    @classmethod
    def default(cls, declared_type):
        """The value a declaration without initializer (or a function without return) gets."""
        if declared_type in INTEGER_TYPES:
            return cls(declared_type, 0)
        if declared_type in REAL_TYPES:
            return cls(declared_type, 0.0)
        if declared_type is DeclaredType.STRING:
            return cls(declared_type, "")
        if declared_type is DeclaredType.BOOL:
            return cls(declared_type, False)
        if declared_type is DeclaredType.LIST:
            return cls(declared_type, ListValue())
        return cls(DeclaredType.VOID, None)

    @classmethod
    def void(cls):
        return cls(DeclaredType.VOID, None)

    def __eq__(self, other):
        return isinstance(other, Value) and self.type is other.type and self.data == other.data

    def __repr__(self):
        return f"Value({self.type}, {self.data!r})"


class FunctionValue:
    type = FUNCTION

    def __init__(self, declaration, closure):
        self.declaration = declaration
        self.closure = closure  # live reference to the defining Environment

    @property
    def name(self):
        return self.declaration.name.lexeme

    def __repr__(self):
        return f"<fn {self.name}>"


class BuiltinFunction:
    type = FUNCTION

    def __init__(self, name, impl):
        self.name = name
        self.impl = impl  # impl(interpreter, args) -> Value

    def __repr__(self):
        return f"<builtin {self.name}>"


class Variable:
    def __init__(self, name, type, value):
        self.name = name
        self.type = type  # declared type; never changes after definition
        self.value = value


class Environment:
    """One scope frame plus a link to the frame that encloses it."""

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, var_type, value):
        # re-declaring in the same frame overwrites
        self.values[name] = Variable(name, var_type, value)

    def lookup(self, name):
        env = self
        while env is not None:
            var = env.values.get(name)
            if var is not None:
                return var
            env = env.enclosing
        return None

    def __contains__(self, name):
        return name in self.values


def coerce(declared_type, value):
    """Returns value as declared_type, widening where allowed, or None on a mismatch."""
    if value.type is declared_type:
        return value
    if WIDENINGS.get(declared_type) is value.type:
        if declared_type is DeclaredType.BOOL:
            return Value(declared_type, value.data != 0)
        if declared_type is DeclaredType.DOUBLE:
            return Value(declared_type, float(value.data))
        return Value(declared_type, value.data)
    return None


def type_name(value):
    return str(value.type)


def format_value(value, quote_strings=False):
    if value.type is FUNCTION:
        return repr(value)
    if value.type in INTEGER_TYPES:
        return str(value.data)
    if value.type in REAL_TYPES:
        return f"{value.data:f}"
    if value.type is DeclaredType.BOOL:
        return "true" if value.data else "false"
    if value.type is DeclaredType.STRING:
        return f"\"{value.data}\"" if quote_strings else value.data
    if value.type is DeclaredType.LIST:
        return "[" + ", ".join(format_value(item, quote_strings=True) for item in value.data.items) + "]"
    return ""
