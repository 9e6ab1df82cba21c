from enum import Enum


class DeclaredType(Enum):
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"
    LONG = "long"
    DOUBLE = "double"
    LIST = "list"
    VOID = "void"

    def __str__(self):
        return self.value


class ASTNode:
    # Source line (1-based) of the token that starts the node. Parser sets this.
    line: int | None = None


class Expr(ASTNode):
    pass


class Stmt(ASTNode):
    pass


# ---------- expressions ----------

class Literal(Expr):
    def __init__(self, token):
        self.token = token  # INT_LITERAL, FLOAT_LITERAL, STRING_LITERAL or BOOL_LITERAL
        self.line = token.line


class Binary(Expr):
    def __init__(self, left, op, right):
        self.left = left
        self.op = op  # Token; "=" with a ListAccess on the left is an indexed store
        self.right = right
        self.line = op.line


class Unary(Expr):
    def __init__(self, op, operand):
        self.op = op
        self.operand = operand
        self.line = op.line


class Variable(Expr):
    def __init__(self, name):
        self.name = name  # Token
        self.line = name.line


class Assign(Expr):
    def __init__(self, name, value):
        self.name = name
        self.value = value
        self.line = name.line


class Call(Expr):
    def __init__(self, callee, paren, args):
        self.callee = callee
        self.paren = paren  # closing ')' (for error positions)
        self.args = args
        self.line = paren.line


class ListAccess(Expr):
    def __init__(self, list_expr, bracket, index):
        self.list_expr = list_expr
        self.bracket = bracket
        self.index = index
        self.line = bracket.line


class ListMethod(Expr):
    def __init__(self, list_expr, method, argument):
        self.list_expr = list_expr
        self.method = method  # ADD or REMOVE token
        self.argument = argument
        self.line = method.line


class ListProperty(Expr):
    def __init__(self, list_expr, prop):
        self.list_expr = list_expr
        self.prop = prop  # LENGTH token
        self.line = prop.line


# ---------- statements ----------

class Expression(Stmt):
    def __init__(self, expr):
        self.expr = expr
        self.line = getattr(expr, "line", None)


class VarDecl(Stmt):
    def __init__(self, name, var_type, initializer=None):
        self.name = name
        self.var_type = var_type  # DeclaredType
        self.initializer = initializer  # Expr | None
        self.line = name.line


class Block(Stmt):
    def __init__(self, statements):
        self.statements = statements


class If(Stmt):
    def __init__(self, condition, then_branch, else_branch=None):
        self.condition = condition
        self.then_branch = then_branch
        self.else_branch = else_branch


class While(Stmt):
    def __init__(self, condition, body):
        self.condition = condition
        self.body = body


class For(Stmt):
    def __init__(self, init, condition, increment, body):
        # condition is never None after parsing; an omitted one becomes `true`
        self.init = init
        self.condition = condition
        self.increment = increment
        self.body = body


class Return(Stmt):
    def __init__(self, keyword, value=None):
        self.keyword = keyword
        self.value = value
        self.line = keyword.line


class FunctionDecl(Stmt):
    def __init__(self, name, return_type, params, param_types, body):
        self.name = name
        self.return_type = return_type
        self.params = params            # list[Token]
        self.param_types = param_types  # list[DeclaredType], aligned with params
        self.body = body                # Block
        self.line = name.line


class Include(Stmt):
    def __init__(self, path):
        self.path = path  # STRING_LITERAL token; lexeme is the path without quotes
        self.line = path.line
