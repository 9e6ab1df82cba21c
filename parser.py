from ast_nodes import (
    DeclaredType,
    Literal, Binary, Unary, Variable, Assign, Call, ListAccess, ListMethod, ListProperty,
    Expression, VarDecl, Block, If, While, For, Return, FunctionDecl, Include,
)
from lexer import Token, TYPE_KEYWORDS
from runtime import BUILTIN_NAMES


# tokens a statement can start with; synchronisation stops in front of them
STATEMENT_STARTS = TYPE_KEYWORDS + ("IF", "WHILE", "FOR", "RETURN", "INCLUDE", "LBRACE", "RBRACE")

# list method/property words are keywords only right after a "."; elsewhere they are names
NAME_TOKENS = ("IDENT", "ADD", "REMOVE", "LENGTH")


class Parser:
    MAX_ARGS = 255

    def __init__(self, lexer, diagnostics=None):
        self.lexer = lexer
        self.diagnostics = diagnostics if diagnostics is not None else lexer.diagnostics
        self.had_error = False
        self.panic_mode = False
        self.previous = None
        self.current = None
        self.advance()

    # ---------- TOKEN STREAM ----------
    def advance(self):
        self.previous = self.current
        while True:
            self.current = self.lexer.get_next_token()
            if self.current.type != "ERROR":
                break
            self.error_at_current(self.current.lexeme)

    def check(self, *token_types):
        return self.current.type in token_types

    def match(self, *token_types):
        if not self.check(*token_types):
            return False
        self.advance()
        return True

    # move to next token, but only if it matches what we expect
    def eat(self, token_type, message):
        if self.current.type == token_type:
            self.advance()
            return
        self.error_at_current(message)

    # ---------- ERRORS ----------
    def error_at_current(self, message):
        self.error_at(self.current, message)

    def error_at(self, token, message):
        if self.panic_mode:
            return
        self.panic_mode = True
        self.had_error = True
        self.diagnostics.error_at(token, message)

    def synchronize(self, start):
        # Skip to the next statement boundary so one bad token yields one diagnostic.
        self.panic_mode = False
        if self.current is start:
            self.advance()
        while self.current.type != "EOF":
            if self.previous is not None and self.previous.type == "SEMICOLON":
                return
            if self.current.type in STATEMENT_STARTS:
                return
            self.advance()

    # ---------- TOP LEVEL ----------
    def parse_program(self):
        statements = []
        while not self.check("EOF"):
            statements.append(self.declaration())
        return statements, self.had_error

    # ---------- STATEMENTS ----------
    def declaration(self):
        start = self.current
        stmt = self._declaration()
        if self.panic_mode:
            self.synchronize(start)
        return stmt

    def _declaration(self):
        if self.check(*TYPE_KEYWORDS):
            declared_type = self.parse_type()
            # the name is the current token; peek past it for '(' to spot a function
            if self.check(*NAME_TOKENS) and self.lexer.peek_token().type == "LPAREN":
                return self.function_declaration(declared_type)
            return self.var_declaration(declared_type)
        return self.statement()

    def statement(self):
        if self.match("IF"):
            return self.if_statement()
        if self.match("WHILE"):
            return self.while_statement()
        if self.match("FOR"):
            return self.for_statement()
        if self.match("RETURN"):
            return self.return_statement()
        if self.match("INCLUDE"):
            return self.include_statement()
        if self.match("LBRACE"):
            return Block(self.block())
        return self.expression_statement()

    def parse_type(self):
        tok = self.current
        if self.match(*TYPE_KEYWORDS):
            return DeclaredType(tok.lexeme)
        self.error_at_current("Expected type.")
        return DeclaredType.VOID

    def declared_name(self, message):
        name = self.current
        if not self.match(*NAME_TOKENS):
            self.error_at_current(message)
        elif name.lexeme in BUILTIN_NAMES:
            self.error_at(name, f"Cannot redeclare built-in '{name.lexeme}'.")
        return name

    def function_declaration(self, return_type):
        name = self.declared_name("Expect function name.")
        self.eat("LPAREN", "Expect '(' after function name.")

        params = []
        param_types = []
        if not self.check("RPAREN"):
            while True:
                if len(params) >= self.MAX_ARGS:
                    self.error_at_current(f"Cannot have more than {self.MAX_ARGS} parameters.")
                param_type = self.parse_type()
                if param_type is DeclaredType.VOID:
                    self.error_at(self.previous, "Parameters cannot have type void.")
                params.append(self.declared_name("Expect parameter name."))
                param_types.append(param_type)
                if not self.match("COMMA"):
                    break

        self.eat("RPAREN", "Expect ')' after parameters.")

        if name.lexeme == "main" and (return_type is not DeclaredType.VOID or params):
            self.error_at(name, "The 'main' function must return void and take no parameters.")

        self.eat("LBRACE", "Expect '{' before function body.")
        body = Block(self.block())
        return FunctionDecl(name, return_type, params, param_types, body)

    def var_declaration(self, var_type):
        # int a = 1, b, c = 3;  ->  Block([VarDecl a, VarDecl b, VarDecl c])
        if var_type is DeclaredType.VOID:
            self.error_at(self.previous, "Variables cannot have type void.")

        decls = []
        while True:
            name = self.declared_name("Expect variable name.")
            initializer = None
            if self.match("ASSIGN"):
                initializer = self.expression()
            decls.append(VarDecl(name, var_type, initializer))
            if not self.match("COMMA"):
                break

        self.eat("SEMICOLON", "Expect ';' after variable declaration.")
        if len(decls) == 1:
            return decls[0]
        return Block(decls)

    def block(self):
        # assumes '{' has been consumed
        statements = []
        while not self.check("RBRACE", "EOF"):
            statements.append(self.declaration())
        self.eat("RBRACE", "Expect '}' after block.")
        return statements

    def if_statement(self):
        self.eat("LPAREN", "Expect '(' after 'if'.")
        condition = self.expression()
        self.eat("RPAREN", "Expect ')' after condition.")

        then_branch = self.declaration()
        else_branch = None
        if self.match("ELSE"):
            else_branch = self.declaration()
        return If(condition, then_branch, else_branch)

    def while_statement(self):
        self.eat("LPAREN", "Expect '(' after 'while'.")
        condition = self.expression()
        self.eat("RPAREN", "Expect ')' after condition.")
        body = self.declaration()
        return While(condition, body)

    def for_statement(self):
        for_tok = self.previous
        self.eat("LPAREN", "Expect '(' after 'for'.")

        if self.match("SEMICOLON"):
            init = None
        elif self.check(*TYPE_KEYWORDS):
            init = self.var_declaration(self.parse_type())
        else:
            init = self.expression_statement()

        condition = None
        if not self.check("SEMICOLON"):
            condition = self.expression()
        self.eat("SEMICOLON", "Expect ';' after loop condition.")

        increment = None
        if not self.check("RPAREN"):
            increment = self.expression()
        self.eat("RPAREN", "Expect ')' after for clauses.")

        body = self.declaration()

        if condition is None:
            condition = Literal(Token("BOOL_LITERAL", "true", line=for_tok.line, column=for_tok.column))
        return For(init, condition, increment, body)

    def return_statement(self):
        keyword = self.previous
        value = None
        if not self.check("SEMICOLON"):
            value = self.expression()
        self.eat("SEMICOLON", "Expect ';' after return value.")
        return Return(keyword, value)

    def include_statement(self):
        path = self.current
        self.eat("STRING_LITERAL", "Expect file path string after 'include'.")
        self.eat("SEMICOLON", "Expect ';' after include path.")
        return Include(path)

    def expression_statement(self):
        expr = self.expression()
        self.eat("SEMICOLON", "Expect ';' after expression.")
        return Expression(expr)

    # ---------- EXPRESSIONS ----------
    # expression -> assignment
    def expression(self):
        return self.assignment()

    # assignment -> (IDENT | postfix "[" expr "]") "=" assignment | equality
    def assignment(self):
        expr = self.equality()

        if self.match("ASSIGN"):
            equals = self.previous
            value = self.assignment()

            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, ListAccess):
                return Binary(expr, equals, value)

            self.error_at(equals, "Invalid assignment target.")

        return expr

    # equality -> comparison ((==|!=) comparison)*
    def equality(self):
        expr = self.comparison()
        while self.match("EQEQ", "NOTEQ"):
            op = self.previous
            expr = Binary(expr, op, self.comparison())
        return expr

    # comparison -> term ((<|<=|>|>=) term)*
    def comparison(self):
        expr = self.term()
        while self.match("LT", "LTE", "GT", "GTE"):
            op = self.previous
            expr = Binary(expr, op, self.term())
        return expr

    # term -> factor ((+|-) factor)*
    def term(self):
        expr = self.factor()
        while self.match("PLUS", "MINUS"):
            op = self.previous
            expr = Binary(expr, op, self.factor())
        return expr

    # factor -> unary ((*|/|%) unary)*
    def factor(self):
        expr = self.unary()
        while self.match("STAR", "SLASH", "PERCENT"):
            op = self.previous
            expr = Binary(expr, op, self.unary())
        return expr

    # unary -> "-" unary | postfix
    def unary(self):
        if self.match("MINUS"):
            op = self.previous
            return Unary(op, self.unary())
        return self.postfix()

    # postfix -> primary ("[" expr "]" | "." (add|remove) "(" expr ")" | "." length)*
    def postfix(self):
        expr = self.primary()

        while True:
            if self.match("LBRACKET"):
                bracket = self.previous
                index = self.expression()
                self.eat("RBRACKET", "Expect ']' after index.")
                expr = ListAccess(expr, bracket, index)
            elif self.match("DOT"):
                if self.match("ADD", "REMOVE"):
                    method = self.previous
                    self.eat("LPAREN", f"Expect '(' after '{method.lexeme}'.")
                    argument = self.expression()
                    self.eat("RPAREN", "Expect ')' after list method argument.")
                    expr = ListMethod(expr, method, argument)
                elif self.match("LENGTH"):
                    expr = ListProperty(expr, self.previous)
                else:
                    self.error_at_current("Expect list method or property after '.'.")
                    break
            else:
                break

        return expr

    # primary -> INT | FLOAT | STRING | BOOL | IDENT | IDENT "(" args ")" | "(" expr ")"
    def primary(self):
        if self.match("INT_LITERAL", "FLOAT_LITERAL", "STRING_LITERAL", "BOOL_LITERAL"):
            return Literal(self.previous)

        if self.match(*NAME_TOKENS):
            callee = Variable(self.previous)
            if self.match("LPAREN"):
                return self.finish_call(callee)
            return callee

        if self.match("LPAREN"):
            expr = self.expression()
            self.eat("RPAREN", "Expect ')' after expression.")
            return expr

        self.error_at_current("Expect expression.")
        return None

    def finish_call(self, callee):
        args = []
        if not self.check("RPAREN"):
            while True:
                if len(args) >= self.MAX_ARGS:
                    self.error_at_current(f"Cannot have more than {self.MAX_ARGS} arguments.")
                args.append(self.expression())
                if not self.match("COMMA"):
                    break

        paren = self.current
        self.eat("RPAREN", "Expect ')' after arguments.")
        return Call(callee, paren, args)
