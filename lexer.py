from errors import Diagnostics


KEYWORDS = {
    "int": "INT",
    "float": "FLOAT",
    "string": "STRING",
    "bool": "BOOL",
    "long": "LONG",
    "double": "DOUBLE",
    "list": "LIST",
    "void": "VOID",
    "if": "IF",
    "else": "ELSE",
    "while": "WHILE",
    "for": "FOR",
    "return": "RETURN",
    "include": "INCLUDE",
    # list methods/properties are reserved words too
    "add": "ADD",
    "remove": "REMOVE",
    "length": "LENGTH",
}

DIGITS = "0123456789"

TYPE_KEYWORDS = ("INT", "FLOAT", "STRING", "BOOL", "LONG", "DOUBLE", "LIST", "VOID")

SINGLE_CHAR_TOKENS = {
    "(": "LPAREN",
    ")": "RPAREN",
    "{": "LBRACE",
    "}": "RBRACE",
    "[": "LBRACKET",
    "]": "RBRACKET",
    ";": "SEMICOLON",
    ",": "COMMA",
    ".": "DOT",
    "-": "MINUS",
    "+": "PLUS",
    "/": "SLASH",
    "*": "STAR",
    "%": "PERCENT",
}

# one-character lookahead: (token without '=', token with '=')
EQUALS_PAIRS = {
    "!": ("BANG", "NOTEQ"),
    "=": ("ASSIGN", "EQEQ"),
    "<": ("LT", "LTE"),
    ">": ("GT", "GTE"),
}


class Token:
    def __init__(self, type, lexeme="", line=1, column=1):
        self.type = type
        self.lexeme = lexeme
        self.line = line
        self.column = column

    def __repr__(self):
        if self.lexeme:
            return f"{self.type}({self.lexeme})"
        return f"{self.type}"


class Lexer:
    def __init__(self, text, diagnostics=None):
        self.text = text
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.pos = 0
        self.current_char = text[0] if text else None
        self.line = 1
        self.column = 1
        self._peeking = False

    def advance(self):
        # track line/column based on current_char before moving
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        if self.pos >= len(self.text):
            self.current_char = None
        else:
            self.current_char = self.text[self.pos]

    def peek(self):
        nxt = self.pos + 1
        if nxt >= len(self.text):
            return None
        return self.text[nxt]

    def skip_whitespace(self):
        while self.current_char is not None:
            if self.current_char in " \t\r\n":
                self.advance()
            elif self.current_char == "/" and self.peek() == "/":
                self.skip_line_comment()
            elif self.current_char == "/" and self.peek() == "*":
                self.skip_block_comment()
            else:
                return

    def skip_line_comment(self):
        while self.current_char is not None and self.current_char != "\n":
            self.advance()

    def skip_block_comment(self):
        start_line = self.line
        self.advance()  # '/'
        self.advance()  # '*'
        depth = 1
        while self.current_char is not None and depth > 0:
            if self.current_char == "/" and self.peek() == "*":
                self.advance()
                self.advance()
                depth += 1
            elif self.current_char == "*" and self.peek() == "/":
                self.advance()
                self.advance()
                depth -= 1
            else:
                self.advance()

        if depth > 0 and not self._peeking:
            self.diagnostics.warn(f"Unclosed comment (opened at line {start_line})")

    def read_identifier(self):
        start_line, start_col = self.line, self.column
        result = ""
        while self.current_char is not None and (self.current_char.isalnum() or self.current_char == "_"):
            result += self.current_char
            self.advance()

        token_type = KEYWORDS.get(result, "IDENT")
        if token_type == "IDENT" and result in ("true", "false"):
            token_type = "BOOL_LITERAL"
        return Token(token_type, result, line=start_line, column=start_col)

    def read_number(self):
        start_line, start_col = self.line, self.column
        result = ""
        while self.current_char is not None and self.current_char in DIGITS:
            result += self.current_char
            self.advance()

        # a '.' only starts a fraction when a digit follows it
        peeked = self.peek()
        if self.current_char == "." and peeked is not None and peeked in DIGITS:
            result += "."
            self.advance()
            while self.current_char is not None and self.current_char in DIGITS:
                result += self.current_char
                self.advance()
            return Token("FLOAT_LITERAL", result, line=start_line, column=start_col)

        return Token("INT_LITERAL", result, line=start_line, column=start_col)

    def read_string(self):
        start_line, start_col = self.line, self.column
        self.advance()  # skip opening quote
        result = ""

        while self.current_char is not None and self.current_char != '"':
            if self.current_char == "\\" and self.peek() == '"':
                result += '"'
                self.advance()
                self.advance()
                continue
            result += self.current_char
            self.advance()

        if self.current_char is None:
            return Token("ERROR", "Unterminated string.", line=start_line, column=start_col)

        self.advance()  # skip closing quote
        return Token("STRING_LITERAL", result, line=start_line, column=start_col)

    def get_next_token(self):
        self.skip_whitespace()

        if self.current_char is None:
            return Token("EOF", "", line=self.line, column=self.column)

        ch = self.current_char

        if ch.isalpha() or ch == "_":
            return self.read_identifier()

        if ch in DIGITS:
            return self.read_number()

        if ch == '"':
            return self.read_string()

        start_line, start_col = self.line, self.column

        if ch in EQUALS_PAIRS:
            single, double = EQUALS_PAIRS[ch]
            self.advance()
            if self.current_char == "=":
                self.advance()
                return Token(double, ch + "=", line=start_line, column=start_col)
            return Token(single, ch, line=start_line, column=start_col)

        if ch in SINGLE_CHAR_TOKENS:
            self.advance()
            return Token(SINGLE_CHAR_TOKENS[ch], ch, line=start_line, column=start_col)

        self.advance()
        return Token("ERROR", "Unexpected character.", line=start_line, column=start_col)

    def peek_token(self):
        """Returns the next token without consuming it."""
        saved = (self.pos, self.current_char, self.line, self.column)
        self._peeking = True
        try:
            return self.get_next_token()
        finally:
            self._peeking = False
            self.pos, self.current_char, self.line, self.column = saved

    def __iter__(self):
        while True:
            token = self.get_next_token()
            yield token
            if token.type == "EOF":
                return
