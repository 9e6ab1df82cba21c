"""Error reporting for fulani scripts.

Lex and parse errors are reported as they are found and collected into a flag on the
parser. Runtime errors are reported at the point of detection and set the interpreter's
sticky error flag. Neither unwinds by exception: the only exceptions here are for the
driver, when a whole script cannot be read.
"""

import sys

from termcolor import colored


class FulaniError(Exception):
    pass


class ScriptIOError(FulaniError):
    def __init__(self, path: str, message: str | None = None):
        super().__init__(message or "cannot read file")
        self.path = path
        self.message = message or "cannot read file"

    def __str__(self) -> str:
        return f"Could not read file \"{self.path}\": {self.message}"


class Diagnostics:
    """Writes positional diagnostics to a stream (stderr unless told otherwise)."""
    ERROR = "red"
    WARNING = "magenta"
    NOTE = "cyan"

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stderr
        self.error_count = 0

    def _emit(self, text):
        print(text, file=self.stream)

    def error_at(self, token, message):
        """Reports a parse error located at token."""
        self.error_count += 1
        label = colored(f"[line {token.line}] Error", Diagnostics.ERROR, attrs=["bold"])
        if token.type == "EOF":
            self._emit(f"{label} at end: {message}")
        elif token.type == "ERROR":
            # the lexeme of an error token is the lexer's own message
            self._emit(f"{label}: {message}")
        else:
            self._emit(f"{label} at '{token.lexeme}': {message}")

    def error(self, message):
        """Reports an error with no source position (driver-level failures)."""
        self.error_count += 1
        self._emit(colored("Error", Diagnostics.ERROR, attrs=["bold"]) + f": {message}")

    def runtime_error(self, message, line=None):
        self.error_count += 1
        if line is None:
            label = colored("Runtime error", Diagnostics.ERROR, attrs=["bold"])
        else:
            label = colored(f"[line {line}] Runtime error", Diagnostics.ERROR, attrs=["bold"])
        self._emit(f"{label}: {message}")

    def warn(self, message):
        self._emit(colored("Warning", Diagnostics.WARNING, attrs=["bold"]) + f": {message}")

    def note(self, message):
        """Debug-mode chatter (include resolution and the like)."""
        self._emit(colored(message, Diagnostics.NOTE))
