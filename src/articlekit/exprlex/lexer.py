"""
Expression Lexer (Tokenizer)
============================

A small tokenizer for a toy expression language. It shows the first step
every compiler front end performs: turning characters into tokens that
remember where they came from.

Token Categories
----------------
- Keywords: let, if, then, else
- Identifiers: variable and function names
- Numbers: decimal, hexadecimal (0x), binary (0b), floating point
- Strings: "double quoted"
- Operators: + - * / % ^ = == != < <= > >= && || !
- Delimiters: ( ) , ;

Number Formats
--------------
| Format      | Prefix  | Example   | Value  |
|-------------|---------|-----------|--------|
| Decimal     | (none)  | 123       | 123    |
| Hexadecimal | 0x/0X   | 0x7F      | 127    |
| Binary      | 0b/0B   | 0b1010    | 10     |
| Float       | (none)  | 1.5e3     | 1500.0 |

Comments
--------
- Line comment: # comment

Example Usage
-------------
>>> from articlekit.exprlex import ExprLexer
>>> for token in ExprLexer("let x = 4 + 2", "calc.expr").tokenize():
...     print(token)
Token(LET, 'let', 1:1)
Token(IDENTIFIER, 'x', 1:5)
Token(ASSIGN, '=', 1:7)
Token(NUMBER, 4, 1:9)
Token(PLUS, '+', 1:11)
Token(NUMBER, 2, 1:13)
Token(EOF, 1:14)
"""

import string
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Union

from articlekit.errors import (
    ExprSyntaxError,
    InvalidCharacterError,
    SourceLocation,
    UnterminatedStringError,
)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class ExprTokenType(Enum):
    """
    Token types for the expression language.

    Each value is the token kind name clang prints with -dump-tokens, so
    dumps read like the compiler's own output.
    """

    # === Structural ===
    EOF = "eof"

    # === Identifiers and Literals ===
    IDENTIFIER = "identifier"
    NUMBER = "numeric_constant"
    STRING = "string_literal"

    # === Keywords ===
    LET = "let"
    IF = "if"
    THEN = "then"
    ELSE = "else"

    # === Arithmetic ===
    PLUS = "plus"
    MINUS = "minus"
    STAR = "star"
    SLASH = "slash"
    PERCENT = "percent"
    CARET = "caret"

    # === Comparison ===
    EQ = "equalequal"
    NE = "exclaimequal"
    LT = "less"
    LE = "lessequal"
    GT = "greater"
    GE = "greaterequal"

    # === Logical ===
    AND = "ampamp"
    OR = "pipepipe"
    NOT = "exclaim"

    # === Assignment ===
    ASSIGN = "equal"

    # === Delimiters ===
    LPAREN = "l_paren"
    RPAREN = "r_paren"
    COMMA = "comma"
    SEMICOLON = "semi"


KEYWORDS: dict[str, ExprTokenType] = {
    "let": ExprTokenType.LET,
    "if": ExprTokenType.IF,
    "then": ExprTokenType.THEN,
    "else": ExprTokenType.ELSE,
}

# Two-character operators are tried before their one-character prefixes
TWO_CHAR_OPERATORS: dict[str, ExprTokenType] = {
    "==": ExprTokenType.EQ,
    "!=": ExprTokenType.NE,
    "<=": ExprTokenType.LE,
    ">=": ExprTokenType.GE,
    "&&": ExprTokenType.AND,
    "||": ExprTokenType.OR,
}

SINGLE_CHAR_TOKENS: dict[str, ExprTokenType] = {
    "+": ExprTokenType.PLUS,
    "-": ExprTokenType.MINUS,
    "*": ExprTokenType.STAR,
    "/": ExprTokenType.SLASH,
    "%": ExprTokenType.PERCENT,
    "^": ExprTokenType.CARET,
    "<": ExprTokenType.LT,
    ">": ExprTokenType.GT,
    "!": ExprTokenType.NOT,
    "=": ExprTokenType.ASSIGN,
    "(": ExprTokenType.LPAREN,
    ")": ExprTokenType.RPAREN,
    ",": ExprTokenType.COMMA,
    ";": ExprTokenType.SEMICOLON,
}


def _is_digit(char: str) -> bool:
    return char != "" and char in string.digits


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class ExprToken:
    """
    A single token of expression source.

    Attributes:
        type: The ExprTokenType classification
        text: The exact spelling in the source
        value: Decoded value (int/float for numbers, str for strings and names)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
        start_of_line: First token on its line
        leading_space: Preceded by whitespace on the same line
    """
    type: ExprTokenType
    text: str
    value: Union[str, int, float, None]
    line: int
    column: int
    filename: str = "<input>"
    start_of_line: bool = False
    leading_space: bool = False

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.value is not None:
            if isinstance(self.value, (int, float)):
                return f"Token({self.type.name}, {self.value}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    __str__ = __repr__

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_keyword(self) -> bool:
        return self.type in KEYWORDS.values()


# =============================================================================
# Lexer Implementation
# =============================================================================

class ExprLexer:
    """
    Tokenizes expression source.

    Usage:
        lexer = ExprLexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    ESCAPE_SEQUENCES = {
        "n": "\n",
        "t": "\t",
        "\\": "\\",
        '"': '"',
    }

    def __init__(self, source: str, filename: str = "<input>", line_number: int = 1):
        """
        Initialize the lexer with source code.

        Args:
            source: The expression source to tokenize
            filename: Name of the source file (for error messages)
            line_number: Starting line number
        """
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = line_number
        self._column = 1
        self._line_start_pos = 0

        # Flags for the next token
        self._start_of_line = True
        self._leading_space = False

    def tokenize(self) -> Iterator[ExprToken]:
        """
        Generate tokens from the source.

        Yields:
            ExprToken objects, always ending with an EOF token

        Raises:
            ExprSyntaxError: If invalid syntax is encountered
        """
        while True:
            self._skip_whitespace_and_comments()
            if self._at_end():
                break
            yield self._scan_token()

        # EOF carries no layout flags, matching clang's dump
        self._start_of_line = False
        self._leading_space = False
        yield self._make_token(ExprTokenType.EOF, "", None, self._line, self._column)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Return the character at position + offset, or '' past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line and column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: ExprTokenType,
        text: str,
        value: Union[str, int, float, None],
        start_line: int,
        start_column: int,
    ) -> ExprToken:
        token = ExprToken(
            type=token_type,
            text=text,
            value=value,
            line=start_line,
            column=start_column,
            filename=self.filename,
            start_of_line=self._start_of_line,
            leading_space=self._leading_space,
        )
        self._start_of_line = False
        self._leading_space = False
        return token

    def _error(self, message: str, line: int, column: int, hint: Optional[str] = None) -> ExprSyntaxError:
        return ExprSyntaxError(
            message,
            SourceLocation(self.filename, line, column),
            hint=hint,
            source_line=self._get_current_line(),
        )

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace_and_comments(self) -> None:
        while not self._at_end():
            char = self._peek()

            if char == "\n":
                self._advance()
                self._start_of_line = True
                self._leading_space = False
                continue

            if char in " \t\r":
                self._advance()
                self._leading_space = True
                continue

            if char == "#":
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
                continue

            break

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> ExprToken:
        start_line = self._line
        start_column = self._column
        char = self._peek()

        if char in self.IDENT_START:
            return self._scan_identifier(start_line, start_column)

        if _is_digit(char) or (char == "." and _is_digit(self._peek(1))):
            return self._scan_number(start_line, start_column)

        if char == '"':
            return self._scan_string(start_line, start_column)

        return self._scan_operator(start_line, start_column)

    def _scan_identifier(self, start_line: int, start_column: int) -> ExprToken:
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        name = "".join(chars)
        token_type = KEYWORDS.get(name, ExprTokenType.IDENTIFIER)
        return self._make_token(token_type, name, name, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> ExprToken:
        """
        Scan a numeric literal.

        Handles:
        - Decimal: 123
        - Hexadecimal: 0x7F or 0X7F
        - Binary: 0b1010 or 0B1010
        - Float: 1.5, .5, 2e10, 1.5E-3
        """
        start = self._pos

        if self._peek() == "0" and self._peek(1).lower() in ("x", "b"):
            base = 16 if self._peek(1).lower() == "x" else 2
            digits = string.hexdigits if base == 16 else "01"
            self._advance()
            prefix = self._advance()

            while self._peek() and self._peek() in digits:
                self._advance()

            text = self.source[start:self._pos]
            if len(text) == 2:
                raise self._error(
                    f"expected {'hexadecimal' if base == 16 else 'binary'} digits after '0{prefix}'",
                    start_line, start_column,
                )
            self._reject_extra_point(start_line, start_column)
            self._reject_trailing_identifier(start_line, start_column)
            return self._make_token(ExprTokenType.NUMBER, text, int(text[2:], base), start_line, start_column)

        is_float = False
        while _is_digit(self._peek()):
            self._advance()

        if self._peek() == "." and _is_digit(self._peek(1)):
            is_float = True
            self._advance()
            while _is_digit(self._peek()):
                self._advance()
        elif self._peek() == "." and not _is_digit(self._peek(1)) and self._pos > start:
            # "1." is a valid float spelling
            is_float = True
            self._advance()

        if self._peek() in ("e", "E"):
            sign = self._peek(1)
            exponent_start = 2 if sign in ("+", "-") else 1
            if _is_digit(self._peek(exponent_start)):
                is_float = True
                for _ in range(exponent_start):
                    self._advance()
                while _is_digit(self._peek()):
                    self._advance()
            else:
                raise self._error(
                    "exponent has no digits", start_line, start_column,
                    hint="write the exponent as e.g. 1e10 or 1e-3",
                )

        text = self.source[start:self._pos]
        if is_float:
            self._reject_extra_point(start_line, start_column)
        self._reject_trailing_identifier(start_line, start_column)

        value: Union[int, float] = float(text) if is_float else int(text)
        return self._make_token(ExprTokenType.NUMBER, text, value, start_line, start_column)

    def _reject_extra_point(self, start_line: int, start_column: int) -> None:
        """A second '.' after a float, or any '.' after a hex or binary literal, is malformed."""
        if self._peek() == ".":
            raise self._error(
                "too many decimal points in numeric literal",
                start_line, start_column,
            )

    def _reject_trailing_identifier(self, start_line: int, start_column: int) -> None:
        """A number running straight into letters (e.g. '12abc') is malformed."""
        if self._peek() and self._peek() in self.IDENT_CHARS:
            raise self._error(
                f"invalid suffix '{self._peek()}' on numeric literal",
                start_line, start_column,
            )

    def _scan_string(self, start_line: int, start_column: int) -> ExprToken:
        """Scan a double-quoted string with \\n \\t \\\\ \\" escapes."""
        start = self._pos
        self._advance()  # consume opening "

        chars = []
        while not self._at_end():
            char = self._peek()

            if char == '"':
                self._advance()
                text = self.source[start:self._pos]
                return self._make_token(ExprTokenType.STRING, text, "".join(chars), start_line, start_column)

            if char == "\n":
                break

            if char == "\\":
                self._advance()
                if self._peek() in ("", "\n"):
                    break
                escaped = self._advance()
                if escaped not in self.ESCAPE_SEQUENCES:
                    raise self._error(
                        f"unknown escape sequence '\\{escaped}'",
                        self._line, self._column - 2,
                    )
                chars.append(self.ESCAPE_SEQUENCES[escaped])
            else:
                chars.append(self._advance())

        raise UnterminatedStringError(
            SourceLocation(self.filename, start_line, start_column),
            self._get_current_line(),
        )

    def _scan_operator(self, start_line: int, start_column: int) -> ExprToken:
        pair = self._peek() + self._peek(1)
        if pair in TWO_CHAR_OPERATORS:
            self._advance()
            self._advance()
            return self._make_token(TWO_CHAR_OPERATORS[pair], pair, pair, start_line, start_column)

        char = self._peek()
        if char in SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(SINGLE_CHAR_TOKENS[char], char, char, start_line, start_column)

        raise InvalidCharacterError(
            char,
            SourceLocation(self.filename, start_line, start_column),
            self._get_current_line(),
        )

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _get_current_line(self) -> str:
        """Get the current line of source text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]


def tokenize(source: str, filename: str = "<input>") -> list[ExprToken]:
    """Tokenize a whole source string into a list ending with EOF."""
    return list(ExprLexer(source, filename).tokenize())
