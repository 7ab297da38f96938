"""
Expression Tokenizer
====================

A didactic tokenizer for a tiny expression language, with a token dump in
the format clang prints for `-Xclang -dump-tokens`.

Example:
    >>> from articlekit.exprlex import tokenize, dump_tokens
    >>> print(dump_tokens(tokenize("1 + 2", "sum.expr")))
    numeric_constant '1'	 [StartOfLine]	Loc=<sum.expr:1:1>
    plus '+'	 [LeadingSpace]	Loc=<sum.expr:1:3>
    numeric_constant '2'	 [LeadingSpace]	Loc=<sum.expr:1:5>
    eof ''		Loc=<sum.expr:1:6>
"""

from articlekit.exprlex.lexer import (
    KEYWORDS,
    ExprLexer,
    ExprToken,
    ExprTokenType,
    tokenize,
)
from articlekit.exprlex.dump import dump_tokens, format_token

__all__ = [
    "KEYWORDS",
    "ExprLexer",
    "ExprToken",
    "ExprTokenType",
    "tokenize",
    "dump_tokens",
    "format_token",
]
