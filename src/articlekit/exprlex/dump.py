"""
Token Dumps
===========

Renders a token stream the way `clang -Xclang -dump-tokens` does, so the
toy tokenizer's output can be compared side by side with the compiler's:

    let 'let'	 [StartOfLine]	Loc=<calc.expr:1:1>
    identifier 'x'	 [LeadingSpace]	Loc=<calc.expr:1:5>
    equal '='	 [LeadingSpace]	Loc=<calc.expr:1:7>
    numeric_constant '4'	 [LeadingSpace]	Loc=<calc.expr:1:9>
    eof ''		Loc=<calc.expr:1:10>
"""

from typing import Iterable

from articlekit.exprlex.lexer import ExprToken


def format_token(token: ExprToken) -> str:
    """Format one token as a -dump-tokens line."""
    flags = ""
    if token.start_of_line:
        flags += " [StartOfLine]"
    if token.leading_space:
        flags += " [LeadingSpace]"
    return f"{token.type.value} '{token.text}'\t{flags}\tLoc=<{token.location}>"


def dump_tokens(tokens: Iterable[ExprToken]) -> str:
    """Format a token stream, one token per line."""
    return "\n".join(format_token(token) for token in tokens)
