"""
exprtok - Expression Tokenizer Command-Line Interface
=====================================================

Runs the toy tokenizer over a file, an inline expression, or stdin.

Usage Examples
--------------
Tokenize a file:
    $ exprtok calc.expr

Tokenize an inline expression:
    $ exprtok -e "let x = 0x10 * 2"

Dump tokens in clang's -dump-tokens format:
    $ exprtok --dump calc.expr
"""

import sys
from pathlib import Path
from typing import Optional

import click

from articlekit import __version__
from articlekit.cli.errors import ExitCode, handle_cli_exception, setup_logging
from articlekit.exprlex import ExprTokenType, dump_tokens, tokenize


@click.command()
@click.argument(
    "input_file",
    required=False,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-e", "--expr",
    "expression",
    type=str,
    help="Tokenize this expression instead of a file",
)
@click.option(
    "--dump",
    is_flag=True,
    help="Print tokens like 'clang -Xclang -dump-tokens'",
)
@click.option(
    "--no-eof",
    is_flag=True,
    help="Omit the trailing EOF token",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="exprtok")
def main(
    input_file: Optional[Path],
    expression: Optional[str],
    dump: bool,
    no_eof: bool,
    verbose: bool,
) -> None:
    """
    Tokenize toy expression source.

    INPUT_FILE is the source to read; use -e for an inline expression.
    With neither, source is read from stdin.

    \b
    Examples:
        exprtok calc.expr
        exprtok -e "if x >= 1.5e3 then 1 else 0"
        exprtok --dump calc.expr
    """
    setup_logging(verbose)

    if input_file is not None and expression is not None:
        click.echo("Error: give either INPUT_FILE or --expr, not both", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    try:
        if expression is not None:
            source, filename = expression, "<expr>"
        elif input_file is not None:
            source, filename = input_file.read_text(encoding="utf-8"), str(input_file)
        else:
            source, filename = click.get_text_stream("stdin").read(), "<stdin>"

        tokens = tokenize(source, filename)
    except Exception as e:
        handle_cli_exception(e, verbose)

    if no_eof:
        tokens = [t for t in tokens if t.type is not ExprTokenType.EOF]

    if dump:
        click.echo(dump_tokens(tokens))
    else:
        for token in tokens:
            click.echo(repr(token))

    if verbose:
        click.echo(f"{len(tokens)} tokens", err=True)


if __name__ == "__main__":
    main()
