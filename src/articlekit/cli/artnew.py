"""
artnew - Article Scaffolding Command-Line Interface
===================================================

Writes a new markdown article whose front matter satisfies the linter.

Usage Examples
--------------
    $ artnew posts/build-process.md \\
        --title "The Build Process" --category 6 --tag article \\
        --author "Daniel Eggert=https://twitter.com/danielboedewadt"
"""

import datetime
import sys
from pathlib import Path
from typing import Optional

import click

from articlekit import __version__
from articlekit.cli.errors import ExitCode, handle_cli_exception, setup_logging
from articlekit.frontmatter import Author, FrontMatter, render_article
from articlekit.linter import ArticleLinter


def parse_author(value: str) -> Author:
    """Parse 'Name=URL' into an Author."""
    name, sep, url = value.partition("=")
    if not sep or not name.strip() or not url.strip():
        raise click.BadParameter(f"expected NAME=URL, got {value!r}", param_hint="'--author'")
    return Author(name=name.strip(), url=url.strip())


@click.command()
@click.argument(
    "output",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option("-t", "--title", required=True, help="Article title")
@click.option("-c", "--category", required=True, help="Category (issue number or section)")
@click.option(
    "--tag",
    "tags",
    multiple=True,
    required=True,
    help="Tag (can be repeated)",
)
@click.option(
    "-a", "--author",
    "authors",
    multiple=True,
    required=True,
    metavar="NAME=URL",
    help="Author name and homepage (can be repeated)",
)
@click.option(
    "--date",
    default=None,
    help="Publication date, ISO-8601 (default: today)",
)
@click.option(
    "--body",
    "body_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Markdown file to use as the body",
)
@click.option(
    "-f", "--force",
    is_flag=True,
    help="Overwrite OUTPUT if it exists",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="artnew")
def main(
    output: Path,
    title: str,
    category: str,
    tags: tuple[str, ...],
    authors: tuple[str, ...],
    date: Optional[str],
    body_file: Optional[Path],
    force: bool,
    verbose: bool,
) -> None:
    """
    Create a new article at OUTPUT with valid front matter.

    The generated file is linted before it is written; front matter
    errors abort without touching the filesystem.
    """
    setup_logging(verbose)

    if output.exists() and not force:
        click.echo(f"Error: {output} already exists (use --force to overwrite)", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    try:
        meta = FrontMatter(
            title=title,
            category=category,
            date=date or datetime.date.today().isoformat(),
            tags=list(tags),
            authors=[parse_author(a) for a in authors],
        )
        body = body_file.read_text(encoding="utf-8") if body_file else f"{title}\n{'=' * len(title)}\n"
        text = render_article(meta.to_mapping(), body)

        result = ArticleLinter().lint_source(text, str(output))
    except Exception as e:
        handle_cli_exception(e, verbose)

    front_matter_problems = [d for d in result.diagnostics if d.code.startswith("FM")]
    if front_matter_problems:
        click.echo("\n\n".join(d.format() for d in front_matter_problems), err=True)
        if any(d.is_error for d in front_matter_problems):
            sys.exit(ExitCode.CHECK_FAILED)

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
    except Exception as e:
        handle_cli_exception(e, verbose)

    click.echo(f"Created {output}")


if __name__ == "__main__":
    main()
