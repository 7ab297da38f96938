"""
artlint - Article Linter Command-Line Interface
===============================================

Checks markdown articles before they are handed to the site generator.

Usage Examples
--------------
Lint one article:
    $ artlint posts/2013-11-08-build-process.md

Lint a whole directory, resolving '/...' links against the site:
    $ artlint --site-root site/ posts/

Machine-readable output:
    $ artlint --format json posts/

Silence a rule:
    $ artlint --disable MD005 posts/

Exit Codes
----------
0 - No errors (warnings allowed unless --warnings-as-errors)
1 - At least one article has errors
2 - Invalid arguments, configuration, or missing files
3 - Internal error
"""

import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from articlekit import __version__
from articlekit.cli.errors import ExitCode, handle_cli_exception, setup_logging
from articlekit.config import load_config
from articlekit.errors import summary_line
from articlekit.linter import ArticleLinter

logger = logging.getLogger(__name__)


@click.command()
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "-c", "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file (default: ./.articlekit.yaml if present)",
)
@click.option(
    "-s", "--site-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory that site-absolute links ('/path/') resolve against",
)
@click.option(
    "-d", "--disable",
    multiple=True,
    metavar="CODE",
    help="Disable a rule by code, e.g. MD005 (can be repeated)",
)
@click.option(
    "-f", "--format",
    "output_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format (default: text)",
)
@click.option(
    "-W", "--warnings-as-errors",
    is_flag=True,
    help="Exit with status 1 when only warnings are found",
)
@click.option(
    "--no-links",
    is_flag=True,
    help="Do not check link targets against the filesystem",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="artlint")
def main(
    paths: tuple[Path, ...],
    config_file: Optional[Path],
    site_root: Optional[Path],
    disable: tuple[str, ...],
    output_format: str,
    warnings_as_errors: bool,
    no_links: bool,
    verbose: bool,
) -> None:
    """
    Lint markdown articles.

    PATHS are markdown files or directories searched for *.md and
    *.markdown files.

    \b
    Checks:
        - YAML front matter with title, category, date, tags, author
        - every fenced code block is closed
        - links are well formed and references are defined
        - relative and site links point at existing files
        - #anchors match a heading
    """
    setup_logging(verbose)

    try:
        config = load_config(config_file)
        if site_root is not None:
            config = replace(config, site_root=site_root)
        if disable:
            config = replace(config, disabled_rules=config.disabled_rules | {c.upper() for c in disable})
        if no_links:
            config = replace(config, check_links=False)

        logger.debug("Effective configuration: %s", config)
        results = ArticleLinter(config).lint_paths(paths)
    except Exception as e:
        handle_cli_exception(e, verbose)

    errors = sum(len(r.errors) for r in results)
    warnings = sum(len(r.warnings) for r in results)

    if output_format.lower() == "json":
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        for result in results:
            if result.diagnostics:
                click.echo(result.report())
                click.echo()
            elif verbose:
                click.echo(f"{result.filename}: ok")
        click.echo(f"Checked {len(results)} file(s): {summary_line(errors, warnings)}")

    if errors or (warnings_as_errors and warnings):
        sys.exit(ExitCode.CHECK_FAILED)


if __name__ == "__main__":
    main()
