"""
articlekit - Tooling for Long-Form Markdown Articles
====================================================

This package checks and scaffolds markdown articles published through a
static site generator, such as a long-form piece on how Clang and LLVM
compile Objective-C. It also carries a small tokenizer that reproduces the
article's tokenization step on a toy expression language.

Main Components
---------------
- **frontmatter**: split, parse, validate and render YAML front matter
- **markdown**: scan a body for code fences, headings and links
- **links**: resolve relative and site-absolute link targets
- **linter**: run every check and collect diagnostics (artlint)
- **exprlex**: toy expression tokenizer with a clang-style dump (exprtok)
- **config**: linter configuration from YAML and the environment

Quick Start
-----------
Lint an article:
    >>> from articlekit import ArticleLinter
    >>> result = ArticleLinter().lint_file("posts/build-process.md")
    >>> for diagnostic in result.diagnostics:
    ...     print(diagnostic.format())

Tokenize an expression:
    >>> from articlekit.exprlex import tokenize, dump_tokens
    >>> print(dump_tokens(tokenize("a + 1")))

Or use the command-line tools:
    $ artlint --site-root site/ posts/
    $ exprtok --dump calc.expr
    $ artnew posts/new.md --title "Title" --category 6 --tag article \\
        --author "Name=https://example.com"
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from articlekit.errors import (
    ArticleError,
    ConfigError,
    Diagnostic,
    DiagnosticCollector,
    ExprSyntaxError,
    FrontMatterError,
    FrontMatterSyntaxError,
    LinkError,
    MarkdownSyntaxError,
    MissingFrontMatterError,
    Severity,
    SourceLocation,
    UnterminatedFenceError,
    UnterminatedFrontMatterError,
)
from articlekit.frontmatter import (
    REQUIRED_KEYS,
    Author,
    FrontMatter,
    parse_front_matter,
    render_article,
    split_front_matter,
    validate_front_matter,
)
from articlekit.markdown import MarkdownDocument, scan_markdown
from articlekit.links import LinkResolver
from articlekit.config import LintConfig, load_config
from articlekit.linter import ArticleLinter, LintResult

__all__ = [
    "__version__",
    # Errors and diagnostics
    "ArticleError",
    "ConfigError",
    "Diagnostic",
    "DiagnosticCollector",
    "ExprSyntaxError",
    "FrontMatterError",
    "FrontMatterSyntaxError",
    "LinkError",
    "MarkdownSyntaxError",
    "MissingFrontMatterError",
    "Severity",
    "SourceLocation",
    "UnterminatedFenceError",
    "UnterminatedFrontMatterError",
    # Front matter
    "REQUIRED_KEYS",
    "Author",
    "FrontMatter",
    "parse_front_matter",
    "render_article",
    "split_front_matter",
    "validate_front_matter",
    # Markdown and links
    "MarkdownDocument",
    "scan_markdown",
    "LinkResolver",
    # Linting
    "LintConfig",
    "load_config",
    "ArticleLinter",
    "LintResult",
]
