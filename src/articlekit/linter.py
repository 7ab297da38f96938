"""
Article Linter
==============

Checks markdown articles against the publishing contract:

1. The front matter parses as a YAML mapping with every required key
   present and non-empty.
2. Every fenced code block has a closing fence.
3. Links are well formed and reference links have definitions.
4. Relative and site-absolute links resolve to existing paths, and
   '#anchor' links match a heading.

Rules
-----
| Code   | Severity | Meaning                                        |
|--------|----------|------------------------------------------------|
| FM001  | error    | no front matter block                          |
| FM002  | error    | front matter never closed                      |
| FM003  | error    | front matter is not valid YAML                 |
| FM004  | error    | front matter is not a mapping                  |
| FM005  | error    | required key missing                           |
| FM006  | error    | required key empty                             |
| FM007  | error    | author is not a list of {name, url}            |
| FM008  | error    | date is not a date                             |
| FM009  | error    | tags are not strings                           |
| FM010  | warning  | author url is not absolute http(s)             |
| MD001  | error    | unterminated code fence                        |
| MD002  | error    | malformed link                                 |
| MD003  | error    | reference to an undefined label                |
| MD004  | warning  | duplicate reference definition                 |
| MD005  | warning  | reference definition never used                |
| LNK001 | error    | link target does not exist                     |
| LNK002 | error    | anchor does not match a heading                |

Example Usage
-------------
>>> from articlekit.linter import ArticleLinter
>>> linter = ArticleLinter()
>>> result = linter.lint_file("posts/2013-11-08-build-process.md")
>>> result.ok
True
"""

import difflib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from articlekit.config import LintConfig
from articlekit.errors import (
    Diagnostic,
    DiagnosticCollector,
    FrontMatterError,
    LinkError,
    Severity,
    SourceLocation,
    TooManyDiagnostics,
    summary_line,
)
from articlekit.frontmatter import ArticleSource, parse_front_matter, split_front_matter, validate_front_matter
from articlekit.links import LinkKind, LinkResolver, classify, split_target
from articlekit.markdown import Link, MarkdownDocument, scan_markdown

logger = logging.getLogger(__name__)

MARKDOWN_GLOBS = ("*.md", "*.markdown")


# =============================================================================
# Result Type
# =============================================================================

@dataclass
class LintResult:
    """
    Diagnostics for one article.

    Attributes:
        filename: Name of the checked file
        diagnostics: Findings ordered by line, then column
        truncated: True when max_errors stopped collection early
    """
    filename: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    truncated: bool = False

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def ok(self) -> bool:
        """True when there are no errors (warnings are allowed)."""
        return not self.errors

    def codes(self) -> list[str]:
        return [d.code for d in self.diagnostics]

    def report(self) -> str:
        lines = [d.format() for d in self.diagnostics]
        if self.truncated:
            lines.append(f"{self.filename}: too many errors, stopping")
        return "\n\n".join(lines)

    def summary(self) -> str:
        return f"{self.filename}: {summary_line(len(self.errors), len(self.warnings))}"

    def to_dict(self) -> dict:
        return {
            "file": self.filename,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


# =============================================================================
# Linter
# =============================================================================

class ArticleLinter:
    """
    Lints markdown articles.

    Usage:
        linter = ArticleLinter(LintConfig(site_root=Path("site")))
        for result in linter.lint_paths([Path("posts")]):
            print(result.summary())

    Attributes:
        config: Linter configuration
        resolver: Link resolver built from the configuration
    """

    def __init__(self, config: Optional[LintConfig] = None):
        self.config = config or LintConfig()
        self.resolver = LinkResolver(
            site_root=self.config.site_root,
            extensions=self.config.extensions,
            index_names=self.config.index_names,
        )

    # =========================================================================
    # Entry Points
    # =========================================================================

    def lint_source(
        self,
        text: str,
        filename: str = "<input>",
        path: Optional[Path] = None,
    ) -> LintResult:
        """
        Lint article text.

        Args:
            text: Full file contents
            filename: Name used in diagnostics
            path: Filesystem location, needed to check relative links

        Returns:
            LintResult; content problems never raise
        """
        collector = DiagnosticCollector(max_errors=self.config.max_errors)
        truncated = False

        try:
            self._check(text, filename, path, collector)
        except TooManyDiagnostics:
            logger.info("Stopped linting %s after %d errors", filename, self.config.max_errors)
            truncated = True

        return LintResult(filename=filename, diagnostics=collector.sorted(), truncated=truncated)

    def lint_file(self, path: Union[str, Path]) -> LintResult:
        """
        Lint a markdown file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        logger.debug("Linting %s", path)
        return self.lint_source(text, str(path), path)

    def lint_paths(self, paths: Iterable[Union[str, Path]]) -> list[LintResult]:
        """Lint files and every markdown file under the given directories."""
        return [self.lint_file(p) for p in collect_markdown_files(paths)]

    # =========================================================================
    # Checks
    # =========================================================================

    def _add(self, collector: DiagnosticCollector, diagnostic: Diagnostic) -> None:
        # Disabled rules do not count toward max_errors
        if self.config.is_enabled(diagnostic.code):
            collector.add(diagnostic)

    def _check(
        self,
        text: str,
        filename: str,
        path: Optional[Path],
        collector: DiagnosticCollector,
    ) -> None:
        source = self._check_front_matter(text, filename, collector)
        if source is None:
            source = ArticleSource(filename=filename, front_matter="", body=text, body_line=1)

        document = scan_markdown(source.body, filename, source.body_line)
        for problem in document.problems:
            self._add(collector, problem)

        self._check_references(document, collector)
        self._check_links(document, path, collector)

    def _check_front_matter(
        self,
        text: str,
        filename: str,
        collector: DiagnosticCollector,
    ) -> Optional[ArticleSource]:
        """Parse and validate the front matter; return the split source if the block exists."""
        try:
            mapping, source = parse_front_matter(text, filename)
        except FrontMatterError as e:
            self._add(collector, Diagnostic.from_error(e, filename))
            try:
                return split_front_matter(text, filename)
            except FrontMatterError:
                return None

        for diagnostic in validate_front_matter(
            mapping, self.config.required_keys, filename, source.front_matter,
        ):
            self._add(collector, diagnostic)
        return source

    def _check_references(self, document: MarkdownDocument, collector: DiagnosticCollector) -> None:
        filename = document.filename

        for link in document.links:
            if link.kind == "reference" and link.label not in document.definitions:
                self._add(collector, Diagnostic(
                    code="MD003",
                    severity=Severity.ERROR,
                    message=f"undefined reference label '{link.label}'",
                    location=SourceLocation(filename, link.line, link.column),
                    hint=f"add a definition line '[{link.label}]: <url>'",
                    source_line=document.source_line(link.line),
                ))

        for duplicate in document.duplicate_definitions:
            first = document.definitions[duplicate.label]
            self._add(collector, Diagnostic(
                code="MD004",
                severity=Severity.WARNING,
                message=f"duplicate reference definition '{duplicate.label}'",
                location=SourceLocation(filename, duplicate.line, 1),
                hint=f"'{duplicate.label}' was first defined on line {first.line}",
            ))

        used = document.used_labels()
        for label, definition in document.definitions.items():
            if label not in used:
                self._add(collector, Diagnostic(
                    code="MD005",
                    severity=Severity.WARNING,
                    message=f"reference definition '{label}' is never used",
                    location=SourceLocation(filename, definition.line, 1),
                ))

    def _check_links(
        self,
        document: MarkdownDocument,
        path: Optional[Path],
        collector: DiagnosticCollector,
    ) -> None:
        for link in document.links:
            if not link.target:
                continue

            kind = classify(link.target)
            if kind == LinkKind.EXTERNAL:
                continue

            if kind == LinkKind.ANCHOR:
                if self.config.check_anchors:
                    self._check_anchor(link, document.anchors, document, collector)
                continue

            if not self.config.check_links:
                continue
            if not self.resolver.is_checkable(link.target, path):
                logger.debug("Skipping unresolvable link %s in %s", link.target, document.filename)
                continue

            resolved = self.resolver.resolve(link.target, path)
            if resolved is None:
                base = self.resolver.base_path(link.target, path)
                error = LinkError(
                    link.target,
                    "no such file or directory",
                    location=SourceLocation(document.filename, link.line, link.column),
                    source_line=document.source_line(link.line),
                    searched=[str(c) for c in self.resolver.candidates(base)],
                )
                self._add(collector, Diagnostic.from_error(error, document.filename))
                continue

            _, fragment = split_target(link.target)
            if fragment and self.config.check_anchors:
                anchors = self.resolver.anchors_for(resolved) if resolved.is_file() else None
                if anchors is not None:
                    self._check_anchor(link, anchors, document, collector, fragment=fragment)

    def _check_anchor(
        self,
        link: Link,
        anchors: Iterable[str],
        document: MarkdownDocument,
        collector: DiagnosticCollector,
        fragment: Optional[str] = None,
    ) -> None:
        if fragment is None:
            _, fragment = split_target(link.target)
        if not fragment or fragment in anchors:
            return

        self._add(collector, Diagnostic(
            code="LNK002",
            severity=Severity.ERROR,
            message=f"anchor '#{fragment}' does not match any heading",
            location=SourceLocation(document.filename, link.line, link.column),
            hint=_anchor_hint(fragment, anchors),
            source_line=document.source_line(link.line),
        ))


def _anchor_hint(fragment: str, anchors: Iterable[str]) -> Optional[str]:
    matches = difflib.get_close_matches(fragment, sorted(anchors), n=3)
    if not matches:
        return None
    return "did you mean " + ", ".join(f"'#{m}'" for m in matches) + "?"


def collect_markdown_files(paths: Iterable[Union[str, Path]]) -> list[Path]:
    """
    Expand paths into markdown files.

    Files are taken as given; directories are searched recursively for
    '*.md' and '*.markdown'. The result is sorted and free of duplicates.

    Raises:
        FileNotFoundError: If a path does not exist
    """
    found: set[Path] = set()
    for entry in paths:
        entry = Path(entry)
        if entry.is_dir():
            for pattern in MARKDOWN_GLOBS:
                found.update(p for p in entry.rglob(pattern) if p.is_file())
        elif entry.is_file():
            found.add(entry)
        else:
            raise FileNotFoundError(f"No such file or directory: '{entry}'")
    return sorted(found)
