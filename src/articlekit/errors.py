"""
articlekit Error Hierarchy
==========================

This module defines the exception hierarchy and the diagnostic types used
across articlekit. All exceptions inherit from ArticleError, allowing callers
to catch every articlekit error with a single except clause.

Exception Hierarchy
-------------------
ArticleError (base)
├── FrontMatterError - front matter cannot be read
│   ├── MissingFrontMatterError - file does not start with '---'
│   ├── UnterminatedFrontMatterError - no closing '---' or '...'
│   └── FrontMatterSyntaxError - block is not valid YAML
├── MarkdownSyntaxError - malformed markdown body
│   └── UnterminatedFenceError - code fence never closed
├── LinkError - link target problems
├── ConfigError - invalid linter configuration
└── ExprSyntaxError - expression tokenizer errors
    ├── UnterminatedStringError - missing closing quote
    └── InvalidCharacterError - unexpected character

Raised errors and lint findings share one message format:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)

The linter never stops at the first problem. It converts raised errors into
Diagnostic records and gathers them in a DiagnosticCollector.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class ArticleError(Exception):
    """
    Base exception for all articlekit errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text at the error location (optional)
    """

    code = "E000"

    def __init__(
        self,
        message: str,
        location: Optional["SourceLocation"] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return format_message("error", self.message, self.location, self.hint, self.source_line)


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in a source file, used for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


def format_message(
    label: str,
    message: str,
    location: Optional[SourceLocation] = None,
    hint: Optional[str] = None,
    source_line: Optional[str] = None,
) -> str:
    """
    Format a message with location, source context, and hint.

    Example output:
        post.md:15:9: error: unterminated code fence
            ```objc
            ^
        hint: add a closing ``` line
    """
    parts = []

    if location:
        parts.append(f"{location}: {label}: {message}")
    else:
        parts.append(f"{label}: {message}")

    # Source context with caret pointer
    if source_line is not None and location is not None:
        parts.append(f"    {source_line}")
        if location.column > 0:
            padding = " " * (4 + location.column - 1)
            parts.append(f"{padding}^")

    if hint:
        parts.append(f"hint: {hint}")

    return "\n".join(parts)


# =============================================================================
# Front Matter Exceptions
# =============================================================================

class FrontMatterError(ArticleError):
    """
    Front matter cannot be read.

    Raised directly when the block parses but is not a key-value mapping.
    """
    code = "FM004"


class MissingFrontMatterError(FrontMatterError):
    """The file does not open with a '---' line."""

    code = "FM001"

    def __init__(self, filename: str = "<input>", source_line: Optional[str] = None):
        super().__init__(
            "missing front matter",
            location=SourceLocation(filename, 1, 1),
            hint="start the file with a '---' line followed by YAML metadata",
            source_line=source_line,
        )


class UnterminatedFrontMatterError(FrontMatterError):
    """The opening '---' has no matching closing '---' or '...' line."""

    code = "FM002"

    def __init__(self, filename: str = "<input>"):
        super().__init__(
            "unterminated front matter",
            location=SourceLocation(filename, 1, 1),
            hint="close the metadata block with a '---' line",
            source_line="---",
        )


class FrontMatterSyntaxError(FrontMatterError):
    """
    Front matter is not valid YAML.

    The location points at the line YAML reported, translated to a line
    number in the markdown file.
    """
    code = "FM003"


# =============================================================================
# Markdown Exceptions
# =============================================================================

class MarkdownSyntaxError(ArticleError):
    """Malformed markdown in the article body."""

    code = "MD002"


class UnterminatedFenceError(MarkdownSyntaxError):
    """
    A fenced code block is never closed.

    Example:
        ```objc
        int main() { return 0; }
        (end of file, no closing ```)
    """

    code = "MD001"

    def __init__(
        self,
        fence: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.fence = fence
        super().__init__(
            "unterminated code fence",
            location=location,
            hint=f"add a closing {fence} line",
            source_line=source_line,
        )


# =============================================================================
# Link Exceptions
# =============================================================================

class LinkError(ArticleError):
    """A link target that cannot be resolved."""

    code = "LNK001"

    def __init__(
        self,
        target: str,
        reason: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        searched: Optional[list[str]] = None,
    ):
        self.target = target
        self.reason = reason
        self.searched = searched or []

        hint = None
        if self.searched:
            hint = "tried: " + ", ".join(self.searched[:4])

        super().__init__(
            f"broken link '{target}': {reason}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigError(ArticleError):
    """Invalid linter configuration file or value."""

    code = "CFG001"


# =============================================================================
# Expression Tokenizer Exceptions
# =============================================================================

class ExprSyntaxError(ArticleError):
    """
    Syntax error in expression source.

    Raised when the tokenizer meets input it cannot turn into a token,
    such as a malformed number literal.
    """
    code = "EX001"


class UnterminatedStringError(ExprSyntaxError):
    """A string literal is not closed before the end of the line."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "unterminated string literal",
            location=location,
            hint="add closing '\"' to complete the string",
            source_line=source_line,
        )


class InvalidCharacterError(ExprSyntaxError):
    """A character that cannot start any token."""

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Diagnostics
# =============================================================================

class Severity(str, Enum):
    """How serious a lint finding is."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single lint finding.

    Attributes:
        code: Rule identifier such as "FM005" or "LNK001"
        severity: Severity.ERROR or Severity.WARNING
        message: Human readable description
        location: Where the problem is
        hint: Optional suggestion for fixing
        source_line: Optional source text for the caret display
    """
    code: str
    severity: Severity
    message: str
    location: SourceLocation
    hint: Optional[str] = None
    source_line: Optional[str] = None

    @classmethod
    def from_error(
        cls,
        error: ArticleError,
        filename: str = "<input>",
        severity: Severity = Severity.ERROR,
    ) -> "Diagnostic":
        """Convert a raised ArticleError into a Diagnostic."""
        location = error.location or SourceLocation(filename, 1, 1)
        return cls(
            code=error.code,
            severity=severity,
            message=error.message,
            location=location,
            hint=error.hint,
            source_line=error.source_line,
        )

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def format(self) -> str:
        """Format in the same layout as raised errors, tagged with the rule code."""
        return format_message(
            self.severity.value,
            f"{self.message} [{self.code}]",
            self.location,
            self.hint,
            self.source_line,
        )

    def sort_key(self) -> tuple:
        return (self.location.filename, self.location.line, self.location.column, self.code)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "line": self.location.line,
            "column": self.location.column,
            "hint": self.hint,
        }


class TooManyDiagnostics(ArticleError):
    """Raised by DiagnosticCollector when max_errors has been reached."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"too many errors ({limit}), stopping")


class DiagnosticCollector:
    """
    Collects diagnostics for batch reporting.

    Example:
        collector = DiagnosticCollector(max_errors=100)

        for problem in problems:
            try:
                collector.add(problem)
            except TooManyDiagnostics:
                break

        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the collector.

        Args:
            max_errors: Maximum errors to collect before raising TooManyDiagnostics.
                Zero or a negative value means no limit.
        """
        self.diagnostics: list[Diagnostic] = []
        self.max_errors = max_errors

    def add(self, diagnostic: Diagnostic) -> None:
        """
        Add a diagnostic to the collection.

        Raises:
            TooManyDiagnostics: If max_errors errors have been collected
        """
        self.diagnostics.append(diagnostic)
        if diagnostic.is_error and 0 < self.max_errors <= self.error_count():
            raise TooManyDiagnostics(self.max_errors)

    def extend(self, diagnostics) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return self.error_count() > 0

    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.is_error)

    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if not d.is_error)

    def sorted(self) -> list[Diagnostic]:
        """Return diagnostics ordered by file, line, then column."""
        return sorted(self.diagnostics, key=Diagnostic.sort_key)

    def report(self) -> str:
        """
        Format all diagnostics for display.

        Returns:
            Formatted string ending with an "N errors, M warnings" summary
        """
        lines = []

        for diagnostic in self.sorted():
            lines.append(diagnostic.format())
            lines.append("")

        lines.append(summary_line(self.error_count(), self.warning_count()))
        return "\n".join(lines)

    def clear(self) -> None:
        self.diagnostics.clear()


def summary_line(errors: int, warnings: int) -> str:
    """Return e.g. '1 error, 2 warnings'."""
    error_word = "error" if errors == 1 else "errors"
    warning_word = "warning" if warnings == 1 else "warnings"
    return f"{errors} {error_word}, {warnings} {warning_word}"
