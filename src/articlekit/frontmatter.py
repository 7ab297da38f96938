"""
Front Matter Parsing and Validation
===================================

Articles start with a YAML metadata block delimited by '---' lines:

    ---
    title:  "The Build Process"
    category: "6"
    date: "2013-11-08 10:00:00"
    tags: article
    author:
      - name: Daniel Eggert
        url: https://twitter.com/danielboedewadt
    ---

    Body text...

The block must be the very first thing in the file. It may be closed by
either '---' or '...', the two YAML document end markers static site
generators accept.

Required Keys
-------------
| Key      | Accepted values                                         |
|----------|---------------------------------------------------------|
| title    | non-empty string                                        |
| category | non-empty scalar                                        |
| date     | YAML date/datetime, or ISO-8601 string                  |
| tags     | string, or non-empty list of non-empty strings          |
| author   | non-empty list of mappings with string 'name' and 'url' |

Example Usage
-------------
>>> from articlekit.frontmatter import parse_front_matter
>>> meta, source = parse_front_matter(text, "post.md")
>>> meta["title"]
'The Build Process'
"""

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urlparse

import yaml

from articlekit.errors import (
    Diagnostic,
    FrontMatterError,
    FrontMatterSyntaxError,
    MissingFrontMatterError,
    Severity,
    SourceLocation,
    UnterminatedFrontMatterError,
)

logger = logging.getLogger(__name__)

OPEN_DELIMITER = "---"
CLOSE_DELIMITERS = ("---", "...")

REQUIRED_KEYS: tuple[str, ...] = ("title", "category", "date", "tags", "author")


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class ArticleSource:
    """
    A markdown file split into its metadata block and body.

    Attributes:
        filename: Name used in error messages
        front_matter: Raw YAML text between the delimiters
        body: Markdown text after the closing delimiter
        body_line: 1-indexed file line on which the body starts
    """
    filename: str
    front_matter: str
    body: str
    body_line: int


@dataclass(frozen=True)
class Author:
    name: str
    url: str


@dataclass
class FrontMatter:
    """
    Typed view of a validated front matter mapping.

    Unknown keys are kept in `extra` so that nothing the site generator
    relies on is lost.
    """
    title: str
    category: str
    date: Any
    tags: list[str]
    authors: list[Author]
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: dict[str, Any]) -> "FrontMatter":
        tags = mapping.get("tags") or []
        if isinstance(tags, str):
            tags = [tags]

        authors = [
            Author(name=str(entry["name"]), url=str(entry["url"]))
            for entry in mapping.get("author") or []
            if isinstance(entry, dict)
        ]

        extra = {k: v for k, v in mapping.items() if k not in REQUIRED_KEYS}
        return cls(
            title=str(mapping.get("title", "")),
            category=str(mapping.get("category", "")),
            date=mapping.get("date"),
            tags=[str(t) for t in tags],
            authors=authors,
            extra=extra,
        )

    def to_mapping(self) -> dict[str, Any]:
        """Return the metadata in the key order articles use."""
        mapping: dict[str, Any] = {
            "title": self.title,
            "category": self.category,
            "date": self.date,
            "tags": self.tags[0] if len(self.tags) == 1 else list(self.tags),
            "author": [{"name": a.name, "url": a.url} for a in self.authors],
        }
        mapping.update(self.extra)
        return mapping


# =============================================================================
# Splitting and Parsing
# =============================================================================

def split_front_matter(text: str, filename: str = "<input>") -> ArticleSource:
    """
    Split an article into front matter and body.

    Args:
        text: Full file contents
        filename: Name for error messages

    Returns:
        ArticleSource with the raw YAML text and the body

    Raises:
        MissingFrontMatterError: If the first line is not '---'
        UnterminatedFrontMatterError: If no closing delimiter follows
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != OPEN_DELIMITER:
        first = lines[0].rstrip("\r\n") if lines else ""
        raise MissingFrontMatterError(filename, source_line=first)

    for index in range(1, len(lines)):
        if lines[index].rstrip() in CLOSE_DELIMITERS:
            return ArticleSource(
                filename=filename,
                front_matter="".join(lines[1:index]),
                body="".join(lines[index + 1:]),
                body_line=index + 2,
            )

    raise UnterminatedFrontMatterError(filename)


def parse_front_matter(text: str, filename: str = "<input>") -> tuple[dict[str, Any], ArticleSource]:
    """
    Split an article and load its metadata block with yaml.safe_load.

    Returns:
        Tuple of (metadata mapping, ArticleSource)

    Raises:
        FrontMatterError: If the block is missing, unterminated, not valid
            YAML, or not a mapping
    """
    source = split_front_matter(text, filename)

    try:
        data = yaml.safe_load(source.front_matter)
    except yaml.YAMLError as e:
        raise _yaml_error(e, source) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError(
            f"front matter must be a mapping of keys to values, not {type(data).__name__}",
            location=SourceLocation(filename, 2, 1),
            hint="write metadata as 'key: value' lines",
        )

    logger.debug("Parsed front matter in %s: keys=%s", filename, list(data))
    return data, source


def _yaml_error(error: yaml.YAMLError, source: ArticleSource) -> FrontMatterSyntaxError:
    """Translate a PyYAML error into a FrontMatterSyntaxError with file coordinates."""
    mark = getattr(error, "problem_mark", None)
    problem = getattr(error, "problem", None) or str(error)

    if mark is None:
        return FrontMatterSyntaxError(
            f"invalid YAML in front matter: {problem}",
            location=SourceLocation(source.filename, 2, 1),
        )

    # Line 1 of the file is the opening delimiter
    line = mark.line + 2
    yaml_lines = source.front_matter.splitlines()
    source_line = yaml_lines[mark.line] if mark.line < len(yaml_lines) else None
    return FrontMatterSyntaxError(
        f"invalid YAML in front matter: {problem}",
        location=SourceLocation(source.filename, line, mark.column + 1),
        source_line=source_line,
    )


# =============================================================================
# Validation
# =============================================================================

def is_empty(value: Any) -> bool:
    """Return True for None, blank strings, and empty collections."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def is_valid_date(value: Any) -> bool:
    """Accept YAML dates and datetimes, or strings in ISO-8601 form."""
    if isinstance(value, (datetime.date, datetime.datetime)):
        return True
    if not isinstance(value, str):
        return False
    text = value.strip()
    # fromisoformat() only reads the 'Z' UTC suffix from Python 3.11 on
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        datetime.datetime.fromisoformat(text)
    except ValueError:
        return False
    return True


def find_key_line(front_matter: str, key: str, first_line: int = 2) -> int:
    """Return the file line on which a top-level key is written, or the first metadata line."""
    prefix = f"{key}:"
    for offset, line in enumerate(front_matter.splitlines()):
        if line.startswith(prefix):
            return first_line + offset
    return first_line


def validate_front_matter(
    mapping: dict[str, Any],
    required_keys: tuple[str, ...] = REQUIRED_KEYS,
    filename: str = "<input>",
    front_matter_text: str = "",
) -> list[Diagnostic]:
    """
    Check a metadata mapping against the article contract.

    Args:
        mapping: Loaded YAML mapping
        required_keys: Keys that must be present and non-empty
        filename: Name for diagnostics
        front_matter_text: Raw YAML, used to point diagnostics at key lines

    Returns:
        List of diagnostics (FM005 to FM010); empty when the metadata is valid
    """
    diagnostics: list[Diagnostic] = []

    def report(code: str, key: str, message: str, hint: Optional[str] = None,
               severity: Severity = Severity.ERROR) -> None:
        line = find_key_line(front_matter_text, key)
        diagnostics.append(Diagnostic(
            code=code,
            severity=severity,
            message=message,
            location=SourceLocation(filename, line, 1),
            hint=hint,
        ))

    for key in required_keys:
        if key not in mapping:
            report("FM005", key, f"missing required front matter key '{key}'",
                   hint=f"add a '{key}:' line to the front matter")
        elif is_empty(mapping[key]):
            report("FM006", key, f"front matter key '{key}' is empty")

    if "author" in mapping and not is_empty(mapping["author"]):
        diagnostics.extend(_validate_authors(mapping["author"], filename, front_matter_text))

    if "date" in mapping and not is_empty(mapping["date"]) and not is_valid_date(mapping["date"]):
        report("FM008", "date", f"invalid date {mapping['date']!r}",
               hint="use ISO-8601, e.g. 2013-11-08 or 2013-11-08 10:00:00")

    if "tags" in mapping and not is_empty(mapping["tags"]):
        tags = mapping["tags"]
        if not isinstance(tags, str):
            if not isinstance(tags, list) or not all(isinstance(t, str) and t.strip() for t in tags):
                report("FM009", "tags", "tags must be a string or a list of non-empty strings")

    return diagnostics


def _validate_authors(authors: Any, filename: str, front_matter_text: str) -> list[Diagnostic]:
    """Validate the 'author' sequence of {name, url} mappings."""
    line = find_key_line(front_matter_text, "author")
    location = SourceLocation(filename, line, 1)

    if not isinstance(authors, list):
        return [Diagnostic(
            code="FM007",
            severity=Severity.ERROR,
            message="author must be a list of entries with 'name' and 'url'",
            location=location,
            hint="write '- name: ...' and '  url: ...' under 'author:'",
        )]

    diagnostics = []
    for index, entry in enumerate(authors, start=1):
        if not isinstance(entry, dict):
            diagnostics.append(Diagnostic(
                "FM007", Severity.ERROR,
                f"author entry {index} must be a mapping with 'name' and 'url'",
                location,
            ))
            continue

        for key in ("name", "url"):
            value = entry.get(key)
            if not isinstance(value, str) or not value.strip():
                diagnostics.append(Diagnostic(
                    "FM007", Severity.ERROR,
                    f"author entry {index} has no '{key}'",
                    location,
                ))

        url = entry.get("url")
        if isinstance(url, str) and url.strip():
            parsed = urlparse(url.strip())
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                diagnostics.append(Diagnostic(
                    "FM010", Severity.WARNING,
                    f"author entry {index} url {url!r} is not an absolute http(s) URL",
                    location,
                ))

    return diagnostics


# =============================================================================
# Rendering
# =============================================================================

def render_article(metadata: dict[str, Any], body: str = "") -> str:
    """
    Produce a markdown file with a YAML front matter block.

    Keys keep their insertion order and unicode is written as-is.

    Args:
        metadata: Front matter mapping
        body: Markdown body

    Returns:
        The complete file text, ending in a newline
    """
    dumped = yaml.safe_dump(
        metadata,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )
    text = f"{OPEN_DELIMITER}\n{dumped}{OPEN_DELIMITER}\n"
    if body:
        text += "\n" + body
        if not body.endswith("\n"):
            text += "\n"
    return text
