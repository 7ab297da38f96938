"""
Markdown Body Scanner
=====================

This module walks an article body line by line and records the structure
the linter needs: code fences, headings, links and reference definitions.
It does not render markdown; it only recognizes enough of CommonMark to
know what is prose and what is code.

Block Rules
-----------
- Fenced code: an opening run of 3+ backticks or tildes, indented at most
  3 spaces. A backtick fence's info string may not contain backticks. The
  closing fence uses the same character, is at least as long as the
  opener, and carries nothing but trailing whitespace.
- Indented code: 4 spaces or a tab after a blank line, outside lists.
- Headings: ATX ('# Title') and setext (a '===' or '---' underline).
- Reference definitions: '[label]: destination "optional title"'.

Nothing inside code blocks or inline `code spans` is treated as a link or
heading, so compiler transcripts and Objective-C samples are left alone.

Inline Links
------------
| Form                 | Kind      |
|----------------------|-----------|
| [text](dest "title") | inline    |
| ![alt](dest)         | image     |
| <https://...>        | autolink  |
| [text][label]        | reference |
| [label][]            | reference |
| [label]              | reference (only when the label is defined) |

The last rule matters for Objective-C articles: a message send such as
[NSString string] in prose looks like a shortcut reference and must not
be reported.

Example Usage
-------------
>>> from articlekit.markdown import scan_markdown
>>> doc = scan_markdown("# Intro\\n\\nSee [the docs](docs.md).\\n", "post.md")
>>> doc.headings[0].slug
'intro'
>>> doc.links[0].target
'docs.md'
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from articlekit.errors import (
    Diagnostic,
    MarkdownSyntaxError,
    Severity,
    SourceLocation,
    UnterminatedFenceError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Patterns
# =============================================================================

FENCE_RE = re.compile(r"^(?P<indent> {0,3})(?P<marker>`{3,}|~{3,})(?P<info>.*)$")
ATX_RE = re.compile(r"^ {0,3}(?P<level>#{1,6})(?:[ \t]+(?P<text>.*?))?[ \t]*$")
ATX_CLOSING_RE = re.compile(r"(?:^|[ \t]+)#+$")
SETEXT_RE = re.compile(r"^ {0,3}(?P<underline>=+|-+)[ \t]*$")
THEMATIC_BREAK_RE = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
HEADER_ID_RE = re.compile(r"[ \t]*\{#(?P<id>[\w-]+)\}$")
LIST_ITEM_RE = re.compile(r"^ {0,3}(?:[-+*]|\d{1,9}[.)])(?:[ \t]|$)")
REF_DEF_RE = re.compile(
    r"^ {0,3}\[(?P<label>[^\]]+)\]:[ \t]*(?P<dest><[^>]*>|\S+)"
    r"(?:[ \t]+(?:\"[^\"]*\"|'[^']*'|\([^)]*\)))?[ \t]*$"
)
AUTOLINK_RE = re.compile(r"<(?P<target>[A-Za-z][A-Za-z0-9.+-]{1,31}:[^\s<>]*)>")
HTML_ANCHOR_RE = re.compile(r"<[A-Za-z][^>]*?\b(?:id|name)\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
INLINE_LINK_TEXT_RE = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
SLUG_STRIP_RE = re.compile(r"[^\w\- ]", re.UNICODE)


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CodeFence:
    """
    A fenced code block.

    Attributes:
        marker: The fence character, '`' or '~'
        length: Length of the opening run
        info: Info string after the opening fence (e.g. 'objc')
        start_line: File line of the opening fence
        end_line: File line of the closing fence, None when unterminated
        indent: Container indent removed before matching, e.g. the
            content indent of a list item the fence is nested in
    """
    marker: str
    length: int
    info: str
    start_line: int
    end_line: Optional[int] = None
    indent: int = 0

    @property
    def terminated(self) -> bool:
        return self.end_line is not None

    @property
    def fence(self) -> str:
        return self.marker * self.length

    def closes_with(self, line: str) -> bool:
        """Return True if line is a valid closing fence for this block."""
        stripped = line.rstrip()
        if self.indent:
            leading = len(stripped) - len(stripped.lstrip(" "))
            stripped = stripped[min(self.indent, leading):]
        indent = len(stripped) - len(stripped.lstrip(" "))
        if indent > 3:
            return False
        run = stripped.lstrip(" ")
        return len(run) >= self.length and run == self.marker * len(run)


@dataclass(frozen=True)
class Heading:
    level: int
    text: str
    slug: str
    line: int


@dataclass(frozen=True)
class Link:
    """
    A link found in prose.

    Attributes:
        kind: 'inline', 'image', 'autolink' or 'reference'
        text: Link text or image alt text
        target: Destination; for references, the definition's destination
            once resolved, else empty
        line: File line
        column: 1-indexed column of the opening bracket (or '!' / '<')
        label: Normalized reference label (references only)
    """
    kind: str
    text: str
    target: str
    line: int
    column: int
    label: Optional[str] = None


@dataclass(frozen=True)
class ReferenceDefinition:
    label: str
    target: str
    line: int


@dataclass
class MarkdownDocument:
    """
    Everything the scanner learned about a markdown body.

    Attributes:
        filename: Name used in diagnostics
        headings: Headings in document order
        links: Links in document order
        definitions: Reference definitions keyed by normalized label
        duplicate_definitions: Later definitions that repeat a label
        fences: All fenced code blocks
        html_anchors: Explicit id/name attributes in inline HTML
        problems: Syntax diagnostics found while scanning
        lines: Body lines, used to show source context
        first_line: File line of the first body line
    """
    filename: str
    headings: list[Heading] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    definitions: dict[str, ReferenceDefinition] = field(default_factory=dict)
    duplicate_definitions: list[ReferenceDefinition] = field(default_factory=list)
    fences: list[CodeFence] = field(default_factory=list)
    html_anchors: set[str] = field(default_factory=set)
    problems: list[Diagnostic] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)
    first_line: int = 1

    @property
    def anchors(self) -> set[str]:
        """All fragment identifiers a '#anchor' link may point at."""
        return {h.slug for h in self.headings} | self.html_anchors

    def unterminated_fences(self) -> list[CodeFence]:
        return [f for f in self.fences if not f.terminated]

    def used_labels(self) -> set[str]:
        return {link.label for link in self.links if link.label}

    def source_line(self, line: int) -> Optional[str]:
        """Return the text of a file line, if it lies in the body."""
        index = line - self.first_line
        if 0 <= index < len(self.lines):
            return self.lines[index]
        return None


# =============================================================================
# Helpers
# =============================================================================

def normalize_label(label: str) -> str:
    """Compare labels case-insensitively with whitespace runs collapsed."""
    return " ".join(label.split()).casefold()


def slugify(text: str) -> str:
    """
    Turn heading text into a GitHub-style anchor.

    Inline link markup is reduced to its text, code backticks and emphasis
    are dropped, punctuation other than '-' and '_' is removed, and spaces
    become dashes.
    """
    text = INLINE_LINK_TEXT_RE.sub(r"\1", text)
    text = text.replace("`", "").replace("*", "")
    text = SLUG_STRIP_RE.sub("", text.strip().lower())
    return text.replace(" ", "-")


def find_closing(text: str, start: int, open_char: str, close_char: str) -> int:
    """
    Find the index of the bracket matching the one at text[start].

    Returns:
        Index of the matching close_char, or -1 if unbalanced
    """
    depth = 0
    for index in range(start, len(text)):
        char = text[index]
        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return index
    return -1


def mask_code_spans(line: str) -> str:
    """
    Blank out inline code spans and backslash escapes, keeping columns.

    A run of N backticks opens a span that the next run of exactly N
    backticks closes. Unmatched runs are literal text.
    """
    chars = list(line)

    index = 0
    while index < len(chars):
        if chars[index] == "\\" and index + 1 < len(chars):
            chars[index] = chars[index + 1] = " "
            index += 2
            continue
        if chars[index] != "`":
            index += 1
            continue

        run_end = index
        while run_end < len(chars) and chars[run_end] == "`":
            run_end += 1
        run = run_end - index

        close = _find_backtick_run(chars, run_end, run)
        if close == -1:
            index = run_end
            continue

        for blank in range(index, close + run):
            chars[blank] = " "
        index = close + run

    return "".join(chars)


def _find_backtick_run(chars: list[str], start: int, length: int) -> int:
    index = start
    while index < len(chars):
        if chars[index] != "`":
            index += 1
            continue
        run_end = index
        while run_end < len(chars) and chars[run_end] == "`":
            run_end += 1
        if run_end - index == length:
            return index
        index = run_end
    return -1


# =============================================================================
# Scanner
# =============================================================================

class MarkdownScanner:
    """
    Line-oriented scanner for markdown bodies.

    Usage:
        scanner = MarkdownScanner(body, "post.md", first_line=9)
        document = scanner.scan()

    Attributes:
        source: The markdown body
        filename: Name of the file (for diagnostics)
        first_line: File line number of the first body line
    """

    def __init__(self, source: str, filename: str = "<input>", first_line: int = 1):
        self.source = source
        self.filename = filename
        self.first_line = first_line

        self._doc = MarkdownDocument(filename=filename, first_line=first_line)
        self._slug_counts: dict[str, int] = {}
        self._shortcuts: list[Link] = []

    def scan(self) -> MarkdownDocument:
        """
        Scan the whole body.

        Returns:
            MarkdownDocument with structure and syntax problems
        """
        doc = self._doc
        doc.lines = self.source.splitlines()

        fence: Optional[CodeFence] = None
        paragraph: Optional[list[str]] = None
        paragraph_start = 0
        prev_blank = True
        in_indented_code = False
        in_list = False
        list_indent = 0

        for index, line in enumerate(doc.lines):
            lineno = self.first_line + index

            if fence is not None:
                if fence.closes_with(line):
                    fence.end_line = lineno
                    fence = None
                prev_blank = False
                continue

            # Fences nested in a list item are indented by the item's content
            container = list_indent if in_list and line.startswith(" " * list_indent) else 0
            match = FENCE_RE.match(line[container:])
            if match and not (match["marker"][0] == "`" and "`" in match["info"]):
                fence = CodeFence(
                    marker=match["marker"][0],
                    length=len(match["marker"]),
                    info=match["info"].strip(),
                    start_line=lineno,
                    indent=container,
                )
                doc.fences.append(fence)
                paragraph = None
                in_indented_code = False
                continue

            if not line.strip():
                prev_blank = True
                in_indented_code = False
                paragraph = None
                continue

            indented = line.startswith("    ") or line.startswith("\t")
            if indented and not in_list and (in_indented_code or (prev_blank and paragraph is None)):
                in_indented_code = True
                prev_blank = False
                continue
            in_indented_code = False

            item = LIST_ITEM_RE.match(line)
            if item:
                in_list = True
                list_indent = len(line) - len(line[item.end():].lstrip(" "))
            elif prev_blank and not indented:
                in_list = False
            prev_blank = False

            if paragraph is not None:
                setext = SETEXT_RE.match(line)
                if setext:
                    level = 1 if setext["underline"][0] == "=" else 2
                    self._add_heading(level, " ".join(paragraph), paragraph_start)
                    paragraph = None
                    continue

            if THEMATIC_BREAK_RE.match(line):
                paragraph = None
                continue

            if paragraph is None:
                definition = REF_DEF_RE.match(line)
                if definition:
                    self._add_definition(definition, lineno)
                    continue

            atx = ATX_RE.match(line)
            if atx:
                text = ATX_CLOSING_RE.sub("", atx["text"] or "").strip()
                self._add_heading(len(atx["level"]), text, lineno)
                self._scan_inline(line, lineno)
                paragraph = None
                continue

            if paragraph is None:
                paragraph = []
                paragraph_start = lineno
            paragraph.append(line.strip())
            self._scan_inline(line, lineno)

        if fence is not None:
            self._report_unterminated(fence)

        self._resolve_shortcuts()
        logger.debug(
            "Scanned %s: %d headings, %d links, %d fences",
            self.filename, len(doc.headings), len(doc.links), len(doc.fences),
        )
        return doc

    # =========================================================================
    # Block Elements
    # =========================================================================

    def _add_heading(self, level: int, text: str, lineno: int) -> None:
        # kramdown-style explicit id: '## Linking {#linker}'
        explicit = HEADER_ID_RE.search(text)
        if explicit:
            text = text[:explicit.start()]
            self._doc.headings.append(Heading(level, text, explicit["id"], lineno))
            return

        base = slugify(text)
        count = self._slug_counts.get(base, 0)
        self._slug_counts[base] = count + 1
        slug = base if count == 0 else f"{base}-{count}"
        self._doc.headings.append(Heading(level, text, slug, lineno))

    def _add_definition(self, match: re.Match, lineno: int) -> None:
        label = normalize_label(match["label"])
        target = match["dest"]
        if target.startswith("<") and target.endswith(">"):
            target = target[1:-1]

        definition = ReferenceDefinition(label, target, lineno)
        if label in self._doc.definitions:
            self._doc.duplicate_definitions.append(definition)
        else:
            self._doc.definitions[label] = definition

    def _report_unterminated(self, fence: CodeFence) -> None:
        error = UnterminatedFenceError(
            fence.fence,
            location=SourceLocation(self.filename, fence.start_line, 1),
            source_line=self._doc.source_line(fence.start_line),
        )
        self._doc.problems.append(Diagnostic.from_error(error, self.filename))

    # =========================================================================
    # Inline Elements
    # =========================================================================

    def _scan_inline(self, line: str, lineno: int) -> None:
        masked = mask_code_spans(line)

        for match in HTML_ANCHOR_RE.finditer(masked):
            self._doc.html_anchors.add(match.group(1))

        for match in AUTOLINK_RE.finditer(masked):
            self._doc.links.append(Link(
                kind="autolink",
                text=match["target"],
                target=match["target"],
                line=lineno,
                column=match.start() + 1,
            ))
        masked = AUTOLINK_RE.sub(lambda m: " " * len(m.group(0)), masked)

        self._scan_brackets(masked, line, lineno, 0, len(masked))

    def _scan_brackets(self, text: str, original: str, lineno: int, start: int, end: int) -> None:
        """Scan text[start:end] for bracketed links, recursing into link text."""
        index = start
        while index < end:
            if text[index] != "[":
                index += 1
                continue

            close = find_closing(text[:end], index, "[", "]")
            if close == -1:
                index += 1
                continue

            is_image = index > 0 and text[index - 1] == "!"
            column = index if is_image else index + 1
            label_text = original[index + 1:close]
            after = close + 1

            if after < end and text[after] == "(":
                next_index = self._scan_destination(
                    text, original, lineno, column, label_text, close, end, is_image,
                )
                # Link text may hold an image, as in [![badge](b.svg)](page)
                self._scan_brackets(text, original, lineno, index + 1, close)
                index = next_index
                continue

            if after < end and text[after] == "[":
                label_close = text.find("]", after, end)
                if label_close != -1:
                    label = original[after + 1:label_close]
                    if "[" not in label:
                        self._doc.links.append(Link(
                            kind="reference",
                            text=label_text,
                            target="",
                            line=lineno,
                            column=column,
                            label=normalize_label(label or label_text),
                        ))
                        self._scan_brackets(text, original, lineno, index + 1, close)
                        index = label_close + 1
                        continue

            if label_text.strip():
                self._shortcuts.append(Link(
                    kind="reference",
                    text=label_text,
                    target="",
                    line=lineno,
                    column=column,
                    label=normalize_label(label_text),
                ))
            index += 1

    def _scan_destination(
        self,
        text: str,
        original: str,
        lineno: int,
        column: int,
        label_text: str,
        close: int,
        end: int,
        is_image: bool,
    ) -> int:
        """
        Parse '(destination "title")' after a ']' at text[close].

        Returns:
            Index just past the link
        """
        open_paren = close + 1
        close_paren = find_closing(text[:end], open_paren, "(", ")")
        if close_paren == -1:
            self._malformed(
                "unclosed link destination", lineno, column, original,
                hint="add the closing ')' to the link",
            )
            return open_paren + 1

        inner = original[open_paren + 1:close_paren].strip()
        if inner.startswith("<"):
            target = inner[1:inner.find(">")] if ">" in inner else inner[1:]
        else:
            target = inner.split()[0] if inner else ""

        if not target:
            self._malformed(
                "empty link destination", lineno, column, original,
                hint="put a URL or path between the parentheses",
            )
        else:
            self._doc.links.append(Link(
                kind="image" if is_image else "inline",
                text=label_text,
                target=target,
                line=lineno,
                column=column,
            ))
        return close_paren + 1

    def _malformed(self, message: str, lineno: int, column: int, line: str,
                   hint: Optional[str] = None) -> None:
        error = MarkdownSyntaxError(
            message,
            location=SourceLocation(self.filename, lineno, column),
            hint=hint,
            source_line=line,
        )
        self._doc.problems.append(Diagnostic.from_error(error, self.filename))

    def _resolve_shortcuts(self) -> None:
        """Keep shortcut references whose label is defined, then fill in targets."""
        doc = self._doc
        links = doc.links + [s for s in self._shortcuts if s.label in doc.definitions]

        resolved = []
        for link in links:
            if link.kind == "reference" and link.label in doc.definitions:
                link = Link(
                    kind=link.kind,
                    text=link.text,
                    target=doc.definitions[link.label].target,
                    line=link.line,
                    column=link.column,
                    label=link.label,
                )
            resolved.append(link)

        doc.links = sorted(resolved, key=lambda l: (l.line, l.column))


def scan_markdown(body: str, filename: str = "<input>", first_line: int = 1) -> MarkdownDocument:
    """
    Scan a markdown body.

    Args:
        body: Markdown text (without front matter)
        filename: Name for diagnostics
        first_line: File line on which the body starts

    Returns:
        MarkdownDocument
    """
    return MarkdownScanner(body, filename, first_line).scan()
