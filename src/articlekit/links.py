"""
Link Resolution
===============

Decides whether a link target in an article points at something that
exists. Only local targets are checked; external URLs are never fetched.

Target Classes
--------------
| Class    | Example                         | Resolved against      |
|----------|---------------------------------|-----------------------|
| external | https://clang.llvm.org/         | not checked           |
| anchor   | #the-preprocessor, ?v=2#parsing | headings of this file |
| site     | /issues/6-build-tools/          | the site root         |
| relative | ../compiler/index.md#parsing    | the article directory |

A local target exists when one of these paths exists:

    <path>
    <path><ext>            for each configured extension
    <path>/<index><ext>    for each index name and extension
    <path>/<index>         when <path> is a directory

Site generators publish 'post.md' as '/post/' or '/post.html', which is
why the extension and index candidates are tried.
"""

import logging
import re
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

from articlekit.errors import FrontMatterError
from articlekit.frontmatter import split_front_matter
from articlekit.markdown import scan_markdown

logger = logging.getLogger(__name__)

SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9.+-]*:")

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md", ".markdown", ".html")
DEFAULT_INDEX_NAMES: tuple[str, ...] = ("index",)
MARKDOWN_SUFFIXES = (".md", ".markdown")


class LinkKind:
    EXTERNAL = "external"
    ANCHOR = "anchor"
    SITE = "site"
    RELATIVE = "relative"


def classify(target: str) -> str:
    """Return the LinkKind of a link target."""
    if target.startswith("//") or SCHEME_RE.match(target):
        return LinkKind.EXTERNAL
    # No path part: "#sec" or "?page=2#sec" points into this document
    if target.startswith(("#", "?")):
        return LinkKind.ANCHOR
    if target.startswith("/"):
        return LinkKind.SITE
    return LinkKind.RELATIVE


def split_target(target: str) -> tuple[str, str]:
    """
    Split a local target into its decoded path and fragment.

    Query strings are dropped.

    >>> split_target("../build%20process/?x=1#linking")
    ('../build process/', 'linking')
    """
    parts = urlsplit(target)
    return unquote(parts.path), unquote(parts.fragment)


class LinkResolver:
    """
    Resolves local link targets to filesystem paths.

    Attributes:
        site_root: Directory that site-absolute links are relative to, or None
        extensions: Suffixes tried when the bare path does not exist
        index_names: Directory index file stems
    """

    def __init__(
        self,
        site_root: Optional[Path] = None,
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
        index_names: tuple[str, ...] = DEFAULT_INDEX_NAMES,
    ):
        self.site_root = Path(site_root).resolve() if site_root else None
        self.extensions = tuple(extensions)
        self.index_names = tuple(index_names)
        self._anchor_cache: dict[Path, Optional[frozenset[str]]] = {}

    def candidates(self, path: Path) -> list[Path]:
        """Return every path that would satisfy a link to `path`, in search order."""
        result = [path]
        result.extend(path.with_name(path.name + ext) for ext in self.extensions if path.name)
        for name in self.index_names:
            result.extend(path / f"{name}{ext}" for ext in self.extensions)
        return result

    def base_path(self, target: str, document_path: Optional[Path]) -> Optional[Path]:
        """
        Return the unresolved filesystem path a local target refers to.

        Returns None when the target cannot be checked: site-absolute links
        without a site root, or relative links from an in-memory document.
        """
        path, _ = split_target(target)
        kind = classify(target)

        if kind == LinkKind.SITE:
            if self.site_root is None:
                return None
            return self.site_root / path.lstrip("/")

        if kind == LinkKind.RELATIVE:
            if document_path is None:
                return None
            return Path(document_path).parent / path

        return None

    def resolve(self, target: str, document_path: Optional[Path] = None) -> Optional[Path]:
        """
        Resolve a site or relative target to an existing path.

        Args:
            target: Link destination as written
            document_path: Path of the article containing the link

        Returns:
            The first existing candidate path, or None
        """
        base = self.base_path(target, document_path)
        if base is None:
            return None

        for candidate in self.candidates(base):
            if candidate.is_file():
                return candidate
            if candidate == base and candidate.is_dir():
                index = self._directory_index(candidate)
                return index or candidate

        logger.debug("No candidate exists for %s (base %s)", target, base)
        return None

    def _directory_index(self, directory: Path) -> Optional[Path]:
        for name in self.index_names:
            for ext in self.extensions:
                candidate = directory / f"{name}{ext}"
                if candidate.is_file():
                    return candidate
        return None

    def is_checkable(self, target: str, document_path: Optional[Path]) -> bool:
        """Return True if the target is local and can be looked up on disk."""
        return self.base_path(target, document_path) is not None

    def anchors_for(self, path: Path) -> Optional[frozenset[str]]:
        """
        Return the heading anchors of another markdown file.

        Returns None for files that are not markdown, so that fragments into
        HTML or other assets are not checked, and for files that cannot be
        read as UTF-8. That file is reported when it is linted itself.
        Results are cached per path.
        """
        path = Path(path).resolve()
        if path.suffix.lower() not in MARKDOWN_SUFFIXES:
            return None

        if path not in self._anchor_cache:
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Cannot read %s for anchors: %s", path, e)
                self._anchor_cache[path] = None
                return None
            body, first_line = _strip_front_matter(text)
            document = scan_markdown(body, str(path), first_line)
            self._anchor_cache[path] = frozenset(document.anchors)
        return self._anchor_cache[path]


def _strip_front_matter(text: str) -> tuple[str, int]:
    """Return (body, first body line); files without front matter are all body."""
    try:
        source = split_front_matter(text)
    except FrontMatterError:
        return text, 1
    return source.body, source.body_line
