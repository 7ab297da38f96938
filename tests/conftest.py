"""
articlekit - Test Configuration
===============================

Shared fixtures for the articlekit test suite.

It provides:
- A front matter block that passes validation
- A factory that writes articles into a temporary directory
- A small published site with articles, an index page and images
"""

from pathlib import Path

import pytest


FRONT_MATTER = """---
title:  "The Build Process"
category: "6"
date: "2013-11-08 10:00:00"
tags: article
author:
  - name: Daniel Eggert
    url: https://twitter.com/danielboedewadt
---
"""


# ═══════════════════════════════════════════════════════════════════════════════
# ARTICLE FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def front_matter() -> str:
    """Fixture: A valid front matter block, ending with its closing '---' line."""
    return FRONT_MATTER


@pytest.fixture
def write_article(tmp_path: Path):
    """
    Fixture: Write an article under tmp_path.

    Usage:
        path = write_article("posts/a.md", "Body text\\n")
        path = write_article("raw.md", "no front matter", front_matter=False)
    """
    def _write(relative: str, body: str = "", front_matter: bool = True) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        text = (FRONT_MATTER + "\n" + body) if front_matter else body
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """
    Fixture: A small site tree.

        site/
            index.md
            images/ast.png
            issues/6-build-tools/index.md   (headings: Compiling, Linking)
            about.html
    """
    root = tmp_path / "site"
    (root / "images").mkdir(parents=True)
    (root / "images" / "ast.png").write_bytes(b"\x89PNG")
    (root / "issues" / "6-build-tools").mkdir(parents=True)
    (root / "issues" / "6-build-tools" / "index.md").write_text(
        FRONT_MATTER + "\n## Compiling\n\nText.\n\n## Linking\n\nMore text.\n",
        encoding="utf-8",
    )
    (root / "index.md").write_text("# Home\n", encoding="utf-8")
    (root / "about.html").write_text('<h1 id="about">About</h1>\n', encoding="utf-8")
    return root
