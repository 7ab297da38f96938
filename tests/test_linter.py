# =============================================================================
# test_linter.py - Article Linter Tests
# =============================================================================
# Tests for ArticleLinter: every rule, configuration effects and results.
#
# Test coverage includes:
#   - Clean articles produce no diagnostics
#   - Front matter rules (FM001 - FM010)
#   - Markdown rules (MD001 - MD005)
#   - Link rules (LNK001, LNK002) with a site root and relative paths
#   - Disabled rules, max_errors, --no-links style configuration
#   - Collecting files from directories
# =============================================================================

from pathlib import Path

import pytest

from articlekit.config import LintConfig
from articlekit.errors import Severity
from articlekit.linter import ArticleLinter, LintResult, collect_markdown_files


def lint(text: str, **config) -> LintResult:
    """Helper to lint in-memory text with an optional configuration."""
    return ArticleLinter(LintConfig(**config)).lint_source(text, "post.md")


# =============================================================================
# Clean Articles
# =============================================================================

class TestCleanArticle:
    """Test that a well-formed article passes."""

    def test_valid_article(self, front_matter):
        body = (
            "\nThe Compiler\n============\n\n"
            "Clang turns [source code][src] into an AST.\n\n"
            "```objc\n[NSString stringWithFormat:@\"%d\", 42];\n```\n\n"
            "See [the compiler section](#the-compiler) and <https://llvm.org/>.\n\n"
            "[src]: https://clang.llvm.org/\n"
        )
        result = lint(front_matter + body)
        assert result.diagnostics == []
        assert result.ok
        assert result.summary() == "post.md: 0 errors, 0 warnings"

    def test_objc_message_send_is_not_a_reference(self, front_matter):
        result = lint(front_matter + "\nCall [self setNeedsDisplay] when done.\n")
        assert result.diagnostics == []


# =============================================================================
# Front Matter Rules
# =============================================================================

class TestFrontMatterRules:
    """Test front matter diagnostics through the linter."""

    def test_missing_front_matter(self):
        result = lint("# Title\n\nText\n")
        assert result.codes() == ["FM001"]

    def test_missing_front_matter_still_scans_body(self):
        result = lint("# Title\n\n```\nnever closed\n")
        assert result.codes() == ["FM001", "MD001"]
        assert result.diagnostics[1].location.line == 3

    def test_unterminated_front_matter(self):
        result = lint("---\ntitle: x\n")
        assert result.codes() == ["FM002"]

    def test_invalid_yaml_still_checks_body(self):
        text = "---\ntitle: [oops\n---\n\n```\n"
        result = lint(text)
        assert result.codes() == ["FM003", "MD001"]
        assert result.diagnostics[1].location.line == 5

    def test_not_a_mapping(self):
        result = lint("---\n- a\n---\n")
        assert result.codes() == ["FM004"]

    def test_missing_key_reported_per_key(self):
        text = "---\ntitle: Only a title\n---\n"
        result = lint(text)
        assert result.codes() == ["FM005"] * 4
        assert {d.message for d in result.diagnostics} == {
            "missing required front matter key 'category'",
            "missing required front matter key 'date'",
            "missing required front matter key 'tags'",
            "missing required front matter key 'author'",
        }

    def test_empty_key_points_at_its_line(self, front_matter):
        text = front_matter.replace('title:  "The Build Process"', "title:")
        result = lint(text)
        assert result.codes() == ["FM006"]
        assert result.diagnostics[0].location.line == 2

    def test_author_url_warning_is_not_an_error(self, front_matter):
        text = front_matter.replace("https://twitter.com/danielboedewadt", "twitter.com/danielboedewadt")
        result = lint(text)
        assert result.codes() == ["FM010"]
        assert result.ok
        assert result.warnings[0].severity is Severity.WARNING

    def test_custom_required_keys(self):
        result = lint("---\ntitle: x\n---\n", required_keys=("title",))
        assert result.ok


# =============================================================================
# Markdown Rules
# =============================================================================

class TestMarkdownRules:
    """Test body diagnostics through the linter."""

    def test_unterminated_fence_line_is_file_line(self, front_matter):
        result = lint(front_matter + "\nText\n\n```objc\nint x;\n")
        assert result.codes() == ["MD001"]
        # front matter is 9 lines, body starts on line 10
        assert result.diagnostics[0].location.line == 13

    def test_malformed_link(self, front_matter):
        result = lint(front_matter + "\n[docs](docs.md\n")
        assert result.codes() == ["MD002"]

    def test_undefined_reference(self, front_matter):
        result = lint(front_matter + "\nRead [the manual][clang-docs].\n")
        assert result.codes() == ["MD003"]
        diagnostic = result.diagnostics[0]
        assert "clang-docs" in diagnostic.message
        assert diagnostic.location.column == 6
        assert diagnostic.source_line == "Read [the manual][clang-docs]."

    def test_duplicate_definition_warning(self, front_matter):
        body = "\n[a][x]\n\n[x]: https://one.example\n[x]: https://two.example\n"
        result = lint(front_matter + body)
        assert result.codes() == ["MD004"]
        assert result.ok
        assert "first defined on line 13" in result.diagnostics[0].hint

    def test_unused_definition_warning(self, front_matter):
        result = lint(front_matter + "\n[unused]: https://example.com\n")
        assert result.codes() == ["MD005"]
        assert result.ok


# =============================================================================
# Link Rules
# =============================================================================

class TestLinkRules:
    """Test link target checks on disk."""

    def test_anchor_in_same_document(self, front_matter):
        body = "\n## Linking\n\nSee [above](#linking) and [nowhere](#linker).\n"
        result = lint(front_matter + body)
        assert result.codes() == ["LNK002"]
        assert result.diagnostics[0].hint == "did you mean '#linking'?"

    def test_query_only_link_checks_own_headings(self, front_matter):
        body = "\n## Section\n\n[a](?q=1#section) [b](?q=1#nope)\n"
        result = lint(front_matter + body)
        assert result.codes() == ["LNK002"]
        assert "'#nope'" in result.diagnostics[0].message

    def test_anchor_check_can_be_disabled(self, front_matter):
        result = lint(front_matter + "\n[x](#nowhere)\n", check_anchors=False)
        assert result.ok

    def test_site_link(self, site, write_article):
        path = write_article("posts/build.md", "[issue](/issues/6-build-tools/)\n[gone](/issues/99/)\n")
        result = ArticleLinter(LintConfig(site_root=site)).lint_file(path)
        assert result.codes() == ["LNK001"]
        diagnostic = result.diagnostics[0]
        assert "/issues/99/" in diagnostic.message
        assert diagnostic.hint.startswith("tried: ")

    def test_site_link_skipped_without_site_root(self, write_article):
        path = write_article("posts/build.md", "[issue](/issues/99/)\n")
        assert ArticleLinter().lint_file(path).ok

    def test_relative_link(self, write_article):
        write_article("posts/compiler.md", "")
        path = write_article("posts/build.md", "[ok](compiler.md)\n[ok too](compiler)\n[bad](linker.md)\n")
        result = ArticleLinter().lint_file(path)
        assert result.codes() == ["LNK001"]
        assert "linker.md" in result.diagnostics[0].message

    def test_relative_links_unchecked_for_in_memory_text(self, front_matter):
        assert lint(front_matter + "\n[x](missing.md)\n").ok

    def test_fragment_into_other_article(self, site, write_article):
        body = "[a](/issues/6-build-tools/#linking)\n[b](/issues/6-build-tools/#compilng)\n"
        path = write_article("posts/build.md", body)
        result = ArticleLinter(LintConfig(site_root=site)).lint_file(path)
        assert result.codes() == ["LNK002"]
        assert "'#compiling'" in result.diagnostics[0].hint

    def test_fragment_into_unreadable_article(self, write_article, tmp_path):
        write_article("posts/a.md", "[x](other.md#head)\n")
        (tmp_path / "posts" / "other.md").write_bytes(b"# Head\n\xff\xfe bad\n")
        result = ArticleLinter().lint_file(tmp_path / "posts" / "a.md")
        assert result.ok

    def test_link_inside_list_fence_not_checked(self, write_article):
        body = "1. Step:\n\n    ```objc\n    x = a[i](zz);\n    ```\n"
        path = write_article("posts/build.md", body)
        assert ArticleLinter().lint_file(path).ok

    def test_fragment_into_html_not_checked(self, site, write_article):
        path = write_article("posts/build.md", "[a](/about.html#whatever)\n")
        assert ArticleLinter(LintConfig(site_root=site)).lint_file(path).ok

    def test_external_links_never_checked(self, write_article):
        path = write_article("posts/build.md", "[a](https://does-not-exist.invalid/x.md)\n")
        assert ArticleLinter().lint_file(path).ok

    def test_reference_link_target_checked(self, write_article):
        path = write_article("posts/build.md", "[a][ref]\n\n[ref]: missing.md\n")
        result = ArticleLinter().lint_file(path)
        assert result.codes() == ["LNK001"]

    def test_image_checked(self, write_article):
        path = write_article("posts/build.md", "![ast](images/ast.png)\n")
        result = ArticleLinter().lint_file(path)
        assert result.codes() == ["LNK001"]

    def test_check_links_disabled(self, write_article):
        path = write_article("posts/build.md", "[bad](linker.md)\n")
        assert ArticleLinter(LintConfig(check_links=False)).lint_file(path).ok


# =============================================================================
# Configuration Effects and Results
# =============================================================================

class TestLinterConfiguration:
    """Test disabled rules and error limits."""

    def test_disabled_rule(self, front_matter):
        result = lint(front_matter + "\n[unused]: https://example.com\n",
                      disabled_rules=frozenset({"MD005"}))
        assert result.diagnostics == []

    def test_max_errors_truncates(self, front_matter):
        body = "\n" + "".join(f"[x][missing{i}]\n" for i in range(10))
        result = lint(front_matter + body, max_errors=3)
        assert len(result.errors) == 3
        assert result.truncated
        assert "too many errors" in result.report()

    def test_max_errors_zero_is_unlimited(self, front_matter):
        body = "\n" + "".join(f"[x][missing{i}]\n" for i in range(150))
        result = lint(front_matter + body, max_errors=0)
        assert len(result.errors) == 150
        assert not result.truncated

    def test_diagnostics_sorted_by_line(self, front_matter):
        text = front_matter.replace("tags: article\n", "") + "\n```\n[b][two]\n"
        result = lint(text)
        assert result.codes() == ["FM005", "MD001"]
        lines = [d.location.line for d in result.diagnostics]
        assert lines == sorted(lines)

    def test_to_dict(self, front_matter):
        result = lint(front_matter + "\n[x][nope]\n")
        data = result.to_dict()
        assert data["file"] == "post.md"
        assert data["errors"] == 1
        assert data["warnings"] == 0
        assert data["diagnostics"][0]["code"] == "MD003"
        assert data["diagnostics"][0]["severity"] == "error"
        assert data["diagnostics"][0]["line"] == 11

    def test_lint_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ArticleLinter().lint_file(tmp_path / "missing.md")


class TestCollectMarkdownFiles:
    """Test expanding paths into markdown files."""

    def test_directory_is_searched_recursively(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "one.md").write_text("", encoding="utf-8")
        (tmp_path / "a" / "two.markdown").write_text("", encoding="utf-8")
        (tmp_path / "a" / "notes.txt").write_text("", encoding="utf-8")
        (tmp_path / "three.md").write_text("", encoding="utf-8")

        files = collect_markdown_files([tmp_path])
        assert [f.name for f in files] == ["one.md", "two.markdown", "three.md"]

    def test_explicit_file_kept_and_deduplicated(self, tmp_path):
        page = tmp_path / "page.txt"
        page.write_text("", encoding="utf-8")
        assert collect_markdown_files([page, page]) == [page]

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            collect_markdown_files([tmp_path / "nope"])

    def test_lint_paths(self, write_article, tmp_path):
        write_article("posts/a.md", "Fine.\n")
        write_article("posts/b.md", "```\n")
        results = ArticleLinter().lint_paths([tmp_path / "posts"])
        assert [Path(r.filename).name for r in results] == ["a.md", "b.md"]
        assert [r.ok for r in results] == [True, False]
