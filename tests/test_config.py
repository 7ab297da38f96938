# =============================================================================
# test_config.py - Linter Configuration Tests
# =============================================================================
# Tests for LintConfig defaults, YAML files, environment variables and the
# combined load_config() lookup.
# =============================================================================

from pathlib import Path

import pytest

from articlekit.config import CONFIG_FILENAME, LintConfig, load_config
from articlekit.errors import ConfigError
from articlekit.frontmatter import REQUIRED_KEYS


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of these tests."""
    for name in ("ARTICLEKIT_SITE_ROOT", "ARTICLEKIT_MAX_ERRORS", "ARTICLEKIT_DISABLE"):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """Test the default configuration."""

    def test_defaults(self):
        config = LintConfig()
        assert config.required_keys == REQUIRED_KEYS
        assert config.site_root is None
        assert config.check_links
        assert config.check_anchors
        assert config.max_errors == 100
        assert config.is_enabled("MD005")


class TestFromMapping:
    """Test building configuration from a mapping."""

    def test_all_keys(self, tmp_path):
        config = LintConfig.from_mapping({
            "site_root": "site",
            "required_keys": ["title", "date"],
            "extensions": [".md"],
            "index_names": ["index", "README"],
            "check_links": False,
            "check_anchors": False,
            "disabled_rules": ["md005", "LNK002"],
            "max_errors": 5,
        }, base_dir=tmp_path)

        assert config.site_root == tmp_path / "site"
        assert config.required_keys == ("title", "date")
        assert config.extensions == (".md",)
        assert config.index_names == ("index", "README")
        assert not config.check_links
        assert not config.check_anchors
        assert config.disabled_rules == {"MD005", "LNK002"}
        assert not config.is_enabled("MD005")
        assert config.max_errors == 5

    def test_absolute_site_root_kept(self, tmp_path):
        config = LintConfig.from_mapping({"site_root": str(tmp_path)}, base_dir=Path("/elsewhere"))
        assert config.site_root == tmp_path

    def test_single_string_becomes_list(self):
        config = LintConfig.from_mapping({"disabled_rules": "MD004"})
        assert config.disabled_rules == {"MD004"}

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="unknown configuration keys: colour"):
            LintConfig.from_mapping({"colour": "red"})

    @pytest.mark.parametrize("data", [
        {"check_links": "yes"},
        {"max_errors": "ten"},
        {"max_errors": True},
        {"extensions": [".md", 3]},
        {"site_root": 42},
    ])
    def test_wrong_types(self, data):
        with pytest.raises(ConfigError):
            LintConfig.from_mapping(data)


class TestFromFile:
    """Test loading YAML configuration files."""

    def test_from_file(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("site_root: public\nmax_errors: 7\n", encoding="utf-8")
        config = LintConfig.from_file(path)
        assert config.site_root == tmp_path / "public"
        assert config.max_errors == 7

    def test_empty_file(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("", encoding="utf-8")
        assert LintConfig.from_file(path) == LintConfig()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("disabled_rules: [MD005\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="invalid YAML"):
            LintConfig.from_file(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("- MD005\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            LintConfig.from_file(path)


class TestFromEnv:
    """Test environment variable overrides."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ARTICLEKIT_SITE_ROOT", "/srv/site")
        monkeypatch.setenv("ARTICLEKIT_MAX_ERRORS", "20")
        monkeypatch.setenv("ARTICLEKIT_DISABLE", "md004, MD005,")
        config = LintConfig.from_env()
        assert config.site_root == Path("/srv/site")
        assert config.max_errors == 20
        assert config.disabled_rules == {"MD004", "MD005"}

    def test_invalid_max_errors_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv("ARTICLEKIT_MAX_ERRORS", "lots")
        config = LintConfig.from_env()
        assert config.max_errors == 100
        assert "ARTICLEKIT_MAX_ERRORS" in caplog.text

    def test_env_disable_adds_to_file_rules(self, monkeypatch):
        monkeypatch.setenv("ARTICLEKIT_DISABLE", "MD004")
        config = LintConfig(disabled_rules=frozenset({"MD005"})).merged_env()
        assert config.disabled_rules == {"MD004", "MD005"}


class TestLoadConfig:
    """Test the combined configuration lookup."""

    def test_no_file(self, tmp_path):
        assert load_config(cwd=tmp_path) == LintConfig()

    def test_file_in_working_directory(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("max_errors: 3\n", encoding="utf-8")
        assert load_config(cwd=tmp_path).max_errors == 3

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "lint.yaml"
        path.write_text("check_anchors: false\n", encoding="utf-8")
        assert not load_config(path).check_anchors

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / CONFIG_FILENAME).write_text("max_errors: 3\n", encoding="utf-8")
        monkeypatch.setenv("ARTICLEKIT_MAX_ERRORS", "9")
        assert load_config(cwd=tmp_path).max_errors == 9
