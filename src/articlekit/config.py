"""
articlekit - Linter Configuration
=================================

Linter configuration comes from, in increasing priority:
- Default values (defined here)
- A YAML file: '.articlekit.yaml' in the working directory, or an
  explicit --config file
- Environment variables
- Command-line options (applied by the CLI)

Example '.articlekit.yaml':

    site_root: site/
    extensions: [".md", ".html"]
    disabled_rules: [MD005]
    max_errors: 50
"""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from articlekit.errors import ConfigError
from articlekit.frontmatter import REQUIRED_KEYS
from articlekit.links import DEFAULT_EXTENSIONS, DEFAULT_INDEX_NAMES

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".articlekit.yaml"


@dataclass
class LintConfig:
    """
    Configuration for an article lint run.

    Attributes:
        required_keys: Front matter keys that must be present and non-empty
        site_root: Directory site-absolute links ('/path/') resolve against
        extensions: Suffixes tried when resolving a link to a missing path
        index_names: Directory index stems tried for directory links
        check_links: Check relative and site links against the filesystem
        check_anchors: Check '#fragment' links against headings
        disabled_rules: Rule codes to suppress (e.g. "MD005")
        max_errors: Stop collecting a file's errors after this many (0 = no limit)
    """

    required_keys: tuple[str, ...] = REQUIRED_KEYS
    site_root: Optional[Path] = None
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    index_names: tuple[str, ...] = DEFAULT_INDEX_NAMES
    check_links: bool = True
    check_anchors: bool = True
    disabled_rules: frozenset[str] = field(default_factory=frozenset)
    max_errors: int = 100

    def is_enabled(self, code: str) -> bool:
        return code not in self.disabled_rules

    # ═══════════════════════════════════════════════════════════════════════════
    # FACTORY METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    @classmethod
    def from_mapping(cls, data: dict[str, Any], base_dir: Optional[Path] = None) -> "LintConfig":
        """
        Create a LintConfig from a mapping such as a loaded YAML file.

        Args:
            data: Keys named after LintConfig attributes
            base_dir: Directory relative site_root values are resolved from

        Raises:
            ConfigError: On unknown keys or values of the wrong type
        """
        return cls().merged(data, base_dir)

    def merged(self, data: dict[str, Any], base_dir: Optional[Path] = None) -> "LintConfig":
        """Return a copy with the values of `data` applied on top."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(
                f"unknown configuration keys: {', '.join(unknown)}",
                hint=f"valid keys are: {', '.join(sorted(known))}",
            )

        changes: dict[str, Any] = {}
        for key, value in data.items():
            if key == "site_root":
                changes[key] = _as_path(value, base_dir)
            elif key in ("required_keys", "extensions", "index_names"):
                changes[key] = tuple(_as_str_list(key, value))
            elif key == "disabled_rules":
                changes[key] = frozenset(code.upper() for code in _as_str_list(key, value))
            elif key in ("check_links", "check_anchors"):
                if not isinstance(value, bool):
                    raise ConfigError(f"'{key}' must be true or false, not {value!r}")
                changes[key] = value
            elif key == "max_errors":
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ConfigError(f"'max_errors' must be an integer, not {value!r}")
                changes[key] = value

        return replace(self, **changes)

    @classmethod
    def from_file(cls, path: Path) -> "LintConfig":
        """
        Load configuration from a YAML file.

        Raises:
            ConfigError: If the file is not valid YAML or not a mapping
        """
        return cls().merged_file(path)

    def merged_file(self, path: Path) -> "LintConfig":
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML in {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping of settings")

        logger.info("Loaded configuration from %s", path)
        return self.merged(data, base_dir=path.parent)

    @classmethod
    def from_env(cls) -> "LintConfig":
        """
        Create LintConfig from environment variables.

        Environment variables (all optional):
            ARTICLEKIT_SITE_ROOT: Site root directory
            ARTICLEKIT_MAX_ERRORS: Error limit per file (integer)
            ARTICLEKIT_DISABLE: Comma-separated rule codes to disable
        """
        return cls().merged_env()

    def merged_env(self) -> "LintConfig":
        config = self

        if site_root := os.environ.get("ARTICLEKIT_SITE_ROOT"):
            config = replace(config, site_root=Path(site_root))

        if max_errors := os.environ.get("ARTICLEKIT_MAX_ERRORS"):
            try:
                config = replace(config, max_errors=int(max_errors))
            except ValueError:
                logger.warning("Ignoring invalid ARTICLEKIT_MAX_ERRORS=%r", max_errors)

        if disable := os.environ.get("ARTICLEKIT_DISABLE"):
            codes = {code.strip().upper() for code in disable.split(",") if code.strip()}
            config = replace(config, disabled_rules=config.disabled_rules | codes)

        return config


def load_config(path: Optional[Path] = None, cwd: Optional[Path] = None) -> LintConfig:
    """
    Build the effective configuration.

    Args:
        path: Explicit configuration file; must exist
        cwd: Directory searched for '.articlekit.yaml' when path is None

    Returns:
        Defaults, overlaid with the file, overlaid with the environment
    """
    config = LintConfig()

    if path is not None:
        config = config.merged_file(path)
    else:
        candidate = Path(cwd or Path.cwd()) / CONFIG_FILENAME
        if candidate.is_file():
            config = config.merged_file(candidate)

    return config.merged_env()


def _as_path(value: Any, base_dir: Optional[Path]) -> Optional[Path]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'site_root' must be a path string, not {value!r}")
    path = Path(value).expanduser()
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return path


def _as_str_list(key: str, value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings, not {value!r}")
    return list(value)
