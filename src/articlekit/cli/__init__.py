"""
articlekit Command-Line Interface
=================================

This package provides the command-line tools:

- **artlint**: lint markdown articles (front matter, fences, links)
- **exprtok**: tokenize toy expression source, optionally as a clang-style dump
- **artnew**: scaffold a new article with valid front matter

Each tool is a Click application sharing the exit codes in cli.errors.
"""

__all__ = ["artlint", "exprtok", "artnew"]
