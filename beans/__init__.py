"""Beans kept as Markdown files with YAML front matter: configuration, files, links, filters and search."""

__version__ = "0.1.0"