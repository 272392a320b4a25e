"""Upgrades legacy HTML template content to native document node trees."""

from docrender.importer.html_importer import LegacyContentImporter, convert_html

__all__ = [
    "LegacyContentImporter",
    "convert_html",
]
