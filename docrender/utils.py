"""Shared utility functions for docrender.

Provides JSON/YAML input loading, file-system helpers and Rich-based console
output used by the command-line pipeline.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()

_YAML_SUFFIXES = {".yaml", ".yml"}


class DocumentLoadError(Exception):
    """Raised when an input file is missing or cannot be parsed."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}")


# ---------------------------------------------------------------------------
# Input loading
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> Any:
    """Load and parse a JSON file.

    Raises:
        DocumentLoadError: If the file does not exist or is not valid JSON.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise DocumentLoadError(file_path, "file not found")
    try:
        return json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DocumentLoadError(file_path, f"invalid JSON ({exc})") from exc


def load_data(path: str | Path) -> Any:
    """Load a JSON or YAML file, chosen by extension (``.yaml``/``.yml``).

    Raises:
        DocumentLoadError: If the file does not exist or cannot be parsed.
    """
    file_path = Path(path)
    if file_path.suffix.lower() not in _YAML_SUFFIXES:
        return load_json(file_path)
    if not file_path.is_file():
        raise DocumentLoadError(file_path, "file not found")
    try:
        return yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise DocumentLoadError(file_path, f"invalid YAML ({exc})") from exc


def load_mapping(path: str | Path) -> dict[str, Any]:
    """Load a JSON/YAML file whose top level must be an object.

    An empty YAML document loads as ``{}``.
    """
    data = load_data(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DocumentLoadError(path, f"expected an object at the top level, got {type(data).__name__}")
    return data


def load_text(path: str | Path) -> str:
    """Read a UTF-8 text file (e.g. custom CSS)."""
    file_path = Path(path)
    if not file_path.is_file():
        raise DocumentLoadError(file_path, "file not found")
    return file_path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist.

    Returns:
        The resolved ``Path`` object.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


def save_text(content: str, path: str | Path) -> Path:
    """Write *content* as UTF-8, creating parent directories.

    Returns:
        The resolved path of the written file.
    """
    file_path = Path(path)
    ensure_dir(file_path.parent)
    file_path.write_text(content, encoding="utf-8")
    return file_path.resolve()


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, Any], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, escape(str(value)))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
