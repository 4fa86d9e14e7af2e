"""Shared console for status output."""

from rich.console import Console

console = Console()

__all__ = ["console"]
