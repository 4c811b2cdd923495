"""
CLI runner module.

Provides commands:
- parse: OCR text file -> ParseResult JSON
- validate: ParseResult JSON -> ValidationReport JSON
- init-config: Write a default config file
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
