"""thermoviz command-line interface package.

Supports ``python -m thermoviz.cli`` as an alternative to the ``thermoviz`` entry point.
"""

from thermoviz.cli.main import cli, main

__all__ = ["cli", "main"]
