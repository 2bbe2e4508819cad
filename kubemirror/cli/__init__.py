"""kubemirror command-line interface.

Exposes:
    cli -- Click command entry point (registered as ``kubemirror`` script).
"""

from kubemirror.cli.main import cli

__all__ = ["cli"]
