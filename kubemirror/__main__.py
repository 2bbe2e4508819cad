"""Entry point for `python -m kubemirror`.

Usage:
    python -m kubemirror --apiversion v1 --kind Pod --namespace default
    uv run python -m kubemirror --apiversion apps/v1 --kind Deployment --global
"""

from __future__ import annotations

from kubemirror.cli import cli

cli()
