"""Public package surface for lazydired.

Exports ``DiredEngine`` for host editors and ``main`` for programmatic CLI
invocation. Listing primitives live under ``lazydired.listing_model``.
"""

from __future__ import annotations

from .engine import DiredEngine


def main(*args, **kwargs):
    """Lazily import CLI entrypoint so argparse setup stays out of library imports."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["DiredEngine", "main"]
