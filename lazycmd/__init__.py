"""Public package surface for lazycmd.

Exports ``main`` for programmatic CLI invocation.
The listing core lives in ``lazycmd.listing``; the panes in ``lazycmd.pane``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
