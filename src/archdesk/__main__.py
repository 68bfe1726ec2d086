"""Allow ``python -m archdesk`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m archdesk`` behaves identically to the ``archdesk``
console script.
"""

from __future__ import annotations

from archdesk.cli.app import cli

if __name__ == "__main__":
    cli()
