"""Allow ``python -m surepet_cli`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m surepet_cli`` behaves identically to the ``surepet``
console script.
"""

from __future__ import annotations

from surepet_cli.cli.app import cli

if __name__ == "__main__":
    cli()
