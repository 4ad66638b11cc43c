"""repobot CLI entry point.

This package provides a Click-based CLI that opens pull requests adding files
(currently LICENSE files) to GitHub repositories through the Git Data API, and
read-only reports about a GitHub organization. See `repobot --help` for details.
"""

from repobot.cli.cli import cli


def main() -> None:
    """CLI entry point used by the `repobot` console script."""
    cli()
