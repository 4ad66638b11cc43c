"""CLI error handling for non-ideal-state type narrowing."""

from typing import TypeVar

import click

from repobot.core.non_ideal_state import NonIdealState
from repobot.core.output import user_output

T = TypeVar("T")


class EnsureIdeal:
    """Helper class for narrowing non-ideal-state discriminated unions."""

    @staticmethod
    def ideal_state(result: T | NonIdealState) -> T:
        """Ensure result is not a NonIdealState, otherwise exit with error.

        Args:
            result: Value that may be a NonIdealState

        Returns:
            The value unchanged if not NonIdealState (with narrowed type T)

        Raises:
            SystemExit: If result is NonIdealState (with exit code 1)
        """
        if isinstance(result, NonIdealState):
            user_output(click.style("Error: ", fg="red") + result.message)
            raise SystemExit(1)
        return result

    @staticmethod
    def owner(owner: str | None) -> str:
        """Ensure an organization or owner was configured."""
        if owner is None:
            raise click.UsageError(
                "No organization or owner configured. Pass --org/--owner or set GITHUB_ORG."
            )
        return owner
