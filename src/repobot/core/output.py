"""Output helpers separating user-facing messages from machine-readable results.

user_output writes to stderr so stdout stays clean for results that scripts
consume; machine_output writes to stdout.
"""

import click


def user_output(message: str = "") -> None:
    click.echo(message, err=True)


def machine_output(message: str = "") -> None:
    click.echo(message)
