"""Click classes whose commands carry an ``--examples`` flag.

Example invocations stay out of ``--help``; ``domainctl query events
--examples`` prints them and exits.
"""

from __future__ import annotations

from typing import Any

import click


def _print_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"Examples for '{ctx.command_path}':\n")
    click.echo(getattr(ctx.command, "examples", None) or "")
    ctx.exit(0)


class _ExamplesMixin:
    """Adds the eager ``--examples`` option when examples are given."""

    params: list[click.Parameter]
    examples: str | None

    def _attach_examples(self, examples: str | None) -> None:
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=_print_examples,
                    help="Show example invocations and exit.",
                )
            )


class DomainCommand(_ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._attach_examples(examples)


class DomainGroup(_ExamplesMixin, click.Group):
    """Group whose subcommands and subgroups accept ``examples=`` too."""

    command_class = DomainCommand
    group_class = type  # nested groups reuse this class

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._attach_examples(examples)
