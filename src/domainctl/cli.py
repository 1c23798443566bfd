"""Root ``domainctl`` group: global flags, settings and subcommands."""

from __future__ import annotations

import click

from domainctl import __version__
from domainctl.commands import register_commands
from domainctl.commands._context import AppContext
from domainctl.config.settings import DomainSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="domainctl")
@click.option("--as", "identity", metavar="IDENTITY", help="Caller identity for this command.")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only the bare answer.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs and operation timings.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option("-c", "--config", "config_path", help="Path to domainctl.toml.")
@click.pass_context
def cli(
    ctx: click.Context,
    identity: str | None,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """domainctl: a pay-to-register domain registry.

    Domains and their subdomains are claimed by paying the registration
    fee into the registry treasury. The caller identity comes from --as
    or DOMAINCTL_IDENTITY.
    """
    settings = DomainSettings.from_cli(
        config_path=config_path,
        identity=identity,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
