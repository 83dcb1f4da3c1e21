"""Root CLI group for chaosselect with global flags and command registration."""

from __future__ import annotations

import click

from chaosselect import __version__
from chaosselect.commands import register_commands
from chaosselect.commands._base import ChaosGroup
from chaosselect.commands._context import AppContext
from chaosselect.config.settings import ChaosSelectSettings

_ROOT_EXAMPLES = """\
  chaosselect select experiment.yaml --snapshot cluster.json
  chaosselect check experiment.yaml default/web-0 --snapshot cluster.json
  chaosselect parse "default,!kube-system"
  chaosselect --json --seed 42 select experiment.yaml --snapshot cluster.json"""


@click.group(cls=ChaosGroup, invoke_without_command=True, examples=_ROOT_EXAMPLES)
@click.version_option(version=__version__, prog_name="chaosselect")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with stage telemetry.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--seed", type=int, default=None, help="Seed the sampler for repeatable picks.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    seed: int | None,
) -> None:
    """chaosselect — select fault-injection targets from a cluster snapshot."""
    settings = ChaosSelectSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        seed=seed,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
