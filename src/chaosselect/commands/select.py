"""select — run a target spec against a cluster snapshot."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from chaosselect.commands._base import ChaosCommand

if TYPE_CHECKING:
    from chaosselect.commands._context import AppContext


@click.command(
    "select",
    cls=ChaosCommand,
    examples="""\
  chaosselect select experiment.yaml --snapshot cluster.json
  chaosselect select experiment.yaml --snapshot cluster.json --no-sample
  chaosselect --seed 7 select experiment.yaml --snapshot cluster.json
  chaosselect -q select experiment.yaml --snapshot pods.json --timeout 5
  chaosselect --json -v select experiment.yaml --snapshot cluster.yaml""",
)
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--snapshot",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Cluster snapshot (YAML/JSON). Defaults to [provider] snapshot.",
)
@click.option("--no-sample", is_flag=True, help="Stop after selection; ignore mode/value.")
@click.option("--timeout", type=float, default=None, help="Deadline in seconds.")
@click.pass_obj
def select(
    app: AppContext,
    spec_path: Path,
    snapshot: Path | None,
    no_sample: bool,
    timeout: float | None,
) -> None:
    """Select the pods a target spec acts on."""
    target = app.load_spec(spec_path)
    svc = app.service(app.provider(snapshot))
    ctx = app.call_context(timeout)
    if no_sample:
        app.emit(svc.select_pods(target.selector, ctx=ctx))
    else:
        app.emit(svc.select_and_filter_pods(target, ctx=ctx))
