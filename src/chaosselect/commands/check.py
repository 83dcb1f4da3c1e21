"""check — test whether one pod meets a target spec's selector."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from chaosselect.commands._base import ChaosCommand

if TYPE_CHECKING:
    from chaosselect.commands._context import AppContext


@click.command(
    "check",
    cls=ChaosCommand,
    examples="""\
  chaosselect check experiment.yaml default/web-0 --snapshot cluster.json
  chaosselect -q check experiment.yaml kube-system/coredns-1 --snapshot cluster.json""",
)
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("pod_ref", metavar="NAMESPACE/NAME")
@click.option(
    "--snapshot",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Cluster snapshot (YAML/JSON). Defaults to [provider] snapshot.",
)
@click.pass_obj
def check(app: AppContext, spec_path: Path, pod_ref: str, snapshot: Path | None) -> None:
    """Check one pod against a selector without listing the cluster.

    Field selectors, node constraints and the namespace policy are not
    evaluated by this check.
    """
    namespace, sep, name = pod_ref.partition("/")
    if not sep or not namespace or not name:
        msg = f"{pod_ref!r} is not NAMESPACE/NAME"
        raise click.BadParameter(msg, param_hint="POD_REF")

    target = app.load_spec(spec_path)
    provider = app.provider(snapshot)
    pod = provider.get_pod(namespace, name, ctx=app.call_context())
    if pod is None:
        msg = f"Pod {pod_ref} not found in snapshot"
        raise click.ClickException(msg)
    app.emit(app.service(provider).check_pod(pod, target.selector))
