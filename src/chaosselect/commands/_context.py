"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Builds the targeting service from a snapshot on
demand and centralizes result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from chaosselect.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from chaosselect.config.settings import ChaosSelectSettings
    from chaosselect.domain.spec import TargetSpec
    from chaosselect.infrastructure.context import CallContext
    from chaosselect.infrastructure.provider import InMemoryProvider
    from chaosselect.services.result import ServiceResult
    from chaosselect.services.targeting import TargetingService


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Nothing is loaded at construction so ``--help`` and ``--version``
    never touch the filesystem beyond config discovery.
    """

    def __init__(self, settings: ChaosSelectSettings) -> None:
        self.settings = settings

        from chaosselect.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from chaosselect.services.telemetry import enable_telemetry

            enable_telemetry()

    # ------------------------------------------------------------------
    # inputs
    # ------------------------------------------------------------------

    def snapshot_path(self, explicit: Path | None) -> Path:
        """``--snapshot`` if given, else ``[provider] snapshot`` relative to the config."""
        if explicit is not None:
            return explicit
        configured = self.settings.provider.snapshot
        if not configured:
            msg = "No snapshot given: pass --snapshot or set [provider] snapshot"
            raise click.UsageError(msg)
        path = Path(configured)
        if not path.is_absolute() and self.settings.config_path is not None:
            path = self.settings.config_path.parent / path
        return path

    def provider(self, snapshot: Path | None) -> InMemoryProvider:
        from chaosselect.infrastructure.provider import InMemoryProvider
        from chaosselect.infrastructure.snapshot import load_snapshot

        path = self.snapshot_path(snapshot)
        try:
            return InMemoryProvider.from_snapshot(load_snapshot(path))
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc

    def service(self, provider: InMemoryProvider) -> TargetingService:
        """TargetingService wired with the configured policy and sampler."""
        from chaosselect.services.targeting import TargetingService

        return TargetingService(
            provider,
            policy=self.settings.namespace_policy(),
            sampler=self.settings.sampler(),
        )

    def load_spec(self, path: Path) -> TargetSpec:
        from chaosselect.infrastructure.snapshot import load_target_spec

        try:
            return load_target_spec(path)
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc

    def call_context(self, timeout: float | None = None) -> CallContext:
        """CallContext with ``--timeout`` or ``[provider] timeout_seconds``."""
        from chaosselect.infrastructure.context import CallContext

        if timeout is None:
            timeout = self.settings.provider.timeout_seconds
        return CallContext.with_timeout(timeout)

    # ------------------------------------------------------------------
    # output
    # ------------------------------------------------------------------

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          In quiet/JSON mode warnings go to stderr (or stay in the payload)
          so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if settings.quiet and not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
