"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``CHAOSSELECT_*`` prefix
  3. TOML file    — ``chaosselect.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`chaosselect.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from chaosselect.config.discovery import find_config
from chaosselect.config.models import PolicyConfig, ProviderConfig, SamplingConfig

if TYPE_CHECKING:
    from chaosselect.domain.sampling import Sampler
    from chaosselect.infrastructure.policy import RegexNamespacePolicy


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Feed the ``[policy]``, ``[sampling]`` and ``[provider]`` tables (and any
    top-level flag keys) of ``chaosselect.toml`` into the settings model."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data = _read_toml(toml_path) if toml_path is not None else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class ChaosSelectSettings(BaseSettings):
    """Unified settings for the chaosselect CLI.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
        seed: ``--seed`` override for ``[sampling] seed``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CHAOSSELECT_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    seed: int | None = None

    # --- TOML sections ---
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        cwd: Path | None = None,
        **cli_flags: Any,
    ) -> ChaosSelectSettings:
        """Construct settings from a CLI invocation.

        Discovers ``chaosselect.toml`` via walk-up from *cwd* (or uses the
        explicit *config_path*) and merges CLI flags as highest-priority
        overrides. ``None`` flags are dropped so they don't mask lower
        sources.
        """
        toml_path: Path | None
        if config_path:
            toml_path = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {toml_path}"
                raise click.ClickException(msg)
        else:
            toml_path = find_config(cwd)

        _tls.toml_path = toml_path
        try:
            return cls(
                config_path=toml_path,
                **{name: flag for name, flag in cli_flags.items() if flag is not None},
            )
        finally:
            _tls.toml_path = None

    @property
    def effective_seed(self) -> int | None:
        """``--seed`` if given, else ``[sampling] seed``."""
        return self.seed if self.seed is not None else self.sampling.seed

    def namespace_policy(self) -> RegexNamespacePolicy:
        from chaosselect.infrastructure.policy import RegexNamespacePolicy

        return RegexNamespacePolicy.from_config(self.policy)

    def sampler(self) -> Sampler:
        from chaosselect.domain.sampling import Sampler

        return Sampler.seeded(self.effective_seed)
