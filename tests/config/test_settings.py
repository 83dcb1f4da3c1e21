"""Tests for ChaosSelectSettings — unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from chaosselect.config.models import PolicyConfig, ProviderConfig, SamplingConfig
from chaosselect.config.settings import ChaosSelectSettings
from chaosselect.infrastructure.policy import RegexNamespacePolicy


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    names = ("CHAOSSELECT_CONFIG", "CHAOSSELECT_SEED", "CHAOSSELECT_POLICY__IGNORED_NAMESPACES")
    for name in names:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        """With no TOML and no env vars, all fields use code defaults."""
        settings = ChaosSelectSettings.from_cli(cwd=tmp_path)
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.quiet is False
        assert settings.verbose is False
        assert settings.seed is None
        assert settings.policy.allowed_namespaces is None
        assert settings.provider.snapshot is None

    def test_frozen(self, tmp_path: Path) -> None:
        settings = ChaosSelectSettings.from_cli(cwd=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        toml = tmp_path / "chaosselect.toml"
        toml.write_text(
            '[policy]\nignored_namespaces = "^kube-"\n'
            "[sampling]\nseed = 7\n"
            '[provider]\nsnapshot = "cluster.json"\ntimeout_seconds = 2.5\n'
        )
        settings = ChaosSelectSettings.from_cli(cwd=tmp_path)
        assert settings.config_path == toml
        assert settings.policy.ignored_namespaces == "^kube-"
        assert settings.sampling.seed == 7
        assert settings.provider.snapshot == "cluster.json"
        assert settings.provider.timeout_seconds == 2.5

    def test_discovered_from_subdirectory(self, tmp_path: Path) -> None:
        (tmp_path / "chaosselect.toml").write_text("[sampling]\nseed = 3\n")
        child = tmp_path / "experiments" / "net"
        child.mkdir(parents=True)
        assert ChaosSelectSettings.from_cli(cwd=child).sampling.seed == 3

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[policy]\nallowed_namespaces = "^chaos-"\n')
        settings = ChaosSelectSettings.from_cli(config_path=str(custom), cwd=tmp_path)
        assert settings.policy.allowed_namespaces == "^chaos-"
        assert settings.config_path == custom

    def test_empty_file_uses_section_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "chaosselect.toml").write_text("")
        settings = ChaosSelectSettings.from_cli(cwd=tmp_path)
        assert settings.policy == PolicyConfig()
        assert settings.sampling == SamplingConfig()
        assert settings.provider == ProviderConfig()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "chaosselect.toml").write_text("[policy\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            ChaosSelectSettings.from_cli(cwd=tmp_path)


class TestPriority:
    def test_cli_flags_override_toml(self, tmp_path: Path) -> None:
        (tmp_path / "chaosselect.toml").write_text("seed = 1\n")
        settings = ChaosSelectSettings.from_cli(cwd=tmp_path, seed=2)
        assert settings.seed == 2

    def test_none_flags_do_not_mask_toml(self, tmp_path: Path) -> None:
        (tmp_path / "chaosselect.toml").write_text("seed = 1\n")
        settings = ChaosSelectSettings.from_cli(cwd=tmp_path, seed=None)
        assert settings.seed == 1

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "chaosselect.toml").write_text('[policy]\nignored_namespaces = "^kube-"\n')
        monkeypatch.setenv("CHAOSSELECT_POLICY__IGNORED_NAMESPACES", "^test-")
        settings = ChaosSelectSettings.from_cli(cwd=tmp_path)
        assert settings.policy.ignored_namespaces == "^test-"

    def test_env_flag(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHAOSSELECT_SEED", "11")
        assert ChaosSelectSettings.from_cli(cwd=tmp_path).seed == 11


class TestCollaborators:
    def test_effective_seed_prefers_flag(self, tmp_path: Path) -> None:
        (tmp_path / "chaosselect.toml").write_text("[sampling]\nseed = 5\n")
        assert ChaosSelectSettings.from_cli(cwd=tmp_path).effective_seed == 5
        assert ChaosSelectSettings.from_cli(cwd=tmp_path, seed=6).effective_seed == 6

    def test_namespace_policy(self, tmp_path: Path) -> None:
        (tmp_path / "chaosselect.toml").write_text('[policy]\nignored_namespaces = "^kube-"\n')
        policy = ChaosSelectSettings.from_cli(cwd=tmp_path).namespace_policy()
        assert isinstance(policy, RegexNamespacePolicy)
        assert not policy.is_allowed("kube-system")

    def test_seeded_sampler_is_repeatable(self, tmp_path: Path) -> None:
        settings = ChaosSelectSettings.from_cli(cwd=tmp_path, seed=42)
        pool = list(range(30))
        assert settings.sampler().sample(pool, "fixed", "4") == settings.sampler().sample(
            pool, "fixed", "4"
        )

    def test_missing_explicit_config(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException, match="Config file not found"):
            ChaosSelectSettings.from_cli(config_path=str(tmp_path / "nope.toml"), cwd=tmp_path)
