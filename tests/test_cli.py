import pytest
import yaml
from click.testing import CliRunner

from lstdocker import cli as cli_module
from lstdocker.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def env(full_env, monkeypatch):
    monkeypatch.delenv("DOCKER_BUILD_NETWORK", raising=False)
    for key, value in full_env.items():
        monkeypatch.setenv(key, value)
    return full_env


def test_validate_packaged_document(runner):
    result = runner.invoke(cli, ["validate"])
    assert result.exit_code == 0
    assert result.stdout.split() == ["version", "3.4", "base", "ci", "android_ndk", "android_build"]


def test_validate_broken_file(runner, tmp_path):
    path = tmp_path / "broken.yml"
    path.write_text("services:\n  a:\n    build: .\n    image: a\n  a:\n    build: .\n    image: b\n")
    result = runner.invoke(cli, ["validate", "-f", str(path)])
    assert result.exit_code != 0


def test_config_prints_resolved_document(runner, env):
    result = runner.invoke(cli, ["config", "base"])
    assert result.exit_code == 0
    data = yaml.safe_load(result.stdout)
    assert data["services"]["base"]["build"]["context"] == "./base/ubuntu"
    assert list(data["services"]) == ["base"]


def test_config_missing_variable_aborts(runner, env, monkeypatch):
    monkeypatch.delenv("ANDROID_NDK_VERSION")
    result = runner.invoke(cli, ["config"])
    assert result.exit_code != 0


def test_check_reports_missing(runner, env, monkeypatch):
    monkeypatch.delenv("OSNAME")
    result = runner.invoke(cli, ["check"])
    assert result.exit_code == 1
    assert "base: OSNAME" in result.stdout


def test_check_clean(runner, env):
    result = runner.invoke(cli, ["check"])
    assert result.exit_code == 0
    assert "All variables resolved." in result.stdout


def test_order(runner):
    result = runner.invoke(cli, ["order", "android_build", "base"])
    assert result.exit_code == 0
    assert result.stdout.split() == ["base", "android_build"]


def test_build_dry_run(runner, env):
    result = runner.invoke(cli, ["build", "--dry-run", "ci"])
    assert result.exit_code == 0
    assert "ci: sovrin/libsovtoken-ci:0.1.0" in result.stdout


def test_build_passes_options_to_builder(runner, env, monkeypatch, tmp_path):
    seen = {}

    class RecordingBuilder:
        def __init__(self, document, workdir=None):
            seen["workdir"] = workdir

        def run(self, services, dry_run, pull, cache):
            seen.update(services=services, dry_run=dry_run, pull=pull, cache=cache)
            return []

    monkeypatch.setattr(cli_module, "Builder", RecordingBuilder)
    result = runner.invoke(cli, ["build", "--pull", "--no-cache", "-w", str(tmp_path), "base"])
    assert result.exit_code == 0
    assert seen == {
        "workdir": str(tmp_path),
        "services": ("base",),
        "dry_run": False,
        "pull": True,
        "cache": False,
    }


def test_validate_unreadable_path_aborts(runner, tmp_path):
    result = runner.invoke(cli, ["validate", "-f", str(tmp_path)])
    assert result.exit_code == 1
    assert not isinstance(result.exception, OSError)
