import pytest
from pathlib import Path
from python_on_whales.exceptions import DockerException

from lstdocker import Builder, load
from lstdocker.exceptions import BuildError, UnresolvedVariableError


class FakeBuildx:
    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on

    def build(self, context_path, **kwargs):
        self.calls.append((context_path, kwargs))
        if self.fail_on and self.fail_on in kwargs["tags"][0]:
            raise DockerException(["docker", "buildx", "build", context_path], 1)


class FakeClient:
    def __init__(self, fail_on=None):
        self.buildx = FakeBuildx(fail_on)


def test_builds_every_service_in_order(document, full_env, tmp_path):
    client = FakeClient()
    built = Builder(document, full_env, client=client, workdir=tmp_path).run()

    assert [svc.name for svc in built] == ["base", "ci", "android_ndk", "android_build"]
    context_path, kwargs = client.buildx.calls[0]
    assert context_path == str(tmp_path / "base" / "ubuntu")
    assert kwargs["build_args"] == {"INDY_SDK_VERSION": "1.16", "u_id": "1000"}
    assert kwargs["network"] == "bridge"
    assert kwargs["tags"] == ["sovrin/libsovtoken-base:0.1.0"]
    assert kwargs["file"] is None
    assert kwargs["cache"] is True
    assert kwargs["pull"] is False


def test_selected_services_and_options(document, full_env, tmp_path):
    client = FakeClient()
    Builder(document, full_env, client=client, workdir=tmp_path).run(["ci"], pull=True, cache=False)
    assert len(client.buildx.calls) == 1
    _, kwargs = client.buildx.calls[0]
    assert kwargs["pull"] is True
    assert kwargs["cache"] is False


def test_dry_run_does_not_touch_docker(document, full_env):
    client = FakeClient()
    built = Builder(document, full_env, client=client).run(dry_run=True)
    assert len(built) == 4
    assert client.buildx.calls == []


def test_missing_variable_stops_before_any_build(document, full_env):
    del full_env["RUST_TARGETS"]
    client = FakeClient()
    with pytest.raises(UnresolvedVariableError, match="RUST_TARGETS"):
        Builder(document, full_env, client=client).run()
    assert client.buildx.calls == []


def test_engine_failure_is_wrapped_and_stops(document, full_env):
    client = FakeClient(fail_on="android_ndk")
    with pytest.raises(BuildError, match="service 'android_ndk'"):
        Builder(document, full_env, client=client).run()
    assert len(client.buildx.calls) == 3


def test_dockerfile_relative_to_context(tmp_path):
    doc = load(
        "services:\n"
        "  s:\n"
        "    build:\n"
        "      context: ./ctx\n"
        "      dockerfile: Dockerfile.ci\n"
        "    image: s\n"
        "  remote:\n"
        "    build: https://github.com/example/repo.git\n"
        "    image: r\n"
    )
    client = FakeClient()
    Builder(doc, {}, client=client, workdir=tmp_path).run()
    (ctx_path, kwargs), (remote_path, _) = client.buildx.calls
    assert ctx_path == str(tmp_path / "ctx")
    assert kwargs["file"] == str(Path(ctx_path) / "Dockerfile.ci")
    assert remote_path == "https://github.com/example/repo.git"
