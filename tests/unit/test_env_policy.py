from __future__ import annotations

import os
from pathlib import Path

import pytest

from node_buildpack.config import BuildpackConfig
from node_buildpack.errors import BuildError
from node_buildpack.installer.env import DEFAULT_DENY, EnvPolicy, build_env, read_env_path


def test_default_policy_denies_path_like_vars() -> None:
    policy = EnvPolicy()
    imported = {k: "x" for k in DEFAULT_DENY} | {"NODE_ENV": "production", "NPM_TOKEN": "t"}

    assert policy.filter(imported) == {"NODE_ENV": "production", "NPM_TOKEN": "t"}


def test_allow_list_narrows_but_deny_still_wins() -> None:
    policy = EnvPolicy(allow=frozenset({"NODE_ENV", "PATH"}))

    assert policy.permits("NODE_ENV")
    assert not policy.permits("NPM_TOKEN")
    assert not policy.permits("PATH")


def test_read_env_file(tmp_path: Path) -> None:
    f = tmp_path / "env"
    f.write_text(
        "# comment\n\nNODE_ENV=production\nexport NPM_CONFIG_LOGLEVEL=warn\nURL=a=b\n"
        'TOKEN="a b"\nnonsense\n',
        encoding="utf-8",
    )

    assert read_env_path(f) == {
        "NODE_ENV": "production",
        "NPM_CONFIG_LOGLEVEL": "warn",
        "URL": "a=b",
        "TOKEN": "a b",
    }


def test_read_env_dir(tmp_path: Path) -> None:
    d = tmp_path / "env"
    d.mkdir()
    (d / "NODE_ENV").write_text("staging\n", encoding="utf-8")
    (d / "SECRET").write_text("s3cr3t", encoding="utf-8")

    assert read_env_path(d) == {"NODE_ENV": "staging", "SECRET": "s3cr3t"}


def test_undecodable_env_dir_fails_the_build(tmp_path: Path) -> None:
    d = tmp_path / "env"
    d.mkdir()
    (d / "LEGACY").write_bytes(b"caf\xe9")

    with pytest.raises(BuildError, match="config vars"):
        read_env_path(d)


def test_missing_env_path_is_empty(tmp_path: Path) -> None:
    assert read_env_path(None) == {}
    assert read_env_path(tmp_path / "nope") == {}


def test_build_env_is_scoped_and_prefixes_path(tmp_path: Path) -> None:
    base = {"PATH": "/usr/bin", "HOME": "/app"}
    env = build_env(
        {"NODE_ENV": "production", "PATH": "/evil"},
        EnvPolicy(),
        [tmp_path / "vendor" / "node" / "bin"],
        base=base,
    )

    assert env["NODE_ENV"] == "production"
    assert env["PATH"] == os.pathsep.join([str(tmp_path / "vendor" / "node" / "bin"), "/usr/bin"])
    assert base == {"PATH": "/usr/bin", "HOME": "/app"}


def test_config_from_env_overrides() -> None:
    cfg = BuildpackConfig.from_env(
        {
            "NODE_BUILDPACK_RESOLVE_URL": "http://localhost:9/resolve",
            "NODE_BUILDPACK_VERIFY_CHECKSUM": "false",
            "NODE_BUILDPACK_RESTORE_BOWER_CACHE": "1",
            "NODE_BUILDPACK_HTTP_TIMEOUT": "3.5",
            "NODE_BUILDPACK_ENV_ALLOW": "NODE_ENV,NPM_TOKEN",
        }
    )

    assert cfg.resolve_url == "http://localhost:9/resolve"
    assert cfg.verify_checksum is False
    assert cfg.restore_bower_cache is True
    assert cfg.http_timeout == 3.5
    assert cfg.env_policy.allow == frozenset({"NODE_ENV", "NPM_TOKEN"})
    assert cfg.telemetry_url is None


def test_config_rejects_bad_values() -> None:
    with pytest.raises(BuildError, match="NODE_BUILDPACK_HTTP_TIMEOUT"):
        BuildpackConfig.from_env({"NODE_BUILDPACK_HTTP_TIMEOUT": "soon"})
    with pytest.raises(BuildError, match="NODE_BUILDPACK_VERIFY_CHECKSUM"):
        BuildpackConfig.from_env({"NODE_BUILDPACK_VERIFY_CHECKSUM": "maybe"})


def test_config_defaults_without_overrides() -> None:
    cfg = BuildpackConfig.from_env({})

    assert cfg == BuildpackConfig()
