"""Buildpack configuration.

Endpoints default to the public services and can be overridden through
`NODE_BUILDPACK_*` environment variables, which is also how tests point the
buildpack at local fixtures.
"""

from __future__ import annotations

from collections.abc import Mapping

from decouple import Config as DecoupleConfig, Csv, RepositoryEmpty
from pydantic import BaseModel, Field

from node_buildpack.errors import BuildError
from node_buildpack.installer.env import EnvPolicy

_PREFIX = "NODE_BUILDPACK_"


class _MappingRepository(RepositoryEmpty):
    """decouple repository over an explicit mapping (process env still wins)."""

    def __init__(self, data: Mapping[str, str]) -> None:
        self.data = dict(data)

    def __contains__(self, key: str) -> bool:
        return key in self.data

    def __getitem__(self, key: str) -> str:
        return self.data[key]


class BuildpackConfig(BaseModel):
    resolve_url: str = "https://semver.io/node/resolve"
    dist_url: str = "https://nodejs.org/dist"
    telemetry_url: str | None = None
    platform: str = "linux-x64"
    verify_checksum: bool = True
    restore_bower_cache: bool = False
    http_timeout: float = 60.0
    env_policy: EnvPolicy = Field(default_factory=EnvPolicy)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BuildpackConfig:
        repo = RepositoryEmpty() if environ is None else _MappingRepository(environ)
        config = DecoupleConfig(repo)
        defaults = cls()

        def _get(key: str, default, cast=str):
            name = _PREFIX + key.upper()
            try:
                return config(name, default=default, cast=cast)
            except ValueError as exc:
                raise BuildError(f"Invalid value for {name}: {exc}") from exc

        values: dict = {}
        for key in ("resolve_url", "dist_url", "telemetry_url", "platform"):
            raw = _get(key, default="")
            if raw:
                values[key] = raw
        values["verify_checksum"] = _get("verify_checksum", defaults.verify_checksum, cast=bool)
        values["restore_bower_cache"] = _get("restore_bower_cache", defaults.restore_bower_cache, cast=bool)
        values["http_timeout"] = _get("http_timeout", defaults.http_timeout, cast=float)
        allow = _get("env_allow", default="", cast=Csv())
        if allow:
            values["env_policy"] = EnvPolicy(allow=frozenset(allow))
        return cls(**values)
