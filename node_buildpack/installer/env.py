"""User environment import for dependency installs.

The platform hands us the app's config vars either as a `KEY=VALUE` file or
as a directory holding one file per variable. They are applied only to the
environment of the install step; the buildpack's own environment is left
alone.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from decouple import RepositoryEnv
from pydantic import BaseModel, Field

from node_buildpack.errors import BuildError

DEFAULT_DENY = frozenset({"PATH", "GIT_DIR", "CPATH", "CPPATH", "LD_PRELOAD", "LIBRARY_PATH"})


class EnvPolicy(BaseModel):
    """Which imported variables may reach the install step.

    `deny` always wins. When `allow` is set, only the listed names pass.
    """

    deny: frozenset[str] = Field(default=DEFAULT_DENY)
    allow: frozenset[str] | None = None

    def permits(self, key: str) -> bool:
        if key in self.deny:
            return False
        return self.allow is None or key in self.allow

    def filter(self, env: Mapping[str, str]) -> dict[str, str]:
        return {k: v for k, v in env.items() if self.permits(k)}


def _env_file_values(path: Path) -> dict[str, str]:
    out: dict[str, str] = {}
    for key, value in RepositoryEnv(str(path)).data.items():
        # shell-style `export KEY=VALUE` lines
        if key.startswith("export "):
            key = key[len("export ") :].strip()
        if key:
            out[key] = value
    return out


def read_env_path(path: Path | None) -> dict[str, str]:
    if path is None or not path.exists():
        return {}
    try:
        if path.is_dir():
            return {
                p.name: p.read_text(encoding="utf-8").rstrip("\n")
                for p in sorted(path.iterdir())
                if p.is_file()
            }
        return _env_file_values(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise BuildError(f"Unable to read config vars from {path}: {exc}") from exc


def build_env(
    imported: Mapping[str, str],
    policy: EnvPolicy,
    path_prefix: list[Path],
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return a fresh environment for one build step."""
    env = dict(os.environ if base is None else base)
    env.update(policy.filter(imported))
    parts = [str(p) for p in path_prefix]
    if env.get("PATH"):
        parts.append(env["PATH"])
    env["PATH"] = os.pathsep.join(parts)
    return env
