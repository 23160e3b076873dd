"""npm commands run against the build directory.

Replaces the bare `npm install` fallback of a developer install with the
production-only install a deploy needs, using the app's own `.npmrc`.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from node_buildpack.process import CommandResult, CommandRunner


class Npm:
    def __init__(self, runner: CommandRunner, build_dir: Path, env: Mapping[str, str] | None = None) -> None:
        self.runner = runner
        self.build_dir = build_dir
        self.env = env

    def _run(self, *args: str, env: Mapping[str, str] | None = None) -> CommandResult:
        return self.runner.run(["npm", *args], cwd=self.build_dir, env=env if env is not None else self.env)

    def install(self, env: Mapping[str, str] | None = None) -> CommandResult:
        return self._run(
            "install",
            "--production",
            "--userconfig",
            str(self.build_dir / ".npmrc"),
            env=env,
        )

    def install_package(self, name: str) -> CommandResult:
        return self._run("install", name)

    def rebuild(self) -> CommandResult:
        return self._run("rebuild")

    def prune(self) -> CommandResult:
        return self._run("prune")
