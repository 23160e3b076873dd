"""Process execution for build steps.

Every external tool (npm, bower) goes through `CommandRunner.run`, which
merges stderr into stdout, streams each line indented into the build log,
and raises `CommandError` on a non-zero exit.
"""

from __future__ import annotations

import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from node_buildpack.errors import CommandError
from node_buildpack.logging import BuildLog, get_logger

log = get_logger(__name__)


@dataclass
class CommandResult:
    args: list[str]
    returncode: int
    output: str


class CommandRunner:
    def __init__(self, build_log: BuildLog) -> None:
        self.build_log = build_log

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        args = [str(c) for c in cmd]
        log.debug("exec %s (cwd=%s)", args, cwd)
        captured: list[str] = []
        try:
            proc = subprocess.Popen(
                args,
                cwd=cwd,
                env=dict(env) if env is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise CommandError(args, 127, str(exc)) from exc

        if proc.stdout is not None:
            with proc.stdout:
                for line in proc.stdout:
                    captured.append(line)
                    self.build_log.info(line.rstrip("\n"))
        returncode = proc.wait()

        output = "".join(captured)
        if returncode != 0:
            raise CommandError(args, returncode, output)
        return CommandResult(args=args, returncode=returncode, output=output)
