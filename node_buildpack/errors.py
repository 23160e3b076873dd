"""Build failures. Anything raised from here aborts the compile."""

from __future__ import annotations


class BuildError(Exception):
    exit_code = 1


class CommandError(BuildError):
    def __init__(self, args: list[str], returncode: int, output: str = "") -> None:
        self.command = list(args)
        self.returncode = returncode
        self.output = output
        super().__init__(f"Command {' '.join(self.command)!r} failed with exit code {returncode}")

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return self.returncode or 1
