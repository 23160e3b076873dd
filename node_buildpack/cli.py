"""node-buildpack CLI — the platform's detect / compile / release entry points.

compile BUILD_DIR CACHE_DIR [ENV_PATH]
    Install node, dependencies and launch files into BUILD_DIR.
detect BUILD_DIR
    Print "Node.js" and exit 0 if BUILD_DIR holds a package.json.
release BUILD_DIR
    Print release metadata (YAML) for the platform.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from node_buildpack.config import BuildpackConfig
from node_buildpack.core import BuildContext, compile_pipeline
from node_buildpack.detect.package_json import detect as detect_node
from node_buildpack.errors import BuildError
from node_buildpack.launch.procfile import read_process_types
from node_buildpack.logging import BuildLog, get_logger

app = typer.Typer(add_completion=False, help="Prepare Node.js apps for deployment")
console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False)
log = get_logger(__name__)

DEBUG_LOG = "npm-debug.log"


@app.command()
def detect(build_dir: str = typer.Argument(..., help="Application source directory")) -> None:
    try:
        report = detect_node(Path(build_dir))
    except BuildError as exc:
        err_console.print(str(exc), style="red", markup=False)
        raise typer.Exit(code=1) from exc
    # stdout carries only the detected name; observations go to stderr
    for note in report.notes:
        err_console.print(note, markup=False)
    if report.lang != "node":
        raise typer.Exit(code=1)
    print("Node.js")


def _abort(build_log: BuildLog, build_dir: str, message: str, code: int) -> typer.Exit:
    build_log.dump(Path(build_dir) / DEBUG_LOG)
    err_console.print(f" !     {message}", style="red", markup=False)
    return typer.Exit(code=code)


@app.command(name="compile")
def compile_(
    build_dir: str = typer.Argument(..., help="Build output directory (app source)"),
    cache_dir: str = typer.Argument(..., help="Directory persisted between builds"),
    env_path: str | None = typer.Argument(None, help="Config vars: KEY=VALUE file or env dir"),
) -> None:
    build_log = BuildLog(console)
    try:
        ctx = BuildContext(
            build_dir=Path(build_dir),
            cache_dir=Path(cache_dir),
            env_path=Path(env_path) if env_path else None,
            config=BuildpackConfig.from_env(),
        )
        compile_pipeline(ctx, build_log=build_log)
    except BuildError as exc:
        log.debug("compile failed", exc_info=True)
        raise _abort(build_log, build_dir, str(exc), exc.exit_code) from exc
    except Exception as exc:
        log.error("compile failed unexpectedly", exc_info=True)
        raise _abort(build_log, build_dir, f"{type(exc).__name__}: {exc}", 1) from exc


@app.command()
def release(build_dir: str = typer.Argument(..., help="Compiled build directory")) -> None:
    types = read_process_types(Path(build_dir) / "Procfile")
    lines = ["---", "addons: []"]
    if types:
        lines.append("default_process_types:")
        lines.extend(f"  {name}: {json.dumps(cmd)}" for name, cmd in types.items())
    else:
        lines.append("default_process_types: {}")
    print("\n".join(lines))


if __name__ == "__main__":
    app()
