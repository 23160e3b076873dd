"""Front-end components via bower.

Runs only when the app ships a `bower.json`. Bower itself is installed
locally with npm if the app does not already depend on it.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

from node_buildpack.cache import restore_dependency_dir, save_dependency_dir
from node_buildpack.installer.npm import Npm
from node_buildpack.logging import BuildLog, get_logger
from node_buildpack.process import CommandRunner

log = get_logger(__name__)

DEFAULT_COMPONENTS_DIR = "bower_components"


def components_dir(build_dir: Path) -> str:
    """Return the components directory name, honoring `.bowerrc`."""
    rc = build_dir / ".bowerrc"
    if not rc.exists():
        return DEFAULT_COMPONENTS_DIR
    try:
        data = json.loads(rc.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        log.warning("ignoring unparsable .bowerrc")
        return DEFAULT_COMPONENTS_DIR
    directory = data.get("directory") if isinstance(data, dict) else None
    if isinstance(directory, str) and directory.strip() and ".." not in Path(directory).parts:
        return directory.strip().strip("/")
    return DEFAULT_COMPONENTS_DIR


def install_bower_components(
    runner: CommandRunner,
    npm: Npm,
    build_dir: Path,
    cache_dir: Path,
    build_log: BuildLog,
    *,
    env: Mapping[str, str] | None = None,
    restore_cache: bool = False,
) -> bool:
    """Install bower components. Returns False when there is no bower.json."""
    if not (build_dir / "bower.json").exists():
        return False

    name = components_dir(build_dir)
    build_log.topic("Found bower.json, installing bower components")

    if restore_cache and not (build_dir / name).exists():
        if restore_dependency_dir(build_dir, cache_dir, name):
            build_log.topic(f"Restoring {name} directory from cache")

    bower_bin = build_dir / "node_modules" / ".bin" / "bower"
    if not bower_bin.exists():
        npm.install_package("bower")
    runner.run(
        [str(bower_bin), "install", "--production", "--config.interactive=false"],
        cwd=build_dir,
        env=env,
    )

    build_log.topic(f"Caching {name} directory for future builds")
    save_dependency_dir(build_dir, cache_dir, name)
    return True
