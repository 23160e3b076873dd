"""Dependency cache between builds.

The cache directory holds flat copies of dependency trees
(`<cache>/node_modules`, `<cache>/<bower components dir>`). Saving always
replaces the cached copy so it mirrors the build tree.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from node_buildpack.errors import BuildError
from node_buildpack.installer.npm import Npm
from node_buildpack.logging import BuildLog

NODE_MODULES = "node_modules"


def _copy_tree(src: Path, dst: Path) -> None:
    shutil.copytree(src, dst, symlinks=True)


def _remove(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)


def restore_dependency_dir(build_dir: Path, cache_dir: Path, name: str) -> bool:
    """Copy `<cache>/<name>` into the build. Returns True if something was restored."""
    cached = cache_dir / name
    if not cached.is_dir():
        return False
    target = build_dir / name
    try:
        _remove(target)
        _copy_tree(cached, target)
    except OSError as exc:
        raise BuildError(f"Unable to restore {name} from cache: {exc}") from exc
    return True


def save_dependency_dir(build_dir: Path, cache_dir: Path, name: str) -> None:
    cached = cache_dir / name
    src = build_dir / name
    try:
        _remove(cached)
        if src.is_dir():
            cache_dir.mkdir(parents=True, exist_ok=True)
            _copy_tree(src, cached)
    except OSError as exc:
        raise BuildError(f"Unable to cache {name}: {exc}") from exc


def restore_node_modules(build_dir: Path, cache_dir: Path, npm: Npm, build_log: BuildLog) -> str:
    """Prepare `node_modules` before install.

    Returns which path was taken: "rebuild", "restore" or "none".
    """
    if (build_dir / NODE_MODULES).is_dir():
        build_log.topic("Found existing node_modules directory; skipping cache")
        build_log.topic("Rebuilding any native dependencies")
        npm.rebuild()
        return "rebuild"

    if restore_dependency_dir(build_dir, cache_dir, NODE_MODULES):
        build_log.topic("Restoring node_modules directory from cache")
        build_log.topic("Pruning cached dependencies not specified in package.json")
        npm.prune()
        return "restore"

    return "none"
