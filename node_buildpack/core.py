"""Compile orchestration: resolve → fetch → deps → bower → Procfile → profile → telemetry.

Every step either succeeds or raises; the first failure aborts the build and
leaves the build directory as-is for the platform to discard.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from node_buildpack.cache import NODE_MODULES, restore_node_modules, save_dependency_dir
from node_buildpack.config import BuildpackConfig
from node_buildpack.detect.package_json import read_package_json
from node_buildpack.errors import BuildError
from node_buildpack.installer.bower import install_bower_components
from node_buildpack.installer.env import build_env, read_env_path
from node_buildpack.installer.npm import Npm
from node_buildpack.launch.procfile import ensure_procfile
from node_buildpack.launch.profile import write_profile
from node_buildpack.logging import BuildLog, get_logger
from node_buildpack.process import CommandRunner
from node_buildpack.runtime.fetch import install_node
from node_buildpack.runtime.resolve import resolve_node_version
from node_buildpack.telemetry import send_metadata

log = get_logger(__name__)


@dataclass
class BuildContext:
    build_dir: Path
    cache_dir: Path
    env_path: Path | None = None
    config: BuildpackConfig = field(default_factory=BuildpackConfig)


@dataclass
class CompileResult:
    requested_range: str
    node_version: str
    node_modules: str
    bower_installed: bool
    procfile_written: bool
    telemetry: threading.Thread | None = None


def compile_pipeline(
    ctx: BuildContext,
    *,
    build_log: BuildLog | None = None,
    runner: CommandRunner | None = None,
    transport: httpx.BaseTransport | None = None,
) -> CompileResult:
    build_log = build_log or BuildLog()
    runner = runner or CommandRunner(build_log)
    cfg = ctx.config
    build_dir = ctx.build_dir.resolve()
    cache_dir = ctx.cache_dir.resolve()
    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BuildError(f"Unable to create cache directory {cache_dir}: {exc}") from exc

    pkg = read_package_json(build_dir)

    with httpx.Client(timeout=cfg.http_timeout, transport=transport, follow_redirects=True) as client:
        resolution = resolve_node_version(client, cfg.resolve_url, pkg.node_range if pkg else None)
        build_log.topic(f"Requested node range: {resolution.requested}")
        for advisory in resolution.advisories:
            build_log.protip(advisory)
        build_log.topic(f"Resolved node version: {resolution.version}")

        build_log.topic("Downloading and installing node")
        node_home = install_node(
            client,
            build_dir,
            resolution.version,
            dist_url=cfg.dist_url,
            platform=cfg.platform,
            verify=cfg.verify_checksum,
        )

    path_prefix = [node_home / "bin", build_dir / NODE_MODULES / ".bin"]
    step_env = build_env({}, cfg.env_policy, path_prefix)
    npm = Npm(runner, build_dir, env=step_env)

    node_modules = restore_node_modules(build_dir, cache_dir, npm, build_log)

    imported = read_env_path(ctx.env_path)
    if imported:
        build_log.topic("Exporting config vars to environment")
        skipped = sorted(k for k in imported if not cfg.env_policy.permits(k))
        if skipped:
            log.debug("not exporting denied config vars: %s", skipped)
    build_log.topic("Installing dependencies")
    npm.install(env=build_env(imported, cfg.env_policy, path_prefix))

    build_log.topic("Caching node_modules directory for future builds")
    save_dependency_dir(build_dir, cache_dir, NODE_MODULES)

    bower_installed = install_bower_components(
        runner,
        npm,
        build_dir,
        cache_dir,
        build_log,
        env=step_env,
        restore_cache=cfg.restore_bower_cache,
    )

    procfile_written = ensure_procfile(build_dir, pkg, build_log)

    build_log.topic("Building runtime environment")
    write_profile(build_dir)

    thread = send_metadata(build_dir / "package.json", cfg.telemetry_url, transport=transport)

    return CompileResult(
        requested_range=resolution.requested,
        node_version=resolution.version,
        node_modules=node_modules,
        bower_installed=bower_installed,
        procfile_written=procfile_written,
        telemetry=thread,
    )
