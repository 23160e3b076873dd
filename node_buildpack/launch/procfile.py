"""Default Procfile synthesis."""

from __future__ import annotations

from pathlib import Path

from node_buildpack.errors import BuildError
from node_buildpack.logging import BuildLog
from node_buildpack.types import PackageMetadata

ENTRY_FILE = "server.js"
START_COMMAND = "npm start"


def ensure_procfile(build_dir: Path, pkg: PackageMetadata | None, build_log: BuildLog) -> bool:
    """Write `web: npm start` when no Procfile exists and npm can start the app.

    Returns True if a Procfile was written.
    """
    procfile = build_dir / "Procfile"
    if procfile.exists():
        return False

    has_start = bool(pkg and pkg.start_script)
    if not has_start and not (build_dir / ENTRY_FILE).exists():
        build_log.protip("Create a Procfile or specify a start script in package.json")
        return False

    build_log.topic(f"No Procfile found; Adding {START_COMMAND} to new Procfile")
    try:
        procfile.write_text(f"web: {START_COMMAND}\n", encoding="utf-8")
    except OSError as exc:
        raise BuildError(f"Unable to write Procfile: {exc}") from exc
    return True


def read_process_types(procfile: Path) -> dict[str, str]:
    if not procfile.exists():
        return {}
    types: dict[str, str] = {}
    for line in procfile.read_text(encoding="utf-8").splitlines():
        if not line.strip() or line.lstrip().startswith("#") or ":" not in line:
            continue
        name, command = line.split(":", 1)
        if name.strip() and command.strip():
            types[name.strip()] = command.strip()
    return types
