from __future__ import annotations

from pathlib import Path

from node_buildpack.errors import BuildError

PROFILE_NAME = "nodejs.sh"
PATH_EXPORT = 'export PATH="$HOME/vendor/node/bin:$HOME/bin:$HOME/node_modules/.bin:$PATH"\n'


def write_profile(build_dir: Path) -> Path:
    """Write the `.profile.d` snippet that puts node on PATH at dyno start."""
    profile_dir = build_dir / ".profile.d"
    path = profile_dir / PROFILE_NAME
    try:
        profile_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(PATH_EXPORT, encoding="utf-8")
    except OSError as exc:
        raise BuildError(f"Unable to write {path}: {exc}") from exc
    return path
