"""Safe tarball extraction for runtime archives.

Guards against common archive attacks:
- Path traversal (../) and absolute paths
- Symlink and hardlink escapes
- Oversized members (basic cap)

Supports `strip_components` like `tar --strip-components`.
"""

from __future__ import annotations

import os
import shutil
import stat
import tarfile
from pathlib import Path, PurePosixPath

MAX_MEMBER_BYTES = 512 * 1024 * 1024  # node binaries are ~100 MiB


class UnsafeArchiveError(RuntimeError):
    pass


def _is_within(base: Path, target: Path) -> bool:
    try:
        target.relative_to(base)
        return True
    except ValueError:
        return False


def _clear(target: Path) -> None:
    # never write through a link or file already sitting at the member path
    if target.is_symlink() or target.is_file():
        target.unlink()


def _strip(name: str, count: int) -> PurePosixPath | None:
    parts = [p for p in PurePosixPath(name).parts if p not in {"", "."}]
    if PurePosixPath(name).is_absolute() or ".." in parts:
        raise UnsafeArchiveError(f"Unsafe member path: {name}")
    parts = parts[count:]
    return PurePosixPath(*parts) if parts else None


def safe_extract_tar(archive: Path, dest: Path, strip_components: int = 0) -> None:
    dest.mkdir(parents=True, exist_ok=True)
    base = dest.resolve()
    with tarfile.open(archive, "r:*") as tar:
        for m in tar.getmembers():
            rel = _strip(m.name, strip_components)
            if rel is None:
                continue
            target = base / rel
            if not _is_within(base, target.parent.resolve() / target.name):
                raise UnsafeArchiveError(f"Member escapes destination: {m.name}")

            if m.isdir():
                target.mkdir(parents=True, exist_ok=True)
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            if m.issym():
                link_target = (target.parent / m.linkname).resolve()
                if PurePosixPath(m.linkname).is_absolute() or not _is_within(base, link_target):
                    raise UnsafeArchiveError(f"Symlink escapes destination: {m.name} -> {m.linkname}")
                _clear(target)
                os.symlink(m.linkname, target)
                continue

            if m.islnk():
                src_rel = _strip(m.linkname, strip_components)
                if src_rel is None:
                    raise UnsafeArchiveError(f"Hardlink target stripped away: {m.name}")
                src = base / src_rel
                if not _is_within(base, src.resolve()):
                    raise UnsafeArchiveError(f"Hardlink escapes destination: {m.name}")
                _clear(target)
                shutil.copy2(src, target)
                continue

            if not m.isfile():
                # device nodes, fifos: never expected in a runtime archive
                continue
            if m.size > MAX_MEMBER_BYTES:
                raise UnsafeArchiveError(f"Member too large: {m.name} ({m.size} bytes)")

            fileobj = tar.extractfile(m)
            if fileobj is None:
                continue
            _clear(target)
            with fileobj as src, open(target, "wb") as out:
                shutil.copyfileobj(src, out)
            os.chmod(target, stat.S_IMODE(m.mode) & ~stat.S_ISUID & ~stat.S_ISGID)
