"""Node runtime download and install into `<build>/vendor/node`."""

from __future__ import annotations

import os
import shutil
import tarfile
import tempfile
from pathlib import Path

import httpx

from node_buildpack.errors import BuildError
from node_buildpack.logging import get_logger
from node_buildpack.security.archive import UnsafeArchiveError, safe_extract_tar
from node_buildpack.signing.checks import verify_archive

log = get_logger(__name__)


def archive_name(version: str, platform: str) -> str:
    return f"node-v{version}-{platform}.tar.gz"


def archive_url(dist_url: str, version: str, platform: str) -> str:
    return f"{dist_url.rstrip('/')}/v{version}/{archive_name(version, platform)}"


def _download(client: httpx.Client, url: str) -> Path:
    fd, name = tempfile.mkstemp(prefix="node-buildpack-", suffix=".tar.gz")
    tmpf = Path(name)
    try:
        with os.fdopen(fd, "wb") as out, client.stream("GET", url) as r:
            r.raise_for_status()
            for chunk in r.iter_bytes():
                out.write(chunk)
    except httpx.HTTPError as exc:
        tmpf.unlink(missing_ok=True)
        raise BuildError(f"Unable to download node from {url}: {exc}") from exc
    return tmpf


def _maybe_fetch_shasums(client: httpx.Client, dist_url: str, version: str) -> str | None:
    # Best-effort: mirrors without SHASUMS256.txt are accepted unverified.
    url = f"{dist_url.rstrip('/')}/v{version}/SHASUMS256.txt"
    try:
        resp = client.get(url)
    except httpx.HTTPError as exc:
        log.debug("no checksum list at %s: %s", url, exc)
        return None
    if resp.status_code != 200:
        return None
    return resp.text


def install_node(
    client: httpx.Client,
    build_dir: Path,
    version: str,
    *,
    dist_url: str,
    platform: str,
    verify: bool = True,
) -> Path:
    """Download node *version* and unpack it; return the install root.

    Any previous `vendor/node` is removed first so no file from an older
    runtime survives.
    """
    url = archive_url(dist_url, version, platform)
    name = archive_name(version, platform)
    target = build_dir / "vendor" / "node"
    if not target.parent.resolve().is_relative_to(build_dir.resolve()):
        raise BuildError(f"{target.parent} resolves outside the build directory")
    tarball = _download(client, url)
    try:
        if verify:
            shasums = _maybe_fetch_shasums(client, dist_url, version)
            if shasums and not verify_archive(tarball, shasums, name):
                log.debug("%s not listed in SHASUMS256.txt; skipping verification", name)
        try:
            if target.is_symlink() or target.is_file():
                target.unlink()
            elif target.exists():
                shutil.rmtree(target)
            safe_extract_tar(tarball, target, strip_components=1)
        except (UnsafeArchiveError, tarfile.TarError, OSError, EOFError) as exc:
            raise BuildError(f"Unable to unpack {url}: {exc}") from exc
    finally:
        tarball.unlink(missing_ok=True)
    return target
