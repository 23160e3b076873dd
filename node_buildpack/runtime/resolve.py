"""Node version resolution.

Sends the `engines.node` range to the resolution service and returns the
concrete version it picks. An empty range asks the service for the latest
stable release. Risky ranges produce advisories but never fail the build.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import httpx

from node_buildpack.errors import BuildError
from node_buildpack.logging import get_logger

log = get_logger(__name__)

LATEST_STABLE = "latest stable"
_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+$")


@dataclass
class Resolution:
    requested: str
    version: str
    advisories: list[str] = field(default_factory=list)


def advisories_for(node_range: str | None) -> list[str]:
    if node_range is None:
        return ["Specify a node version in package.json"]
    if node_range == "*":
        return ["Avoid using semver ranges like '*' in engines.node"]
    if node_range.startswith(">"):
        return ["Avoid using semver ranges starting with '>' in engines.node"]
    return []


def resolve_node_version(client: httpx.Client, resolve_url: str, node_range: str | None) -> Resolution:
    advisories = advisories_for(node_range)
    try:
        resp = client.get(resolve_url, params={"range": node_range or ""})
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise BuildError(f"Unable to resolve node version for range {node_range!r}: {exc}") from exc

    version = resp.text.strip().lstrip("v")
    if not _VERSION_RE.match(version):
        raise BuildError(f"Resolution service returned an invalid version: {resp.text.strip()!r}")
    log.debug("resolved %r -> %s", node_range, version)
    return Resolution(requested=node_range or LATEST_STABLE, version=version, advisories=advisories)
