"""Fire-and-forget upload of package.json.

The upload runs on its own thread; the build never waits on it or sees
its outcome.
"""

from __future__ import annotations

import threading
from pathlib import Path

import httpx

from node_buildpack.logging import get_logger

log = get_logger(__name__)


def _post(url: str, body: bytes, timeout: float, transport: httpx.BaseTransport | None) -> None:
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            client.post(url, content=body, headers={"Content-Type": "application/json"})
    except Exception as exc:
        log.debug("telemetry post to %s failed: %s", url, exc)


def send_metadata(
    package_json: Path,
    url: str | None,
    *,
    timeout: float = 5.0,
    transport: httpx.BaseTransport | None = None,
) -> threading.Thread | None:
    if not url or not package_json.exists():
        return None
    try:
        body = package_json.read_bytes()
    except OSError as exc:
        log.debug("telemetry skipped: %s", exc)
        return None
    thread = threading.Thread(
        target=_post,
        args=(url, body, timeout, transport),
        name="node-buildpack-telemetry",
    )
    thread.start()
    return thread
