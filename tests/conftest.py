from __future__ import annotations

import hashlib
import io
import json
import tarfile
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

import httpx
import pytest
from rich.console import Console

from node_buildpack.config import BuildpackConfig
from node_buildpack.errors import CommandError
from node_buildpack.logging import BuildLog
from node_buildpack.process import CommandResult, CommandRunner

RESOLVE_URL = "https://resolve.test/node/resolve"
DIST_URL = "https://dist.test/node"
TELEMETRY_URL = "https://telemetry.test/collect"


class FakeRunner(CommandRunner):
    """Records commands instead of executing them.

    *effects* maps a command prefix (e.g. ("npm", "install")) to a callable run
    with (cwd, env) to simulate what the real tool would leave on disk.
    """

    def __init__(self, build_log: BuildLog) -> None:
        super().__init__(build_log)
        self.calls: list[tuple[list[str], Path, dict | None]] = []
        self.effects: dict[tuple[str, ...], Callable[[Path, Mapping[str, str] | None], None]] = {}
        self.fail: dict[tuple[str, ...], int] = {}

    def _match(self, table: dict, args: list[str]):
        for prefix, value in table.items():
            if tuple(args[: len(prefix)]) == prefix:
                return value
        return None

    def run(self, cmd: Sequence[str], *, cwd: Path, env: Mapping[str, str] | None = None) -> CommandResult:
        args = [str(c) for c in cmd]
        self.calls.append((args, cwd, dict(env) if env is not None else None))
        code = self._match(self.fail, args)
        if code:
            raise CommandError(args, code, "simulated failure\n")
        effect = self._match(self.effects, args)
        if effect:
            effect(cwd, env)
        return CommandResult(args=args, returncode=0, output="")

    def commands(self) -> list[list[str]]:
        return [c[0] for c in self.calls]


def make_node_tarball(version: str = "1.2.3", platform: str = "linux-x64") -> bytes:
    top = f"node-v{version}-{platform}"
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for d in (top, f"{top}/bin", f"{top}/lib/node_modules/npm/bin"):
            info = tarfile.TarInfo(d)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        for name, data in (
            (f"{top}/bin/node", b"#!/bin/sh\necho node\n"),
            (f"{top}/lib/node_modules/npm/bin/npm-cli.js", b"// npm\n"),
        ):
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(data))
        link = tarfile.TarInfo(f"{top}/bin/npm")
        link.type = tarfile.SYMTYPE
        link.linkname = "../lib/node_modules/npm/bin/npm-cli.js"
        tar.addfile(link)
    return buf.getvalue()


class FakeServices:
    """httpx.MockTransport handler for the resolver, dist mirror and telemetry."""

    def __init__(self) -> None:
        self.version = "1.2.3"
        self.tarball = make_node_tarball(self.version)
        self.shasums: str | None = None
        self.resolve_status = 200
        self.dist_status = 200
        self.requests: list[httpx.Request] = []
        self.telemetry: list[bytes] = []

    def publish_shasums(self, digest: str | None = None) -> None:
        digest = digest or hashlib.sha256(self.tarball).hexdigest()
        self.shasums = f"{digest}  node-v{self.version}-linux-x64.tar.gz\n"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url.startswith(RESOLVE_URL):
            return httpx.Response(self.resolve_status, text=f"{self.version}\n")
        if url.startswith(TELEMETRY_URL):
            self.telemetry.append(request.read())
            return httpx.Response(204)
        if url.endswith("SHASUMS256.txt"):
            if self.shasums is None:
                return httpx.Response(404)
            return httpx.Response(200, text=self.shasums)
        if url.startswith(DIST_URL) and url.endswith(".tar.gz"):
            return httpx.Response(self.dist_status, content=self.tarball)
        return httpx.Response(404)

    def resolve_ranges(self) -> list[str]:
        return [
            r.url.params.get("range", "")
            for r in self.requests
            if str(r.url).startswith(RESOLVE_URL)
        ]


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=200, highlight=False)


@pytest.fixture
def build_log(console: Console) -> BuildLog:
    return BuildLog(console)


@pytest.fixture
def output(console: Console) -> Callable[[], str]:
    return lambda: console.file.getvalue()


@pytest.fixture
def runner(build_log: BuildLog) -> FakeRunner:
    return FakeRunner(build_log)


@pytest.fixture
def services() -> FakeServices:
    return FakeServices()


@pytest.fixture
def transport(services: FakeServices) -> httpx.MockTransport:
    return httpx.MockTransport(services)


@pytest.fixture
def config() -> BuildpackConfig:
    return BuildpackConfig(resolve_url=RESOLVE_URL, dist_url=DIST_URL, http_timeout=5.0)


def write_package_json(root: Path, data: dict) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    p = root / "package.json"
    p.write_text(json.dumps(data), encoding="utf-8")
    return p
