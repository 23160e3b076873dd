"""package.json reader and Node.js detector.

Heuristics:
- No package.json → not a Node.js app.
- package.json present → Node.js app; `engines.node` and `scripts.start`
  are reported as notes on stderr by the detect command.
"""

from __future__ import annotations

import json
from pathlib import Path

from node_buildpack.errors import BuildError
from node_buildpack.types import DetectReport, PackageMetadata
from node_buildpack.validator import validate_package_json


def read_package_json(root: Path) -> PackageMetadata | None:
    pj = root / "package.json"
    if not pj.exists():
        return None
    try:
        data = json.loads(pj.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise BuildError(f"Unable to parse package.json: {exc}") from exc
    if not isinstance(data, dict):
        raise BuildError("Unable to parse package.json: top level must be an object")
    validate_package_json(data)
    return PackageMetadata.model_validate(data)


def detect(root: Path) -> DetectReport:
    pkg = read_package_json(root)
    if pkg is None:
        return DetectReport(notes=["No package.json found"])

    notes = ["Found package.json"]
    if pkg.node_range:
        notes.append(f"engines.node = {pkg.node_range}")
    if pkg.start_script:
        notes.append(f"scripts.start = {pkg.start_script}")
    return DetectReport(lang="node", package=pkg, notes=notes)
