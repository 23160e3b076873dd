"""Schema validation for package.json."""

from __future__ import annotations

import json
from importlib import resources

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from node_buildpack.errors import BuildError


def _load_schema(package: str, resource_name: str) -> dict:
    with resources.files(package).joinpath(resource_name).open("r", encoding="utf-8") as f:
        return json.load(f)


def _package_schema() -> dict:
    return _load_schema("node_buildpack.schema", "package.schema.json")


def validate_package_json(data: dict) -> None:
    """Raise BuildError if *data* has the wrong shape for the fields we read."""
    try:
        Draft202012Validator(_package_schema()).validate(data)
    except ValidationError as exc:
        where = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise BuildError(f"Invalid package.json at {where}: {exc.message}") from exc
