"""Shared Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PackageMetadata(BaseModel):
    """The slice of package.json the buildpack reads."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    version: str | None = None
    engines: dict[str, str] = Field(default_factory=dict)
    scripts: dict[str, str] = Field(default_factory=dict)

    @property
    def node_range(self) -> str | None:
        value = self.engines.get("node")
        return value.strip() if value and value.strip() else None

    @property
    def start_script(self) -> str | None:
        return self.scripts.get("start") or None


class DetectReport(BaseModel):
    """Normalized detection result.

    Attributes
    ----------
    lang: str | None
        "node" when package.json was found.
    package: PackageMetadata | None
        Parsed package.json, when present.
    notes: list[str]
        Free-form observations.
    """

    lang: str | None = None
    package: PackageMetadata | None = None
    notes: list[str] = []
