"""Wire payloads for serialized resource sets."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

CacheManifest = dict[str, list[str | None]]


class ApiModel(BaseModel):
    """Base wire model with camelCase aliases enabled."""

    model_config = ConfigDict(populate_by_name=True)


class SerializedAlternative(ApiModel):
    """Alternative representation of a resource."""

    mime_type: str = Field(alias="mimeType")
    content: str | None = None
    encoding: str | None = None


class SerializedResource(ApiModel):
    """Single resource entry of a serialized resource set."""

    path: str
    etag: str | None = None
    encoding: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    content: str | None = None
    backend: str | None = None
    combine: list[str] | None = None
    alternatives: list[SerializedAlternative] | None = None

    def to_spec(self) -> dict[str, Any]:
        """Return the resource properties accepted by ``ResourceSet.add_resource``."""
        return self.model_dump(exclude_none=True, exclude={"alternatives"})


class ResourceSetPayload(ApiModel):
    """Envelope transmitted for a whole resource set."""

    resources: list[SerializedResource] = Field(default_factory=list)
    load_path: list[str] = Field(default_factory=list, alias="loadPath")

    def to_wire(self) -> dict[str, Any]:
        """Dump the payload with wire aliases, dropping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
