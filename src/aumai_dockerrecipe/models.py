"""Pydantic models for aumai-dockerrecipe."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "DecodedInstruction",
    "LayerRecord",
    "Region",
    "RuntimeInfo",
]


class LayerRecord(BaseModel):
    """
    One entry of an image's layer history, as reported by the engine.

    Accepts the engine's own payload keys (``CreatedBy``, ``Created``, ``Id``,
    ``Comment``, ``Tags``) as well as the field names.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    created_by: str = Field(default="", alias="CreatedBy")
    created: int = Field(default=0, alias="Created")
    id: str = Field(default="", alias="Id")
    comment: str = Field(default="", alias="Comment")
    tags: list[str] = Field(default_factory=list, alias="Tags")

    @field_validator("created_by", "id", "comment", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("created", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value


class Region(str, Enum):
    """Position of a layer relative to the image it belongs to."""

    FIRST = "first"
    INTERMEDIATE = "intermediate"
    LAST = "last"


class DecodedInstruction(BaseModel):
    """A history layer turned back into a build instruction."""

    model_config = ConfigDict(frozen=True)

    command: str
    comment: str = ""
    region: Region = Region.INTERMEDIATE
    created_at: int = 0
    layer_id: str = ""
    image_name: str = ""      # repository of the first tag, "last" layers only
    short_tags: list[str] = Field(default_factory=list)
    full_tags: list[str] = Field(default_factory=list)


class RuntimeInfo(BaseModel):
    """Runtime metadata of an image or container used to synthesize a recipe."""

    working_dir: str = ""
    env: list[str] = Field(default_factory=list)
    exposed_ports: list[str] = Field(default_factory=list)
    entrypoint: list[str] = Field(default_factory=list)
    cmd: list[str] = Field(default_factory=list)

    @classmethod
    def from_engine_config(cls, config: dict[str, Any] | None) -> RuntimeInfo:
        """Build from an engine ``Config`` block (``WorkingDir``, ``Env`` ...)."""
        config = config or {}
        return cls(
            working_dir=config.get("WorkingDir") or "",
            env=config.get("Env") or [],
            exposed_ports=list(config.get("ExposedPorts") or {}),
            entrypoint=config.get("Entrypoint") or [],
            cmd=config.get("Cmd") or [],
        )
