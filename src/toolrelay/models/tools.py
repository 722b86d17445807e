"""Pydantic models for tool registry API responses."""

from typing import Any

from pydantic import BaseModel, Field


class ToolInfo(BaseModel):
    """One tool of the current registry snapshot.

    Attributes:
        name: Tool name
        server_id: Id of the server providing the tool
        description: Enriched description shown to the model
        parameters: JSON Schema of the tool's arguments
        schema_valid: False when the declared schema was unusable
        cacheable: Whether results are cached
    """

    name: str = Field(..., description="Tool name")
    server_id: str = Field(..., description="Id of the server providing the tool")
    description: str = Field(..., description="Description shown to the model")
    parameters: dict[str, Any] = Field(
        default_factory=dict, description="JSON Schema of the tool's arguments"
    )
    schema_valid: bool = Field(default=True, description="Whether the declared schema was usable")
    cacheable: bool = Field(default=True, description="Whether results are cached")


class ToolListResponse(BaseModel):
    """Response model for the current tool registry snapshot."""

    tools: list[ToolInfo] = Field(default_factory=list, description="Available tools")
    built_at: str | None = Field(default=None, description="When the snapshot was built")


class CacheClearedResponse(BaseModel):
    """Response model for clearing the execution cache."""

    cleared: bool = Field(default=True, description="Whether the cache was cleared")
