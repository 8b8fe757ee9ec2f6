"""
OpenAI proxy API schemas.

Upload, vector store and moderation results are passed through from the
OpenAI API unchanged, so only requests and the trimmed model listing
have models here.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class VectorStoreCreateRequest(BaseModel):
    """Create a vector store from previously uploaded files."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "file_ids": ["file-abc123"],
                "name": "Quarterly reports",
                "expires_in_days": 7,
            }
        }
    )

    file_ids: list[str] = Field(..., min_length=1, description="Uploaded file IDs to index")
    name: str | None = Field(default=None, description="Store name; a default is used when blank")
    expires_in_days: int | None = Field(
        default=None,
        ge=1,
        le=365,
        description="Expire the store this many days after it was last used",
    )


class ModerationRequest(BaseModel):
    """Text to run through the moderation endpoint."""

    input: str = Field(..., min_length=1, description="Text to classify")


class ModelListResponse(BaseModel):
    """Chat-capable model IDs available to the account."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"models": ["gpt-4.1", "gpt-4o", "o3-mini"]}},
    )

    models: list[str] = Field(default_factory=list, description="Sorted model IDs")
