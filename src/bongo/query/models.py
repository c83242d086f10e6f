"""Query and result models for Bongo."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class QueryOptions(BaseModel):
    """Sort and pagination options for reads.
    
    Omitted options omit the matching SQL clause.
    """

    model_config = ConfigDict(frozen=True)

    sort: Optional[dict[str, int]] = Field(
        default=None,
        description="Field to direction; positive is ascending, otherwise descending",
    )
    limit: Optional[int] = Field(default=None, ge=0)
    offset: Optional[int] = Field(default=None, ge=0)


class InsertResult(BaseModel):
    """Result of a single-document insert."""

    model_config = ConfigDict(frozen=True)

    inserted_id: str


class UpdateResult(BaseModel):
    """Result of an update."""

    model_config = ConfigDict(frozen=True)

    matched_count: int = 0
    modified_count: int = 0


class DeleteResult(BaseModel):
    """Result of a delete."""

    model_config = ConfigDict(frozen=True)

    deleted_count: int = 0
