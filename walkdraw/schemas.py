"""
Request and response bodies for the public API.

Field names are snake_case in Python and camelCase on the wire, matching what
the mobile client sends and expects.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator
from pydantic.alias_generators import to_camel

from walkdraw.models import DistanceRecord, Drawing, Team, coerce_bool, coerce_id_list


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Shared
# =============================================================================

class Coordinate(BaseModel):
    lat: float
    lng: float


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: str = Field(..., description="Machine-readable error code")
    details: dict[str, Any] | None = Field(None, description="Additional error context")


class Message(CamelModel):
    success: bool = True
    message: str


# =============================================================================
# Prompt relay
# =============================================================================

class RelayRequest(BaseModel):
    query: StrictStr


class RelayResponse(BaseModel):
    response: str


# =============================================================================
# Distance ledger
# =============================================================================

class DistanceUpdate(CamelModel):
    email: StrictStr = Field(min_length=1)
    distance: StrictInt | StrictFloat
    username: str | None = None
    timestamp: datetime | None = None


class DistanceUpdateResponse(Message):
    total_distance: float


class LeaderboardEntry(CamelModel):
    username: str
    distance: float

    @classmethod
    def from_record(cls, record: DistanceRecord) -> "LeaderboardEntry":
        return cls(username=record.username, distance=record.distance)


# =============================================================================
# Drawings
# =============================================================================

class DrawingCreate(CamelModel):
    email: StrictStr = Field(min_length=1)
    coordinates: list[Coordinate]
    username: str | None = None
    timestamp: datetime | None = None
    is_public: bool = False
    team_ids: list[str] = Field(default_factory=list)

    @field_validator("is_public", mode="before")
    @classmethod
    def _coerce_is_public(cls, v: Any) -> bool:
        return coerce_bool(v)

    @field_validator("team_ids", mode="before")
    @classmethod
    def _coerce_team_ids(cls, v: Any) -> list[str]:
        return coerce_id_list(v)


class DrawingCreated(Message):
    drawing_id: uuid.UUID


class VoteRequest(CamelModel):
    drawing_id: StrictStr = Field(min_length=1)
    voter_email: StrictStr = Field(min_length=1)


class DrawingPublic(CamelModel):
    id: uuid.UUID
    username: str
    coordinates: list[Coordinate]
    created_at: datetime
    vote_count: int
    is_public: bool

    @classmethod
    def from_drawing(cls, drawing: Drawing) -> "DrawingPublic":
        # The owner's email is deliberately left out
        return cls(
            id=drawing.id,
            username=drawing.username,
            coordinates=drawing.coordinates,
            created_at=drawing.created_at,
            vote_count=drawing.vote_count,
            is_public=drawing.is_public,
        )


# =============================================================================
# Teams
# =============================================================================

class TeamCreate(CamelModel):
    team_name: StrictStr = Field(min_length=1)
    email: StrictStr = Field(min_length=1)


class TeamCreated(Message):
    team_id: uuid.UUID


class TeamPublic(CamelModel):
    id: uuid.UUID
    team_name: str
    creator_email: str
    created_at: datetime

    @classmethod
    def from_team(cls, team: Team) -> "TeamPublic":
        return cls(
            id=team.id,
            team_name=team.team_name,
            creator_email=team.creator_email,
            created_at=team.created_at,
        )
