import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

ANONYMOUS_USERNAME = "Anonymous"


def get_datetime_utc() -> datetime:
    return datetime.now(timezone.utc)


_TRUE_STRINGS = {"true", "1", "yes", "on"}


def coerce_bool(value: Any) -> bool:
    """Loose boolean coercion for flags sent by older clients."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, int | float):
        return value != 0
    return False


def coerce_id_list(value: Any) -> list[str]:
    """Keep non-empty string ids in first-seen order; anything else is dropped."""
    if not isinstance(value, list | tuple):
        return []
    seen: set[str] = set()
    ids: list[str] = []
    for item in value:
        if not isinstance(item, str):
            continue
        item = item.strip()
        if not item or item in seen:
            continue
        seen.add(item)
        ids.append(item)
    return ids


# One cumulative distance record per user identity
class DistanceRecord(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    username: str = Field(default=ANONYMOUS_USERNAME, max_length=255)
    distance: float = 0.0
    last_updated: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class Drawing(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    # Owner identity, never returned by listings
    email: str = Field(index=True, max_length=255)
    username: str = Field(default=ANONYMOUS_USERNAME, max_length=255)
    coordinates: list[dict] = Field(default_factory=list, sa_type=JSON)  # [{"lat": .., "lng": ..}]
    created_at: datetime = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
        index=True,
    )
    is_public: bool = Field(default=False, index=True)
    # Weak back-references to Team.id, stored as strings
    team_ids: list[str] = Field(default_factory=list, sa_type=JSON)
    vote_count: int = Field(default=0, index=True)
    votes: list["DrawingVote"] = Relationship(
        back_populates="drawing",
        sa_relationship_kwargs={"order_by": "DrawingVote.created_at"},
    )


class DrawingVote(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("drawing_id", "voter_email", name="uq_drawingvote_drawing_voter"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    drawing_id: uuid.UUID = Field(foreign_key="drawing.id", nullable=False, index=True)
    voter_email: str = Field(max_length=255)
    created_at: datetime = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    drawing: Drawing | None = Relationship(back_populates="votes")


class Team(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    team_name: str = Field(min_length=1, max_length=255)
    creator_email: str = Field(index=True, max_length=255)
    created_at: datetime = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
        index=True,
    )
    # Set semantics: each drawing id appears at most once
    drawing_ids: list[str] = Field(default_factory=list, sa_type=JSON)
