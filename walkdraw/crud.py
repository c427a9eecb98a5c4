import logging
import math
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from walkdraw.core.config import settings
from walkdraw.exceptions import DuplicateVote, Forbidden, InvalidInput, NotFound, StoreError
from walkdraw.models import (
    ANONYMOUS_USERNAME,
    DistanceRecord,
    Drawing,
    DrawingVote,
    Team,
    coerce_bool,
    coerce_id_list,
    get_datetime_utc,
)

logger = logging.getLogger(__name__)

SORT_BY_VOTES = "votes"
SORT_BY_DATE = "date"


@contextmanager
def store_operation(session: Session, operation: str) -> Iterator[None]:
    """Roll back and surface any database failure as a StoreError."""
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Store failure during %s", operation)
        raise StoreError(f"Database error during {operation}") from exc


def _require_str(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidInput(f"Request must include a '{field}' parameter of type string")
    return value


def _is_number(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, int | float) and math.isfinite(value)


def _parse_uuid(value: Any) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def resolve_username(requested: Any, stored: str | None = None) -> str:
    """Pick the display name: the request value, else the stored one, else "Anonymous"."""
    if isinstance(requested, str) and requested.strip():
        return requested
    if stored:
        return stored
    return ANONYMOUS_USERNAME


def _normalize_coordinates(coordinates: Any) -> list[dict[str, float]]:
    if not isinstance(coordinates, list | tuple):
        raise InvalidInput("Request must include 'coordinates' as an array")
    points: list[dict[str, float]] = []
    for point in coordinates:
        if not isinstance(point, dict):
            raise InvalidInput("Each coordinate must be an object with 'lat' and 'lng'")
        lat, lng = point.get("lat"), point.get("lng")
        if not _is_number(lat) or not _is_number(lng):
            raise InvalidInput("Each coordinate must have numeric 'lat' and 'lng'")
        points.append({"lat": float(lat), "lng": float(lng)})
    return points


def _normalize_team_ids(team_ids: Any) -> list[str]:
    normalized: list[str] = []
    for raw in coerce_id_list(team_ids):
        team_uuid = _parse_uuid(raw)
        if team_uuid is None:
            logger.info("Dropping malformed team id %r", raw)
            continue
        if str(team_uuid) not in normalized:
            normalized.append(str(team_uuid))
    return normalized


# =============================================================================
# Distance ledger
# =============================================================================

def accumulate_distance(
    *,
    session: Session,
    email: Any,
    distance: Any,
    username: Any = None,
    timestamp: datetime | None = None,
) -> tuple[DistanceRecord, bool]:
    """Add ``distance`` to the caller's running total, creating the record if needed.

    Returns the stored record and whether it was created by this call.
    """
    email = _require_str(email, "email")
    if not _is_number(distance):
        raise InvalidInput("Request must include a 'distance' parameter of type number")
    if distance < 0:
        if not settings.ALLOW_NEGATIVE_DISTANCE:
            raise InvalidInput("'distance' must not be negative")
        logger.warning("Accepting negative distance delta %s for %s", distance, email)

    last_updated = timestamp or get_datetime_utc()
    with store_operation(session, "distance update"):
        record = _distance_record_for_update(session, email)
        if record is None:
            record = DistanceRecord(
                email=email,
                distance=float(distance),
                username=resolve_username(username),
                last_updated=last_updated,
            )
            session.add(record)
            try:
                session.commit()
            except IntegrityError as exc:
                # A concurrent request created the record first; add to its total instead
                session.rollback()
                record = _distance_record_for_update(session, email)
                if record is None:
                    raise StoreError("Database error during distance update") from exc
                logger.info("Distance record for %s created concurrently; updating it", email)
            else:
                session.refresh(record)
                return record, True

        record.distance = (record.distance or 0.0) + float(distance)
        record.username = resolve_username(username, record.username)
        record.last_updated = last_updated
        session.add(record)
        session.commit()
        session.refresh(record)
    return record, False


def _distance_record_for_update(session: Session, email: str) -> DistanceRecord | None:
    return session.exec(
        select(DistanceRecord).where(DistanceRecord.email == email).with_for_update()
    ).first()


def get_leaderboard(*, session: Session, limit: int | None = None) -> list[DistanceRecord]:
    statement = (
        select(DistanceRecord)
        .order_by(col(DistanceRecord.distance).desc())
        .limit(limit or settings.LEADERBOARD_LIMIT)
    )
    with store_operation(session, "leaderboard read"):
        return list(session.exec(statement).all())


# =============================================================================
# Drawings
# =============================================================================

def create_drawing(
    *,
    session: Session,
    email: Any,
    coordinates: Any,
    username: Any = None,
    timestamp: datetime | None = None,
    is_public: Any = False,
    team_ids: Any = None,
) -> Drawing:
    email = _require_str(email, "email")
    points = _normalize_coordinates(coordinates)
    drawing = Drawing(
        email=email,
        username=resolve_username(username),
        coordinates=points,
        created_at=timestamp or get_datetime_utc(),
        is_public=coerce_bool(is_public),
        team_ids=_normalize_team_ids(team_ids),
        vote_count=0,
    )
    with store_operation(session, "drawing insert"):
        session.add(drawing)
        session.commit()
        session.refresh(drawing)

    if drawing.team_ids:
        attach_drawing_to_teams(session=session, drawing_id=drawing.id, team_ids=drawing.team_ids)
        # Team commits and rollbacks expire the instance; reload it while errors still map to StoreError
        with store_operation(session, "drawing reload"):
            session.refresh(drawing)
    return drawing


def attach_drawing_to_teams(
    *, session: Session, drawing_id: uuid.UUID, team_ids: list[str]
) -> list[str]:
    """Add ``drawing_id`` to each team's drawing set, one transaction per team.

    A team that is missing or fails to update is logged and skipped. Returns
    the ids of the teams that now reference the drawing.
    """
    drawing_key = str(drawing_id)
    attached: list[str] = []
    for team_id in team_ids:
        team_uuid = _parse_uuid(team_id)
        if team_uuid is None:
            logger.warning("Skipping malformed team id %r for drawing %s", team_id, drawing_key)
            continue
        try:
            team = session.exec(select(Team).where(Team.id == team_uuid).with_for_update()).first()
            if team is None:
                session.rollback()
                logger.warning("Team %s not found; drawing %s not attached", team_id, drawing_key)
                continue
            if drawing_key not in team.drawing_ids:
                # Reassign so the JSON column is flagged dirty
                team.drawing_ids = [*team.drawing_ids, drawing_key]
                session.add(team)
            session.commit()
            attached.append(team_id)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.warning("Failed to attach drawing %s to team %s: %s", drawing_key, team_id, exc)
    return attached


def vote_on_drawing(*, session: Session, drawing_id: Any, voter_email: Any) -> DrawingVote:
    drawing_id = _require_str(drawing_id, "drawingId")
    voter_email = _require_str(voter_email, "voterEmail")
    drawing_uuid = _parse_uuid(drawing_id)
    if drawing_uuid is None:
        raise NotFound("Drawing not found")

    with store_operation(session, "vote"):
        already_voted = session.exec(
            select(DrawingVote.id).where(
                DrawingVote.drawing_id == drawing_uuid,
                DrawingVote.voter_email == voter_email,
            )
        ).first()
        if already_voted is not None:
            raise DuplicateVote("User has already voted for this drawing")

        result = session.exec(  # type: ignore[call-overload]
            update(Drawing)
            .where(col(Drawing.id) == drawing_uuid)
            .values(vote_count=col(Drawing.vote_count) + 1)
        )
        if result.rowcount == 0:
            session.rollback()
            raise NotFound("Drawing not found")

        vote = DrawingVote(drawing_id=drawing_uuid, voter_email=voter_email)
        session.add(vote)
        try:
            session.commit()
        except IntegrityError as exc:
            # A concurrent vote from the same voter won the unique constraint
            session.rollback()
            raise DuplicateVote("User has already voted for this drawing") from exc
        session.refresh(vote)
    return vote


def list_drawings(
    *,
    session: Session,
    sort_by: Any,
    public_only: bool = False,
    limit: int | None = None,
) -> list[Drawing]:
    if sort_by == SORT_BY_VOTES:
        order = (col(Drawing.vote_count).desc(), col(Drawing.created_at).desc())
    elif sort_by == SORT_BY_DATE:
        order = (col(Drawing.created_at).desc(),)
    else:
        raise InvalidInput("sortBy must be either 'votes' or 'date'")

    statement = select(Drawing)
    if public_only:
        statement = statement.where(col(Drawing.is_public).is_(True))
    statement = statement.order_by(*order).limit(limit or settings.DRAWING_LIST_LIMIT)
    with store_operation(session, "drawing listing"):
        return list(session.exec(statement).all())


# =============================================================================
# Teams
# =============================================================================

def create_team(*, session: Session, team_name: Any, creator_email: Any) -> Team:
    team_name = _require_str(team_name, "teamName")
    creator_email = _require_str(creator_email, "email")
    team = Team(team_name=team_name, creator_email=creator_email, drawing_ids=[])
    with store_operation(session, "team insert"):
        session.add(team)
        session.commit()
        session.refresh(team)
    return team


def list_teams_by_creator(*, session: Session, email: Any) -> list[Team]:
    email = _require_str(email, "email")
    statement = (
        select(Team)
        .where(Team.creator_email == email)
        .order_by(col(Team.created_at).desc())
        .limit(settings.TEAM_LIST_LIMIT)
    )
    with store_operation(session, "team listing"):
        return list(session.exec(statement).all())


def get_team_drawings(*, session: Session, team_id: Any) -> list[Drawing]:
    """Resolve a team's drawing references, newest first.

    Ids that no longer match a drawing are skipped.
    """
    team_id = _require_str(team_id, "teamId")
    team_uuid = _parse_uuid(team_id)
    if team_uuid is None:
        raise Forbidden("User is not a member of this team or team does not exist")

    with store_operation(session, "team drawings read"):
        team = session.get(Team, team_uuid)
        if team is None:
            raise Forbidden("User is not a member of this team or team does not exist")
        if not team.drawing_ids:
            return []
        drawing_uuids = [u for u in map(_parse_uuid, team.drawing_ids) if u is not None]
        statement = (
            select(Drawing)
            .where(col(Drawing.id).in_(drawing_uuids))
            .order_by(col(Drawing.created_at).desc())
            .limit(settings.TEAM_LIST_LIMIT)
        )
        return list(session.exec(statement).all())
