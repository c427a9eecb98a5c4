from typing import Any

from fastapi import APIRouter, Query, status

from walkdraw import crud
from walkdraw.api.deps import SessionDep
from walkdraw.schemas import (
    DrawingCreate,
    DrawingCreated,
    DrawingPublic,
    ErrorResponse,
    Message,
    VoteRequest,
)

router = APIRouter()


@router.post(
    "/",
    response_model=DrawingCreated,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
def create_drawing(payload: DrawingCreate, session: SessionDep) -> Any:
    """
    Save a drawing and attach it to the requested teams.

    Team attachment is best-effort: teams that are missing or fail to update
    are skipped and the drawing is still created.
    """
    drawing = crud.create_drawing(
        session=session,
        email=payload.email,
        coordinates=[point.model_dump() for point in payload.coordinates],
        username=payload.username,
        timestamp=payload.timestamp,
        is_public=payload.is_public,
        team_ids=payload.team_ids,
    )
    return DrawingCreated(message="Drawing saved successfully", drawing_id=drawing.id)


@router.post(
    "/vote",
    response_model=Message,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def vote_drawing(payload: VoteRequest, session: SessionDep) -> Any:
    crud.vote_on_drawing(
        session=session, drawing_id=payload.drawing_id, voter_email=payload.voter_email
    )
    return Message(message="Vote recorded successfully")


@router.get(
    "/",
    response_model=list[DrawingPublic],
    responses={400: {"model": ErrorResponse}},
)
def read_drawings(
    session: SessionDep,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    public_only: bool = Query(default=True, alias="publicOnly"),
) -> Any:
    """
    List up to 100 drawings ranked by votes or by date.

    Only public drawings are listed unless `publicOnly=false`.
    """
    drawings = crud.list_drawings(session=session, sort_by=sort_by, public_only=public_only)
    return [DrawingPublic.from_drawing(d) for d in drawings]
