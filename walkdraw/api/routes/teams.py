from typing import Any

from fastapi import APIRouter, Query, status

from walkdraw import crud
from walkdraw.api.deps import SessionDep
from walkdraw.schemas import DrawingPublic, ErrorResponse, TeamCreate, TeamCreated, TeamPublic

router = APIRouter()


@router.post(
    "/",
    response_model=TeamCreated,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
def create_team(payload: TeamCreate, session: SessionDep) -> Any:
    team = crud.create_team(session=session, team_name=payload.team_name, creator_email=payload.email)
    return TeamCreated(message="Team created successfully", team_id=team.id)


@router.get("/", response_model=list[TeamPublic], responses={400: {"model": ErrorResponse}})
def read_teams(session: SessionDep, email: str | None = Query(default=None)) -> Any:
    teams = crud.list_teams_by_creator(session=session, email=email)
    return [TeamPublic.from_team(t) for t in teams]


@router.get(
    "/drawings",
    response_model=list[DrawingPublic],
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def read_team_drawings(session: SessionDep, team_id: str | None = Query(default=None, alias="teamId")) -> Any:
    drawings = crud.get_team_drawings(session=session, team_id=team_id)
    return [DrawingPublic.from_drawing(d) for d in drawings]
