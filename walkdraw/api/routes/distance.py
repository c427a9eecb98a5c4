from typing import Any

from fastapi import APIRouter, Response, status

from walkdraw import crud
from walkdraw.api.deps import SessionDep
from walkdraw.schemas import DistanceUpdate, DistanceUpdateResponse, ErrorResponse, LeaderboardEntry

router = APIRouter()


@router.post(
    "/",
    response_model=DistanceUpdateResponse,
    responses={201: {"model": DistanceUpdateResponse}, 400: {"model": ErrorResponse}},
)
def update_distance(payload: DistanceUpdate, session: SessionDep, response: Response) -> Any:
    """
    Add a walked distance to the caller's running total.
    """
    record, created = crud.accumulate_distance(
        session=session,
        email=payload.email,
        distance=payload.distance,
        username=payload.username,
        timestamp=payload.timestamp,
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return DistanceUpdateResponse(
        message="Distance record created" if created else "Distance updated successfully",
        total_distance=record.distance,
    )


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
def read_leaderboard(session: SessionDep) -> Any:
    return [LeaderboardEntry.from_record(r) for r in crud.get_leaderboard(session=session)]
