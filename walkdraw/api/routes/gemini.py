from typing import Any

from fastapi import APIRouter

from walkdraw.api.deps import RelayDep
from walkdraw.schemas import ErrorResponse, RelayRequest, RelayResponse

router = APIRouter()


@router.post(
    "/",
    response_model=RelayResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def call_gemini(payload: RelayRequest, relay: RelayDep) -> Any:
    """
    Forward the query to the generative text service and return its answer.
    """
    text = await relay.relay(payload.query)
    return RelayResponse(response=text)
