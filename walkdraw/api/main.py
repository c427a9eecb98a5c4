from fastapi import APIRouter

from walkdraw.api.routes import distance, drawings, gemini, teams, utils

api_router = APIRouter()
api_router.include_router(utils.router, tags=["utils"])
api_router.include_router(gemini.router, prefix="/gemini", tags=["gemini"])
api_router.include_router(distance.router, prefix="/distance", tags=["distance"])
api_router.include_router(drawings.router, prefix="/drawings", tags=["drawings"])
api_router.include_router(teams.router, prefix="/teams", tags=["teams"])
