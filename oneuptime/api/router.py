from fastapi import APIRouter

from oneuptime.api.routes.domains import router as domain_router
from oneuptime.api.routes.health import router as health_router
from oneuptime.api.routes.incidents import router as incident_router
from oneuptime.api.routes.incoming_requests import public_router as incoming_request_public_router
from oneuptime.api.routes.incoming_requests import router as incoming_request_router
from oneuptime.api.routes.realtime import router as realtime_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(incident_router, tags=["incidents"])
api_router.include_router(incoming_request_router, tags=["incoming-requests"])
api_router.include_router(incoming_request_public_router, tags=["incoming-requests"])
api_router.include_router(domain_router, tags=["domains"])
api_router.include_router(realtime_router, tags=["realtime"])
