from fastapi import APIRouter

from gatekeeper.presentation.routers.v1.auth import router as auth_router
from gatekeeper.presentation.routers.v1.users import router as users_router
from gatekeeper.presentation.routes.health import router as health_router

api = APIRouter()

# Add all v1 routers here
routers = (auth_router, users_router)
for router in routers:
    api.include_router(router, prefix="/v1")

api.include_router(health_router)
