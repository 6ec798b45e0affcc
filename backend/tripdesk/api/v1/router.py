from fastapi import APIRouter

from tripdesk.api.v1 import agents, audit, bookings, exports, imports, users

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(agents.router, prefix="/agents", tags=["agents"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(imports.router, prefix="/import", tags=["import"])
api_router.include_router(exports.router, prefix="/export", tags=["export"])
api_router.include_router(audit.router, prefix="/audit-logs", tags=["audit"])
