from fastapi import APIRouter
from fleet_issues.api.v1.endpoints import auth, issues, maintenance, me, users, vessels

api_router = APIRouter()

# Session routes
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(me.router, prefix="/me", tags=["me"])

# Fleet routes
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(vessels.router, prefix="/vessels", tags=["vessels"])
api_router.include_router(issues.router, prefix="/issues", tags=["issues"])
api_router.include_router(maintenance.router, prefix="/maintenance-scan", tags=["maintenance"])
