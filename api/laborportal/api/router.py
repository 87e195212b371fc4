from fastapi import APIRouter

from laborportal.api.routes import health, jobs, sessions, views

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
api_router.include_router(views.router, tags=["views"])
