"""
API Router v1

Combines all route modules.
"""

from fastapi import APIRouter

from runtracker.api.v1.routes import activities, sessions

api_router = APIRouter()

api_router.include_router(sessions.router, prefix="/sessions", tags=["Sessions"])
api_router.include_router(activities.router, prefix="/activities", tags=["Activities"])
