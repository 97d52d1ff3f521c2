"""
Activity Routes

Read access to saved activities.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from runtracker.api.deps import get_tracking_service
from runtracker.features.tracking import TrackingService
from runtracker.features.tracking.schemas import ActivityRecord

router = APIRouter()


@router.get("", response_model=List[ActivityRecord])
async def list_activities(
    service: TrackingService = Depends(get_tracking_service)
):
    """List saved activities, newest first."""
    return await service.store.list()


@router.get("/{activity_id}", response_model=ActivityRecord)
async def get_activity(
    activity_id: str,
    service: TrackingService = Depends(get_tracking_service)
):
    """Get a saved activity by ID."""
    record = await service.store.get(activity_id)

    if not record:
        raise HTTPException(status_code=404, detail="Activity not found")

    return record
