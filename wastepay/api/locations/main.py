import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from ...db.engine import get_session
from ...schemas import DeleteResult
from ...services.location_service import LocationService
from .models import Location, LocationCreate, LocationUpdate

router = APIRouter()


# --- Service dependency ---
async def get_location_service(
    session: AsyncSession = Depends(get_session),
) -> LocationService:
    return LocationService(session)


# --- API Endpoints ---
@router.get("/locations", response_model=List[Location])
async def get_all_locations(service: LocationService = Depends(get_location_service)):
    return await service.list_locations()


@router.post("/locations", response_model=Location, status_code=status.HTTP_201_CREATED)
async def create_location(
    location: LocationCreate,
    service: LocationService = Depends(get_location_service),
):
    return await service.create_location(location.name)


@router.get("/locations/{location_id}", response_model=Location)
async def get_location(
    location_id: uuid.UUID,
    service: LocationService = Depends(get_location_service),
):
    return await service.get_location(location_id)


@router.put("/locations/{location_id}", response_model=Location)
async def update_location(
    location_id: uuid.UUID,
    location_update: LocationUpdate,
    service: LocationService = Depends(get_location_service),
):
    return await service.update_location(location_id, location_update.name)


@router.delete("/locations/{location_id}", response_model=DeleteResult)
async def delete_location(
    location_id: uuid.UUID,
    service: LocationService = Depends(get_location_service),
):
    return await service.delete_location(location_id)
