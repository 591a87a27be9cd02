import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from ...db.engine import get_session
from ...schemas import DeleteResult
from ...services.plot_service import PlotService
from .models import Plot, PlotCreate, PlotUpdate

router = APIRouter()


# --- Service dependency ---
async def get_plot_service(session: AsyncSession = Depends(get_session)) -> PlotService:
    return PlotService(session)


# --- API Endpoints ---
@router.get("/plots", response_model=List[Plot])
async def get_all_plots(
    location: Optional[uuid.UUID] = Query(default=None),
    service: PlotService = Depends(get_plot_service),
):
    """Lists plots, optionally only those of one location."""
    return await service.list_plots(location_id=location)


@router.post("/plots", response_model=Plot, status_code=status.HTTP_201_CREATED)
async def create_plot(
    plot: PlotCreate,
    service: PlotService = Depends(get_plot_service),
):
    """Creates a plot and its payment schedule for the current month."""
    return await service.create_plot(plot.model_dump())


@router.get("/plots/{plot_id}", response_model=Plot)
async def get_plot(
    plot_id: uuid.UUID,
    service: PlotService = Depends(get_plot_service),
):
    return await service.get_plot(plot_id)


@router.put("/plots/{plot_id}", response_model=Plot)
async def update_plot(
    plot_id: uuid.UUID,
    plot_update: PlotUpdate,
    service: PlotService = Depends(get_plot_service),
):
    updates = plot_update.model_dump(exclude_unset=True)
    return await service.update_plot(plot_id, updates)


@router.delete("/plots/{plot_id}", response_model=DeleteResult)
async def delete_plot(
    plot_id: uuid.UUID,
    service: PlotService = Depends(get_plot_service),
):
    """Deletes a plot together with all of its payment schedules."""
    return await service.delete_plot(plot_id)
