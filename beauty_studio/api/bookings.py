from typing import List

from fastapi import APIRouter, Depends, Query

from beauty_studio.core.dates import normalize_date
from beauty_studio.core.security import require_admin
from beauty_studio.models.auth import AdminUser
from beauty_studio.models.booking import (
    AvailabilityResponse,
    Booking,
    BookingCreate,
    BookingStatusUpdate,
    ConfirmationResponse,
    OccupiedSlotsResponse,
)
from beauty_studio.services.booking_service import BookingService, get_booking_service

router = APIRouter(prefix="/bookings")

# Static paths are declared before /{booking_id} so they are not captured by it


@router.get("/availability", response_model=AvailabilityResponse)
async def check_availability(
    date: str = Query(..., min_length=1, description="YYYY-MM-DD"),
    time: str = Query(..., min_length=1, description="HH:MM slot label"),
    service: BookingService = Depends(get_booking_service),
):
    # Store errors surface as 500 here; clients treat that as "taken"
    conflict = await service.find_conflict(date, time)
    return AvailabilityResponse(available=conflict is None)


@router.get("/occupied", response_model=OccupiedSlotsResponse)
async def occupied_slots(
    date: str = Query(..., min_length=1, description="YYYY-MM-DD"),
    service: BookingService = Depends(get_booking_service),
):
    """All slots of a day in one round trip instead of one availability call per slot."""
    occupied = await service.get_occupied_times(date)
    return OccupiedSlotsResponse(
        date=normalize_date(date),
        occupied=occupied,
        available=[slot for slot in service.time_slots if slot not in occupied],
    )


@router.get("/range", response_model=List[Booking])
async def bookings_in_range(
    start: str = Query(..., min_length=1),
    end: str = Query(..., min_length=1),
    service: BookingService = Depends(get_booking_service),
    admin: AdminUser = Depends(require_admin),
):
    return await service.get_in_range(start, end)


@router.post("", response_model=Booking, status_code=201)
async def create_booking(
    payload: BookingCreate,
    service: BookingService = Depends(get_booking_service),
):
    return await service.create_booking(payload)


@router.get("", response_model=List[Booking])
async def list_bookings(service: BookingService = Depends(get_booking_service)):
    return await service.get_all()


@router.get("/{booking_id}", response_model=Booking)
async def get_booking(booking_id: str, service: BookingService = Depends(get_booking_service)):
    return await service.get_by_id(booking_id)


@router.patch("/{booking_id}/status", response_model=Booking)
async def update_booking_status(
    booking_id: str,
    body: BookingStatusUpdate,
    service: BookingService = Depends(get_booking_service),
    admin: AdminUser = Depends(require_admin),
):
    return await service.set_status(booking_id, body.status)


@router.post("/{booking_id}/confirmation", response_model=ConfirmationResponse)
async def send_confirmation(
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
    admin: AdminUser = Depends(require_admin),
):
    return ConfirmationResponse(success=await service.send_confirmation(booking_id))
