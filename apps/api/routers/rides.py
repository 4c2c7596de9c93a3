"""
Rides API Router

CRUD endpoints for ride records, filtered listing with pagination, and the
dashboard metrics summary.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional, List
from datetime import datetime
from core.database import get_db
from models import RideType
from schemas import (
    DEFAULT_RIDES_LIMIT,
    MAX_RIDES_LIMIT,
    RideCreate,
    RideFilter,
    RideMetricsFilter,
    RideMetricsResponse,
    RideResponse,
    RideUpdate,
    parse_filter,
)
from services import ride_store
from services.ride_metrics import compute_ride_metrics

router = APIRouter(prefix="/v1/rides", tags=["rides"])


@router.post("", response_model=RideResponse, status_code=status.HTTP_201_CREATED)
def create_ride(ride_in: RideCreate, db: Session = Depends(get_db)):
    """Record a ride. duration_minutes is derived from the start and end times."""
    return ride_store.create_ride(db, ride_in)


@router.get("", response_model=List[RideResponse])
def list_rides(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Query(None, description="Only rides for this rider"),
    ride_type: Optional[RideType] = Query(None, description="Only rides of this type"),
    start_date: Optional[datetime] = Query(None, description="Rides starting at or after this time (ISO format)"),
    end_date: Optional[datetime] = Query(None, description="Rides starting at or before this time (ISO format)"),
    limit: int = Query(DEFAULT_RIDES_LIMIT, ge=1, le=MAX_RIDES_LIMIT, description="Number of rides to return"),
    offset: int = Query(0, ge=0, description="Number of rides to skip"),
):
    """
    List rides, most recent first.

    All supplied filters must match. With no filters every ride is returned,
    one page at a time.
    """
    filters = parse_filter(
        RideFilter,
        user_id=user_id,
        ride_type=ride_type,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return ride_store.list_rides(db, filters)


@router.get("/metrics", response_model=RideMetricsResponse)
def get_ride_metrics(
    db: Session = Depends(get_db),
    user_id: Optional[str] = Query(None, description="Only rides for this rider"),
    start_date: Optional[datetime] = Query(None, description="Rides starting at or after this time (ISO format)"),
    end_date: Optional[datetime] = Query(None, description="Rides starting at or before this time (ISO format)"),
):
    """
    Summary statistics over the rides matching the filter.

    Returns:
        - Total rides, distance and duration
        - Average distance and duration (0 when nothing matches)
        - Ride count per type, all types always present
    """
    filters = parse_filter(RideMetricsFilter, user_id=user_id, start_date=start_date, end_date=end_date)
    return compute_ride_metrics(db, filters)


@router.get("/{ride_id}", response_model=Optional[RideResponse])
def get_ride(ride_id: int, db: Session = Depends(get_db)):
    """Fetch one ride. A missing ride is answered with null, not 404."""
    return ride_store.get_ride(db, ride_id)


@router.patch("/{ride_id}", response_model=RideResponse)
def update_ride(ride_id: int, ride_in: RideUpdate, db: Session = Depends(get_db)):
    """
    Partially update a ride.

    Omitted fields are left alone; "route_info": null clears the route.
    """
    return ride_store.update_ride(db, ride_id, ride_in)


@router.delete("/{ride_id}", response_model=bool)
def delete_ride(ride_id: int, db: Session = Depends(get_db)):
    """Delete a ride. Returns false when there was nothing to delete."""
    return ride_store.delete_ride(db, ride_id)
