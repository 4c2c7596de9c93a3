"""
Ride Store

Create / read / update / delete for ride records, plus filtered listing.

Every write is a single commit. SQLAlchemy failures are rolled back, logged
and re-raised as StorageError; nothing is retried.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from core.exceptions import NotFoundError, StorageError, ValidationError
from models import Ride, RideType
from schemas import RideCreate, RideFilter, RideUpdate
from services.ride_duration import exact_duration_minutes, rounded_duration_minutes

logger = logging.getLogger(__name__)


def apply_ride_filters(
    query: Query,
    user_id: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    ride_type: Optional[RideType] = None,
) -> Query:
    """
    AND together whichever predicates were supplied.

    The date bounds apply to start_time and are inclusive on both ends.
    Shared with the metrics aggregator so listing and dashboard cards always
    agree on which rides match.
    """
    if user_id:
        query = query.filter(Ride.user_id == user_id)
    if start_date is not None:
        query = query.filter(Ride.start_time >= start_date)
    if end_date is not None:
        query = query.filter(Ride.start_time <= end_date)
    if ride_type is not None:
        query = query.filter(Ride.ride_type == ride_type)
    return query


def _fail(db: Session, action: str, exc: SQLAlchemyError) -> StorageError:
    db.rollback()
    logger.error(
        f"Ride {action} failed: {exc}",
        exc_info=True,
        extra={"extra_fields": {"action": action}},
    )
    return StorageError(f"Ride {action} failed")


def create_ride(db: Session, ride_in: RideCreate) -> Ride:
    """
    Persist a new ride.

    duration_minutes is the start/end difference rounded to the nearest
    minute. An empty route_info is stored as null.
    """
    if ride_in.distance_km is None or ride_in.distance_km <= 0:
        raise ValidationError("distance_km must be positive", field="distance_km")

    now = datetime.now(timezone.utc)
    ride = Ride(
        user_id=ride_in.user_id,
        start_time=ride_in.start_time,
        end_time=ride_in.end_time,
        duration_minutes=float(rounded_duration_minutes(ride_in.start_time, ride_in.end_time)),
        distance_km=ride_in.distance_km,
        start_location=ride_in.start_location,
        end_location=ride_in.end_location,
        route_info=ride_in.route_info or None,
        ride_type=ride_in.ride_type,
        created_at=now,
        updated_at=now,
    )

    try:
        db.add(ride)
        db.commit()
        db.refresh(ride)
    except SQLAlchemyError as e:
        raise _fail(db, "create", e) from e

    logger.info(
        f"Created ride {ride.id}",
        extra={"extra_fields": {"ride_id": ride.id, "user_id": ride.user_id}},
    )
    return ride


def get_ride(db: Session, ride_id: int) -> Optional[Ride]:
    """Return the ride, or None when no ride has this id."""
    try:
        return db.query(Ride).filter(Ride.id == ride_id).first()
    except SQLAlchemyError as e:
        raise _fail(db, "lookup", e) from e


def list_rides(db: Session, filters: Optional[RideFilter] = None) -> List[Ride]:
    """
    Filtered, paginated rides, most recent start_time first.

    Equal start times fall back to id (newest first) so pages never overlap.
    """
    filters = filters or RideFilter()
    query = apply_ride_filters(
        db.query(Ride),
        user_id=filters.user_id,
        start_date=filters.start_date,
        end_date=filters.end_date,
        ride_type=filters.ride_type,
    )
    query = query.order_by(Ride.start_time.desc(), Ride.id.desc())

    try:
        return query.offset(filters.offset).limit(filters.limit).all()
    except SQLAlchemyError as e:
        raise _fail(db, "listing", e) from e


def update_ride(db: Session, ride_id: int, ride_in: RideUpdate) -> Ride:
    """
    Apply a partial update.

    Only supplied fields change. When start_time and end_time are both
    supplied, duration_minutes is recomputed without rounding; supplying just
    one of them keeps the stored duration. updated_at is always refreshed.
    """
    changes = ride_in.changes()

    ride = get_ride(db, ride_id)
    if ride is None:
        raise NotFoundError("Ride", ride_id)

    for field, value in changes.items():
        setattr(ride, field, value)

    if "start_time" in changes and "end_time" in changes:
        ride.duration_minutes = exact_duration_minutes(changes["start_time"], changes["end_time"])

    ride.updated_at = datetime.now(timezone.utc)

    try:
        db.commit()
        db.refresh(ride)
    except SQLAlchemyError as e:
        raise _fail(db, "update", e) from e

    logger.info(
        f"Updated ride {ride.id}",
        extra={"extra_fields": {"ride_id": ride.id, "fields": sorted(changes)}},
    )
    return ride


def delete_ride(db: Session, ride_id: int) -> bool:
    """Delete by id. Returns whether a ride existed and was removed."""
    try:
        deleted = db.query(Ride).filter(Ride.id == ride_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as e:
        raise _fail(db, "delete", e) from e

    if deleted:
        logger.info(f"Deleted ride {ride_id}", extra={"extra_fields": {"ride_id": ride_id}})
    return deleted > 0
