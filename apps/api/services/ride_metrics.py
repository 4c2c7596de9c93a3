"""
Ride Metrics Aggregator

Summary statistics for the dashboard cards, computed in SQL over the same
filter predicate the ride listing uses (minus ride_type and pagination).

Returns:
    - total / average distance
    - total / average duration
    - ride count, overall and per ride type
"""
import logging
from typing import Dict, Optional, Union

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import StorageError
from models import Ride, RideType
from schemas import RideMetricsFilter
from services.ride_store import apply_ride_filters

logger = logging.getLogger(__name__)


def empty_rides_by_type() -> Dict[str, int]:
    return {ride_type.value: 0 for ride_type in RideType}


def _as_float(value) -> float:
    # SUM/AVG over zero rows is NULL
    return float(value) if value is not None else 0.0


def compute_ride_metrics(
    db: Session,
    filters: Optional[RideMetricsFilter] = None,
) -> Dict[str, Union[int, float, Dict[str, int]]]:
    """
    Aggregate the rides matching ``filters``.

    An empty match set is a normal answer: every number is 0 and
    rides_by_type still lists all four types.
    """
    filters = filters or RideMetricsFilter()
    predicate = dict(
        user_id=filters.user_id,
        start_date=filters.start_date,
        end_date=filters.end_date,
    )

    totals_query = apply_ride_filters(
        db.query(
            func.count(Ride.id).label("total_rides"),
            func.sum(Ride.distance_km).label("total_distance_km"),
            func.sum(Ride.duration_minutes).label("total_duration_minutes"),
            func.avg(Ride.distance_km).label("average_distance_km"),
            func.avg(Ride.duration_minutes).label("average_duration_minutes"),
        ),
        **predicate,
    )
    by_type_query = apply_ride_filters(
        db.query(Ride.ride_type, func.count(Ride.id)),
        **predicate,
    ).group_by(Ride.ride_type)

    try:
        totals = totals_query.one()
        type_counts = by_type_query.all()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Ride metrics query failed: {e}", exc_info=True)
        raise StorageError("Ride metrics query failed") from e

    rides_by_type = empty_rides_by_type()
    for ride_type, count in type_counts:
        rides_by_type[RideType(ride_type).value] = int(count)

    return {
        "total_rides": int(totals.total_rides or 0),
        "total_distance_km": _as_float(totals.total_distance_km),
        "total_duration_minutes": _as_float(totals.total_duration_minutes),
        "average_distance_km": _as_float(totals.average_distance_km),
        "average_duration_minutes": _as_float(totals.average_duration_minutes),
        "rides_by_type": rides_by_type,
    }
