"""
Ride fixture builders.

Defaults describe a 30 minute, 5.5 km commute on 2024-01-01.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from schemas import RideCreate

BASE_START = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)


def make_ride_payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "user_id": "user123",
        "start_time": BASE_START,
        "end_time": BASE_START + timedelta(minutes=30),
        "distance_km": 5.5,
        "start_location": "Home",
        "end_location": "Office",
        "route_info": "Main street route",
        "ride_type": "commute",
    }
    payload.update(overrides)
    return payload


def make_ride_create(**overrides: Any) -> RideCreate:
    return RideCreate(**make_ride_payload(**overrides))


def make_ride_json(**overrides: Any) -> Dict[str, Any]:
    """Same as make_ride_payload but with ISO strings, ready for a JSON body."""
    payload = make_ride_payload(**overrides)
    for key in ("start_time", "end_time"):
        if isinstance(payload[key], datetime):
            payload[key] = payload[key].isoformat()
    return payload


def starting_at(hours_after_base: float, minutes: int = 30, **overrides: Any) -> Dict[str, Any]:
    """Overrides for a ride starting some hours after BASE_START."""
    start = BASE_START + timedelta(hours=hours_after_base)
    return {"start_time": start, "end_time": start + timedelta(minutes=minutes), **overrides}
