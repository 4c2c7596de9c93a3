from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from datetime import datetime
from typing import ClassVar, Optional, Dict, Type, TypeVar
from core.exceptions import ValidationError
from models import RideType
from services.ride_duration import to_utc

DEFAULT_RIDES_LIMIT = 100
MAX_RIDES_LIMIT = 1000


class RideCreate(BaseModel):
    """Input for creating a ride. duration_minutes is derived, never supplied."""
    user_id: str
    start_time: datetime
    end_time: datetime
    distance_km: float = Field(gt=0)
    start_location: str
    end_location: str
    route_info: Optional[str] = None
    ride_type: RideType

    model_config = ConfigDict(extra="forbid")

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, value: datetime) -> datetime:
        return to_utc(value)


class RideUpdate(BaseModel):
    """
    Partial update. Only fields present in the payload are applied.

    route_info may be explicitly null (clears it); every other field must
    carry a value when supplied.
    """
    user_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    distance_km: Optional[float] = Field(default=None, gt=0)
    start_location: Optional[str] = None
    end_location: Optional[str] = None
    route_info: Optional[str] = None
    ride_type: Optional[RideType] = None

    model_config = ConfigDict(extra="forbid")

    NULLABLE_FIELDS: ClassVar[frozenset] = frozenset({"route_info"})

    @field_validator("start_time", "end_time")
    @classmethod
    def _normalize_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value)

    @model_validator(mode="after")
    def _reject_null_for_required_columns(self):
        for name in self.model_fields_set:
            if name not in self.NULLABLE_FIELDS and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> Dict[str, object]:
        """Supplied fields only; an explicit null survives, an omitted field does not."""
        return self.model_dump(exclude_unset=True)


class RideResponse(BaseModel):
    """Full ride record as returned by every ride endpoint."""
    id: int
    user_id: str
    start_time: datetime
    end_time: datetime
    duration_minutes: float
    distance_km: float
    start_location: str
    end_location: str
    route_info: Optional[str] = None
    ride_type: RideType
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("start_time", "end_time", "created_at", "updated_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return to_utc(value)


class RideMetricsFilter(BaseModel):
    """Predicate shared by listing and aggregation."""
    user_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _normalize_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value)


class RideFilter(RideMetricsFilter):
    """Listing filter: the metrics predicate plus ride type and pagination."""
    ride_type: Optional[RideType] = None
    limit: int = Field(default=DEFAULT_RIDES_LIMIT, ge=1, le=MAX_RIDES_LIMIT)
    offset: int = Field(default=0, ge=0)


FilterT = TypeVar("FilterT", bound=RideMetricsFilter)


def parse_filter(filter_cls: Type[FilterT], **params) -> FilterT:
    """
    Build a listing or metrics filter from loose parameters.

    Out-of-range values such as limit > MAX_RIDES_LIMIT are reported as the
    API's ValidationError tagged with the first offending field, not as a raw
    pydantic error.
    """
    try:
        return filter_cls(**params)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else None
        detail = f"{field}: {error['msg']}" if field else error["msg"]
        raise ValidationError(detail, field=field) from e


class RideMetricsResponse(BaseModel):
    total_rides: int
    total_distance_km: float
    total_duration_minutes: float
    average_distance_km: float
    average_duration_minutes: float
    rides_by_type: Dict[str, int]
