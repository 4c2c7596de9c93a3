from sqlalchemy import Column, Integer, DateTime, Enum, Numeric, Text, Index
from sqlalchemy.types import TypeDecorator
from core.database import Base
from services.ride_duration import to_utc
from datetime import datetime, timezone
import enum


class RideType(str, enum.Enum):
    """Closed set of ride purposes."""
    COMMUTE = "commute"
    LEISURE = "leisure"
    BUSINESS = "business"
    OTHER = "other"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC in and out, whatever the backend stores."""
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return to_utc(value)

    def process_result_value(self, value, dialect):
        return to_utc(value)


class FloatNumeric(TypeDecorator):
    """NUMERIC column read back as float. SQLite returns whole values as int."""
    impl = Numeric
    cache_ok = True

    def process_result_value(self, value, dialect):
        return float(value) if value is not None else None


class Ride(Base):
    __tablename__ = "ride"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, nullable=False)  # Opaque rider id, no FK
    start_time = Column(UTCDateTime(), nullable=False)
    end_time = Column(UTCDateTime(), nullable=False)

    # --- FIXED-PRECISION NUMERICS ---
    # Stored as NUMERIC, always handed to Python as float.
    duration_minutes = Column(FloatNumeric(10, 2, asdecimal=False), nullable=False)  # Derived from start/end
    distance_km = Column(FloatNumeric(10, 3, asdecimal=False), nullable=False)

    start_location = Column(Text, nullable=False)
    end_location = Column(Text, nullable=False)
    route_info = Column(Text, nullable=True)
    ride_type = Column(
        Enum(
            RideType,
            name="ride_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
    )

    created_at = Column(UTCDateTime(), default=_utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_ride_user_id", "user_id"),
        Index("ix_ride_start_time", "start_time"),
        # Deleted ids must never be handed out again
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Ride id={self.id} user_id={self.user_id!r} type={self.ride_type}>"
