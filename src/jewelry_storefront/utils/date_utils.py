from datetime import datetime, timezone
from typing import Optional, Union

import pytz
from dateutil import parser as date_parser


class DateUtils:
    """Timezone-aware datetime helpers used by models and templates"""

    UTC = timezone.utc

    @classmethod
    def coerce(cls, value: Union[datetime, str, None]) -> Optional[datetime]:
        """
        Turn a value read from a raw SQL row into an aware datetime.

        PostgreSQL drivers hand back datetime objects; SQLite hands back ISO
        strings. Naive values are assumed to be UTC.
        """
        if value is None:
            return None
        if isinstance(value, str):
            value = date_parser.isoparse(value)
        if value.tzinfo is None:
            value = value.replace(tzinfo=cls.UTC)
        return value

    @classmethod
    def to_local(cls, dt: datetime, timezone_name: str) -> datetime:
        tz = pytz.timezone(timezone_name)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=cls.UTC)
        return dt.astimezone(tz)

    @classmethod
    def format_date(cls, dt: Optional[datetime], timezone_name: str = "UTC") -> str:
        """Short date for invoices and dashboards, e.g. 01/15/2024"""
        if dt is None:
            return ""
        return cls.to_local(dt, timezone_name).strftime("%m/%d/%Y")

    @classmethod
    def format_datetime(cls, dt: Optional[datetime], timezone_name: str = "UTC") -> str:
        if dt is None:
            return ""
        return cls.to_local(dt, timezone_name).strftime("%m/%d/%Y %I:%M %p")
