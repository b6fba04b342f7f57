"""
Buddhist Era date conversion for carrier timestamps.

Thailand Post reports event times as "DD/MM/BBBB HH:mm:ss+07:00", where
BBBB is the Gregorian year plus 543. Conversion never blocks the
tracking pipeline: an unreadable date degrades to the current time and
is logged, it is never raised to the caller.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger("parcel_tracker.calendar")

BUDDHIST_ERA_OFFSET = 543

CARRIER_DATE_PATTERN = re.compile(
    r"(\d{2})/(\d{2})/(\d{4})\s+(\d{2}):(\d{2}):(\d{2})([+-]\d{2}:\d{2})",
    re.ASCII,
)


@dataclass(frozen=True)
class ConversionResult:
    """Either a converted instant or the reason conversion failed."""
    value: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_carrier_datetime(raw: str) -> ConversionResult:
    """
    Convert a carrier timestamp to a timezone-aware datetime.

    The literal UTC offset of the input is kept on the result.
    """
    match = CARRIER_DATE_PATTERN.fullmatch(raw.strip()) if isinstance(raw, str) else None
    if not match:
        return ConversionResult(error=f"Invalid carrier date format: {raw!r}")

    day, month, era_year, hour, minute, second, offset = match.groups()
    gregorian_year = int(era_year) - BUDDHIST_ERA_OFFSET
    iso_value = f"{gregorian_year:04d}-{month}-{day}T{hour}:{minute}:{second}{offset}"

    try:
        return ConversionResult(value=datetime.fromisoformat(iso_value))
    except ValueError:
        return ConversionResult(error=f"Invalid date after conversion: {iso_value}")


def convert_carrier_datetime(raw: str, now: Optional[datetime] = None) -> datetime:
    """
    Convert a carrier timestamp, falling back to the current time.

    Args:
        raw: Carrier timestamp, e.g. "19/07/2562 18:12:26+07:00"
        now: Sentinel to return on failure (defaults to current UTC time)

    Returns:
        The converted datetime, or the sentinel if `raw` cannot be read.
        Failures are logged on the "parcel_tracker.calendar" logger.
    """
    result = parse_carrier_datetime(raw)
    if result.ok:
        return result.value

    logger.error(result.error, extra={"carrier_date": raw})
    return now if now is not None else datetime.now(timezone.utc)
