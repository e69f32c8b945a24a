"""UTC normalization for datetimes coming from clients or option snapshots."""
from datetime import datetime
from typing import Optional, Union

import pytz


def to_utc(value: Optional[Union[str, datetime]]) -> Optional[datetime]:
    """Parse ISO strings and coerce naive datetimes to UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return pytz.UTC.localize(value)
    return value.astimezone(pytz.UTC)
