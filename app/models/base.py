import threading
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

_id_lock = threading.Lock()
_last_id = 0


def new_id() -> str:
    """Timestamp-based record id, strictly increasing within the process."""
    global _last_id
    with _id_lock:
        candidate = time.time_ns()
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
    return str(candidate)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today() -> date:
    return utcnow().date()


@dataclass
class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def touch(self) -> None:
        self.updated_at = utcnow()
