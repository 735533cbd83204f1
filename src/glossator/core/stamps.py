from __future__ import annotations

import uuid
from datetime import datetime, timezone


def new_uuid() -> str:
    """Generate a new UUID4 as a string."""
    return str(uuid.uuid4())


def now_utc_iso() -> str:
    """Return an ISO timestamp in UTC with seconds precision."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()
