"""Run identifier creation."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional


def create_run_id(
    prefix: str,
    config_hash: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    suffix = config_hash[:8] if config_hash else uuid.uuid4().hex[:8]
    return f"{prefix}-{stamp}-{suffix}"
