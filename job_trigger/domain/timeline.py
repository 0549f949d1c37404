"""Run timeline event helpers used for trigger diagnostics."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def domain_build_stage_event(
    stage: str,
    status: str,
    details: dict[str, Any] | None = None,
    error_code: str | None = None,
) -> dict[str, object]:
    """Build one structured stage event for the run timeline.

    Args:
        stage: Stage name (`auth`, `folder`, `process`, `launch`, ...).
        status: Stage status marker (`started`, `completed`, `degraded`, `failed`).
        details: Optional structured details object.
        error_code: Optional stable error code attached to the event.

    Returns:
        dict[str, object]: Structured timeline event.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    event_payload: dict[str, object] = {
        "stage": stage,
        "status": status,
        "at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if error_code is not None:
        event_payload["error_code"] = error_code
    if details is not None:
        event_payload["details"] = details
    return event_payload
