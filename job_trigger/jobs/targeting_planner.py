"""Job targeting plan construction from resolved robot and machine ids."""

from __future__ import annotations

import logging
from typing import Callable

from job_trigger.adapters import OrchestratorAdapterError
from job_trigger.domain import COUNT_BASED_STRATEGY, EntityId, JobTargetPlan

from .run_outcomes import RunErrorCode

logger = logging.getLogger(__name__)

SessionLookup = Callable[[EntityId], list[EntityId]]


def job_build_target_plan(
    release_key: str,
    jobs_count: int,
    runtime_type: str,
    robot_id: EntityId | None,
    machine_id: EntityId | None,
    session_lookup: SessionLookup,
) -> JobTargetPlan:
    """Build the job-start plan for the resolved targeting inputs.

    A machine id is turned into session-based targeting when the machine has an
    available session; otherwise the machine id itself is targeted. Absent ids
    leave their fields empty so the service allocates dynamically.

    Args:
        release_key: Process release key.
        jobs_count: Number of jobs to start.
        runtime_type: Runtime type copied to the plan.
        robot_id: Resolved robot id, when any.
        machine_id: Resolved machine id, when any.
        session_lookup: Callable returning available session ids for a machine id.

    Returns:
        JobTargetPlan: Immutable plan with at most one machine-targeting field set.

    Raises:
        ValueError: Raised when jobs_count is invalid.
    """

    robot_ids: tuple[EntityId, ...] = (robot_id,) if robot_id is not None else ()
    machine_session_ids: tuple[EntityId, ...] = ()
    machine_ids: tuple[EntityId, ...] = ()

    if machine_id is not None:
        session_id = _job_first_available_session_id(machine_id=machine_id, session_lookup=session_lookup)
        if session_id is not None:
            logger.info("Targeting available session id=%s on machine id=%s", session_id, machine_id)
            machine_session_ids = (session_id,)
        else:
            logger.info("Targeting machine id=%s directly", machine_id)
            machine_ids = (machine_id,)

    return JobTargetPlan(
        release_key=release_key,
        jobs_count=jobs_count,
        strategy=COUNT_BASED_STRATEGY,
        runtime_type=runtime_type,
        robot_ids=robot_ids,
        machine_session_ids=machine_session_ids,
        machine_ids=machine_ids,
    )


def _job_first_available_session_id(machine_id: EntityId, session_lookup: SessionLookup) -> EntityId | None:
    """Return the first available session id, or None when none can be used.

    Args:
        machine_id: Resolved machine id.
        session_lookup: Session lookup callable.

    Returns:
        EntityId | None: First session id, or None when empty or the lookup failed.

    Raises:
        RuntimeError: Lookup failures are logged, not raised.
    """

    try:
        session_ids = session_lookup(machine_id)
    except OrchestratorAdapterError as error:
        logger.warning(
            "%s: session lookup for machine id=%s failed, falling back to machine targeting: %s",
            RunErrorCode.SESSION_LOOKUP_FAILED.value,
            machine_id,
            error,
        )
        return None

    if not session_ids:
        logger.info("No available sessions on machine id=%s", machine_id)
        return None
    return session_ids[0]
