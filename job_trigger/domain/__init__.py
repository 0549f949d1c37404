"""Domain models used across application layer boundaries."""

from .models import (
    COUNT_BASED_STRATEGY,
    FAILING_JOB_STATES,
    TERMINAL_JOB_STATES,
    Credentials,
    EndpointSpec,
    EntityId,
    EntityQuery,
    EntityResolution,
    JobHandle,
    JobState,
    JobStatus,
    JobTargetPlan,
    ResolvedEntity,
    Session,
    domain_job_state_is_failing,
    domain_job_state_is_terminal,
)
from .timeline import domain_build_stage_event

__all__ = [
    "COUNT_BASED_STRATEGY",
    "FAILING_JOB_STATES",
    "TERMINAL_JOB_STATES",
    "Credentials",
    "EndpointSpec",
    "EntityId",
    "EntityQuery",
    "EntityResolution",
    "JobHandle",
    "JobState",
    "JobStatus",
    "JobTargetPlan",
    "ResolvedEntity",
    "Session",
    "domain_build_stage_event",
    "domain_job_state_is_failing",
    "domain_job_state_is_terminal",
]
