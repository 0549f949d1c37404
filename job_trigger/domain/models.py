"""Typed domain models shared across runtime layers.

This module provides immutable data contracts for the credential, session,
lookup, targeting and job-status values exchanged between the adapter and job
layers during one trigger invocation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Final, Union

EntityId = Union[int, str]


class JobState(str, Enum):
    """Known orchestrator job states."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCESSFUL = "Successful"
    FAILED = "Failed"
    STOPPED = "Stopped"
    FAULTED = "Faulted"


TERMINAL_JOB_STATES: Final[frozenset[str]] = frozenset(
    {
        JobState.SUCCESSFUL.value,
        JobState.FAILED.value,
        JobState.STOPPED.value,
        JobState.FAULTED.value,
    }
)

FAILING_JOB_STATES: Final[frozenset[str]] = frozenset({JobState.FAILED.value, JobState.FAULTED.value})

COUNT_BASED_STRATEGY: Final[str] = "ModernJobsCount"


def domain_job_state_is_terminal(state: str) -> bool:
    """Return whether a job state ends the job lifecycle.

    Args:
        state: Raw state value reported by the orchestrator.

    Returns:
        bool: True for Successful, Failed, Stopped and Faulted.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return state in TERMINAL_JOB_STATES


def domain_job_state_is_failing(state: str) -> bool:
    """Return whether a terminal job state counts as a failure."""

    return state in FAILING_JOB_STATES


@dataclass(frozen=True)
class Credentials:
    """Application credentials used for the client-credentials grant.

    Attributes:
        application_id: External application client id.
        application_secret: External application client secret.
        scope: Space-separated OAuth scopes.
        tenant: Tenant logical name.
        account: Account (organization) logical name.
    """

    application_id: str
    application_secret: str = field(repr=False)
    scope: str
    tenant: str
    account: str

    def __post_init__(self) -> None:
        for field_name in ("application_id", "application_secret", "scope", "tenant", "account"):
            if not str(getattr(self, field_name)).strip():
                raise ValueError(f"{field_name} must not be blank")


@dataclass(frozen=True)
class Session:
    """Authenticated request context for one invocation.

    Attributes:
        bearer_token: Access token returned by the identity endpoint.
        tenant: Tenant logical name.
        account: Account logical name.
        organization_unit_id: Folder id, set once the target folder is resolved.
    """

    bearer_token: str = field(repr=False)
    tenant: str
    account: str
    organization_unit_id: EntityId | None = None

    def session_with_organization_unit(self, organization_unit_id: EntityId) -> Session:
        """Return a copy bound to the resolved folder.

        Args:
            organization_unit_id: Resolved folder id.

        Returns:
            Session: New session value carrying the folder context.

        Raises:
            ValueError: Raised when the session already carries a folder id.
        """

        if self.organization_unit_id is not None:
            raise ValueError("organization_unit_id is already set for this session")
        return replace(self, organization_unit_id=organization_unit_id)


@dataclass(frozen=True)
class EndpointSpec:
    """One listing endpoint and the selectors applied to its elements.

    Attributes:
        display_name: Label used in logs and diagnostics.
        list_path: OData path relative to the orchestrator base URL.
        key_field: Element field holding the internal identifier.
        name_field: Element field holding the human-readable name.
        filter_field: Optional element field that must equal `filter_value`.
        filter_value: Required value of `filter_field`.
    """

    display_name: str
    list_path: str
    key_field: str
    name_field: str
    filter_field: str | None = None
    filter_value: str | None = None

    def endpoint_accepts(self, element: dict[str, object]) -> bool:
        """Return whether an element passes the endpoint filter."""

        if self.filter_field is None:
            return True
        return element.get(self.filter_field) == self.filter_value


@dataclass(frozen=True)
class EntityQuery:
    """Lookup request for one logical name across ordered endpoints.

    Attributes:
        entity_type: Entity label (`process`, `folder`, `robot`, `machine`).
        target_name: Human-readable name to resolve.
        candidate_endpoints: Endpoints searched in order.
    """

    entity_type: str
    target_name: str
    candidate_endpoints: tuple[EndpointSpec, ...]


@dataclass(frozen=True)
class ResolvedEntity:
    """Successfully resolved entity.

    Attributes:
        id: Value of the endpoint key field.
        name: Value of the endpoint name field.
        source_endpoint: Display name of the endpoint that matched.
        match_kind: `exact` or `partial`.
    """

    id: EntityId
    name: str
    source_endpoint: str
    match_kind: str


@dataclass(frozen=True)
class EntityResolution:
    """Outcome of one entity lookup; `resolved is None` means not found.

    Attributes:
        query: Lookup request.
        resolved: Matched entity, when any.
        available_names: Candidate names observed while searching.
    """

    query: EntityQuery
    resolved: ResolvedEntity | None
    available_names: tuple[str, ...] = ()

    def resolution_is_found(self) -> bool:
        """Return whether the lookup produced an entity."""

        return self.resolved is not None


@dataclass(frozen=True)
class JobTargetPlan:
    """Job-start payload describing how the job is dispatched.

    Attributes:
        release_key: Process release key.
        jobs_count: Number of jobs to start.
        strategy: Start strategy, always count-based.
        runtime_type: Runtime type copied from configuration.
        robot_ids: Zero or one robot id.
        machine_session_ids: Zero or one available session id.
        machine_ids: Zero or one machine id, used only when no session exists.
    """

    release_key: str
    jobs_count: int
    strategy: str
    runtime_type: str
    robot_ids: tuple[EntityId, ...] = ()
    machine_session_ids: tuple[EntityId, ...] = ()
    machine_ids: tuple[EntityId, ...] = ()

    def __post_init__(self) -> None:
        if self.machine_session_ids and self.machine_ids:
            raise ValueError("machine_session_ids and machine_ids are mutually exclusive")
        if self.jobs_count < 1:
            raise ValueError("jobs_count must be >= 1")

    def plan_to_start_info(self, input_arguments: str = "{}") -> dict[str, object]:
        """Serialize the plan to the `startInfo` request object.

        Args:
            input_arguments: JSON-encoded process input arguments.

        Returns:
            dict[str, object]: Start info payload with optional targeting fields omitted.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        start_info: dict[str, object] = {
            "ReleaseKey": self.release_key,
            "JobsCount": self.jobs_count,
            "InputArguments": input_arguments,
            "Strategy": self.strategy,
            "RuntimeType": self.runtime_type,
        }
        if self.robot_ids:
            start_info["RobotIds"] = list(self.robot_ids)
        if self.machine_session_ids:
            start_info["MachineSessionIds"] = list(self.machine_session_ids)
        if self.machine_ids:
            start_info["MachineIds"] = list(self.machine_ids)
        return start_info


@dataclass(frozen=True)
class JobHandle:
    """Identifier of a started job."""

    job_id: EntityId


@dataclass(frozen=True)
class JobStatus:
    """Job status snapshot fetched on one poll tick.

    Attributes:
        state: Raw job state value.
        robot_name: Executing robot name, when reported.
        machine_name: Executing machine name, when reported.
    """

    state: str
    robot_name: str | None = None
    machine_name: str | None = None
