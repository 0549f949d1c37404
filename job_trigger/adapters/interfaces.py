"""Typed interfaces for adapter-layer responsibilities."""

from typing import Any
from typing import Protocol

from job_trigger.domain import Credentials, EntityId, JobStatus, Session


class OrchestratorAdapterPort(Protocol):
    """Port definition for the orchestrator REST operations used by the job layer."""

    def adapter_acquire_token(self, credentials: Credentials) -> str:
        """Exchange application credentials for a bearer token.

        Args:
            credentials: Application credentials.

        Returns:
            str: Non-empty bearer token.

        Raises:
            OrchestratorAuthError: Raised on any token acquisition failure.
        """

    def adapter_list_entities(self, session: Session, list_path: str) -> list[dict[str, Any]]:
        """Return the `value` array of one OData listing.

        Args:
            session: Authenticated request context.
            list_path: OData path relative to the base URL.

        Returns:
            list[dict[str, Any]]: Listing elements in service order.

        Raises:
            OrchestratorAdapterError: Raised on transport or contract failures.
        """

    def adapter_list_available_session_ids(self, session: Session, machine_id: EntityId) -> list[EntityId]:
        """Return ids of available runtime sessions on one machine.

        Args:
            session: Authenticated request context.
            machine_id: Resolved machine id.

        Returns:
            list[EntityId]: Session ids in service order.

        Raises:
            OrchestratorAdapterError: Raised on transport or contract failures.
        """

    def adapter_start_jobs(self, session: Session, start_info: dict[str, object]) -> list[dict[str, Any]]:
        """Submit one job-start request.

        Args:
            session: Authenticated request context.
            start_info: Serialized start info payload.

        Returns:
            list[dict[str, Any]]: Started job elements.

        Raises:
            OrchestratorLaunchError: Raised when the submission fails.
        """

    def adapter_get_job_status(self, session: Session, job_id: EntityId) -> JobStatus:
        """Fetch the current status of one job.

        Args:
            session: Authenticated request context.
            job_id: Started job id.

        Returns:
            JobStatus: Freshly fetched status.

        Raises:
            OrchestratorStatusCheckError: Raised when the status request fails.
        """
