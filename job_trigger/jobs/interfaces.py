"""Typed interfaces for job-layer orchestration responsibilities."""

from dataclasses import dataclass, field
from typing import Any, Protocol

from job_trigger.domain import EntityId


@dataclass(frozen=True)
class TriggerRunResult:
    """Result contract for one trigger invocation.

    Attributes:
        status: Final execution state (`success` or `failed`).
        error_code: Fatal error code when failed.
        error_message: Human-readable failure message when failed.
        job_id: Started job id, when the launch succeeded.
        job_state: Last observed job state, when waited on.
        robot_name: Executing robot name, when reported.
        machine_name: Executing machine name, when reported.
        timeline: Structured stage events captured during the run.
    """

    status: str
    error_code: str | None = None
    error_message: str | None = None
    job_id: EntityId | None = None
    job_state: str | None = None
    robot_name: str | None = None
    machine_name: str | None = None
    timeline: list[dict[str, Any]] = field(default_factory=list)

    def result_is_success(self) -> bool:
        """Return whether the run finished successfully."""

        return self.status == "success"

    def result_to_payload(self) -> dict[str, Any]:
        """Return a JSON-serializable summary of the run."""

        return {
            "status": self.status,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "job_id": self.job_id,
            "job_state": self.job_state,
            "robot_name": self.robot_name,
            "machine_name": self.machine_name,
            "timeline": self.timeline,
        }


class JobOrchestratorPort(Protocol):
    """Port definition for running one trigger workflow."""

    def job_execute(self) -> TriggerRunResult:
        """Execute the resolve, launch and watch workflow once.

        Returns:
            TriggerRunResult: Final execution status payload.

        Raises:
            RuntimeError: Raised only for failures outside the mapped error taxonomy.
        """
