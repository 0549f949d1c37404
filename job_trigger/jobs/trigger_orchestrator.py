"""Job-layer trigger orchestrator with per-entity fallback policy and stage timeline."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import traceback

from job_trigger.adapters import (
    OrchestratorAdapterError,
    OrchestratorAdapterPort,
    OrchestratorAuthError,
    OrchestratorLaunchError,
    OrchestratorStatusCheckError,
)
from job_trigger.domain import (
    Credentials,
    EndpointSpec,
    EntityId,
    EntityQuery,
    JobTargetPlan,
    Session,
    domain_build_stage_event,
)

from .completion_watcher import CompletionWatcher, WatchOutcome, WatchPhase
from .endpoint_catalog import FOLDER_ENDPOINTS, MACHINE_ENDPOINTS, PROCESS_ENDPOINTS, ROBOT_ENDPOINTS
from .entity_resolver import EntityResolver
from .interfaces import JobOrchestratorPort, TriggerRunResult
from .job_launcher import JobLauncher
from .run_outcomes import FolderNotFoundError, RunErrorCode
from .targeting_planner import job_build_target_plan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TriggerRunConfig:
    """Configuration values for one trigger invocation.

    Attributes:
        process_name: Process (release) name to start.
        jobs_count: Number of jobs to start.
        runtime_type: Runtime (job) type, e.g. `Unattended`.
        folder_name: Optional folder providing the organization unit context.
        robot_name: Optional robot to target.
        machine_name: Optional machine to target.
        wait_for_completion: Whether to poll until the job finishes.
        input_arguments: JSON-encoded process input arguments.
        priority: Requested priority, recorded for diagnostics only.
    """

    process_name: str
    jobs_count: int = 1
    runtime_type: str = "Unattended"
    folder_name: str | None = None
    robot_name: str | None = None
    machine_name: str | None = None
    wait_for_completion: bool = True
    input_arguments: str = "{}"
    priority: str | None = None


class TriggerJobOrchestrator(JobOrchestratorPort):
    """Run auth, resolution, launch and completion watching in strict sequence."""

    def __init__(
        self,
        orchestrator_adapter: OrchestratorAdapterPort,
        credentials: Credentials,
        config: TriggerRunConfig,
        completion_watcher: CompletionWatcher | None = None,
        entity_resolver: EntityResolver | None = None,
        job_launcher: JobLauncher | None = None,
    ):
        """Initialize trigger orchestrator dependencies.

        Args:
            orchestrator_adapter: Adapter for orchestrator REST calls.
            credentials: Application credentials.
            config: Trigger run configuration.
            completion_watcher: Watcher used when waiting; required when waiting.
            entity_resolver: Optional resolver override.
            job_launcher: Optional launcher override.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if orchestrator_adapter is None:
            raise ValueError("orchestrator_adapter must not be None")
        if not config.process_name.strip():
            raise ValueError("config.process_name must not be blank")
        if config.jobs_count < 1:
            raise ValueError("config.jobs_count must be >= 1")
        if not config.runtime_type.strip():
            raise ValueError("config.runtime_type must not be blank")
        if config.wait_for_completion and completion_watcher is None:
            raise ValueError("completion_watcher is required when wait_for_completion is enabled")

        self._orchestrator_adapter = orchestrator_adapter
        self._credentials = credentials
        self._config = config
        self._completion_watcher = completion_watcher
        self._entity_resolver = entity_resolver or EntityResolver(orchestrator_adapter)
        self._job_launcher = job_launcher or JobLauncher(orchestrator_adapter)

    def job_execute(self) -> TriggerRunResult:
        """Execute the trigger workflow once.

        Returns:
            TriggerRunResult: Final execution status payload with stage timeline.

        Raises:
            RuntimeError: Raised only for failures outside the mapped error taxonomy.
        """

        timeline: list[dict[str, object]] = [domain_build_stage_event(stage="run", status="started")]
        job_id: EntityId | None = None

        try:
            session = self._job_authenticate(timeline)
            session = self._job_bind_folder(session, timeline)
            release_key = self._job_resolve_release_key(session, timeline)
            robot_id = self._job_resolve_optional_target(
                session=session,
                stage="robot",
                target_name=self._config.robot_name,
                endpoints=ROBOT_ENDPOINTS,
                timeline=timeline,
            )
            machine_id = self._job_resolve_optional_target(
                session=session,
                stage="machine",
                target_name=self._config.machine_name,
                endpoints=MACHINE_ENDPOINTS,
                timeline=timeline,
            )

            plan = job_build_target_plan(
                release_key=release_key,
                jobs_count=self._config.jobs_count,
                runtime_type=self._config.runtime_type,
                robot_id=robot_id,
                machine_id=machine_id,
                session_lookup=lambda resolved_machine_id: (
                    self._orchestrator_adapter.adapter_list_available_session_ids(
                        session=session,
                        machine_id=resolved_machine_id,
                    )
                ),
            )
            timeline.append(
                domain_build_stage_event(stage="plan", status="completed", details=self._job_plan_details(plan))
            )

            timeline.append(domain_build_stage_event(stage="launch", status="started"))
            handle = self._job_launcher.job_launch(
                session=session,
                plan=plan,
                input_arguments=self._config.input_arguments,
            )
            job_id = handle.job_id
            timeline.append(domain_build_stage_event(stage="launch", status="completed", details={"job_id": job_id}))

            if not self._config.wait_for_completion or self._completion_watcher is None:
                logger.info("Not waiting for job id=%s to complete", job_id)
                timeline.append(domain_build_stage_event(stage="run", status="success"))
                return TriggerRunResult(status="success", job_id=job_id, timeline=timeline)

            timeline.append(domain_build_stage_event(stage="watch", status="started"))
            outcome = self._completion_watcher.job_watch(session=session, handle=handle)
            return self._job_finalize_watch_outcome(job_id=job_id, outcome=outcome, timeline=timeline)
        except (TimeoutError, ConnectionError, ValueError, RuntimeError) as error:
            error_code = self._job_error_code_for_exception(error)
            details: dict[str, object] = {
                "error_type": type(error).__name__,
                "error_message": str(error),
                "traceback": traceback.format_exc(),
            }
            if isinstance(error, OrchestratorAdapterError):
                details.update(error.error_diagnostic_details())
            logger.error("%s: %s", error_code, error)
            if isinstance(error, OrchestratorAdapterError) and error.response_body:
                logger.error("Response body (HTTP %s): %s", error.status_code, error.response_body)
            timeline.append(
                domain_build_stage_event(stage="run", status="failed", details=details, error_code=error_code)
            )
            return TriggerRunResult(
                status="failed",
                error_code=error_code,
                error_message=str(error),
                job_id=job_id,
                timeline=timeline,
            )

    def _job_authenticate(self, timeline: list[dict[str, object]]) -> Session:
        """Acquire a token and build the folder-less session."""

        timeline.append(domain_build_stage_event(stage="auth", status="started"))
        bearer_token = self._orchestrator_adapter.adapter_acquire_token(self._credentials)
        timeline.append(domain_build_stage_event(stage="auth", status="completed"))
        logger.info("Authenticated against tenant '%s'", self._credentials.tenant)
        return Session(
            bearer_token=bearer_token,
            tenant=self._credentials.tenant,
            account=self._credentials.account,
        )

    def _job_bind_folder(self, session: Session, timeline: list[dict[str, object]]) -> Session:
        """Resolve the configured folder and return a session bound to it.

        Args:
            session: Folder-less session.
            timeline: Mutable stage timeline events.

        Returns:
            Session: Session bound to the folder, or the input session when no folder is configured.

        Raises:
            FolderNotFoundError: Raised when the folder cannot be resolved.
        """

        folder_name = (self._config.folder_name or "").strip()
        if not folder_name:
            timeline.append(
                domain_build_stage_event(stage="folder", status="skipped", details={"reason": "folder_not_configured"})
            )
            return session

        resolution = self._entity_resolver.job_resolve(
            session=session,
            query=EntityQuery(entity_type="folder", target_name=folder_name, candidate_endpoints=FOLDER_ENDPOINTS),
        )
        if resolution.resolved is None:
            logger.error(
                "Folder '%s' not found. Available folders: %s",
                folder_name,
                ", ".join(resolution.available_names) or "<none>",
            )
            raise FolderNotFoundError(folder_name=folder_name, available_names=resolution.available_names)

        timeline.append(
            domain_build_stage_event(
                stage="folder",
                status="completed",
                details={"folder_id": resolution.resolved.id, "folder_name": resolution.resolved.name},
            )
        )
        return session.session_with_organization_unit(resolution.resolved.id)

    def _job_resolve_release_key(self, session: Session, timeline: list[dict[str, object]]) -> str:
        """Resolve the process release key, degrading to the raw process name.

        Args:
            session: Folder-bound session.
            timeline: Mutable stage timeline events.

        Returns:
            str: Resolved release key or the raw process name.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        process_name = self._config.process_name.strip()
        resolution = self._entity_resolver.job_resolve(
            session=session,
            query=EntityQuery(entity_type="process", target_name=process_name, candidate_endpoints=PROCESS_ENDPOINTS),
        )
        if resolution.resolved is None:
            logger.warning(
                "%s: release key for process '%s' not found; using the process name as key. Available: %s",
                RunErrorCode.RESOLUTION_DEGRADED.value,
                process_name,
                ", ".join(resolution.available_names) or "<none>",
            )
            timeline.append(
                domain_build_stage_event(
                    stage="process",
                    status="degraded",
                    details={"release_key": process_name},
                    error_code=RunErrorCode.RESOLUTION_DEGRADED.value,
                )
            )
            return process_name

        timeline.append(
            domain_build_stage_event(
                stage="process",
                status="completed",
                details={
                    "release_key": resolution.resolved.id,
                    "source_endpoint": resolution.resolved.source_endpoint,
                    "match_kind": resolution.resolved.match_kind,
                },
            )
        )
        return str(resolution.resolved.id)

    def _job_resolve_optional_target(
        self,
        session: Session,
        stage: str,
        target_name: str | None,
        endpoints: tuple[EndpointSpec, ...],
        timeline: list[dict[str, object]],
    ) -> EntityId | None:
        """Resolve an optional robot or machine, falling back to dynamic allocation.

        Args:
            session: Folder-bound session.
            stage: Entity label (`robot` or `machine`).
            target_name: Requested name, when configured.
            endpoints: Candidate endpoints.
            timeline: Mutable stage timeline events.

        Returns:
            EntityId | None: Resolved id, or None for dynamic allocation.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        normalized_name = (target_name or "").strip()
        if not normalized_name:
            return None

        resolution = self._entity_resolver.job_resolve(
            session=session,
            query=EntityQuery(entity_type=stage, target_name=normalized_name, candidate_endpoints=endpoints),
        )
        if resolution.resolved is None:
            logger.warning(
                "%s: %s '%s' not found; using dynamic allocation. Available: %s",
                RunErrorCode.RESOLUTION_MISSING.value,
                stage,
                normalized_name,
                ", ".join(resolution.available_names) or "<none>",
            )
            timeline.append(
                domain_build_stage_event(
                    stage=stage,
                    status="degraded",
                    details={"requested_name": normalized_name, "available_names": list(resolution.available_names)},
                    error_code=RunErrorCode.RESOLUTION_MISSING.value,
                )
            )
            return None

        timeline.append(
            domain_build_stage_event(
                stage=stage,
                status="completed",
                details={f"{stage}_id": resolution.resolved.id, f"{stage}_name": resolution.resolved.name},
            )
        )
        return resolution.resolved.id

    def _job_finalize_watch_outcome(
        self,
        job_id: EntityId,
        outcome: WatchOutcome,
        timeline: list[dict[str, object]],
    ) -> TriggerRunResult:
        """Convert a watcher outcome into the run result.

        Args:
            job_id: Started job id.
            outcome: Watcher outcome.
            timeline: Mutable stage timeline events.

        Returns:
            TriggerRunResult: Success, JOB_FAILED or TIMEOUT result.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        watch_details: dict[str, object] = {
            "phase": outcome.phase.value,
            "job_state": outcome.job_state,
            "tick_count": outcome.tick_count,
            "elapsed_seconds": round(outcome.elapsed_seconds, 3),
        }
        error_code: str | None = None
        error_message: str | None = None
        if outcome.phase is WatchPhase.TIMED_OUT:
            error_code = RunErrorCode.TIMEOUT.value
            error_message = f"job {job_id} did not reach a terminal state in time"
        elif not outcome.succeeded:
            error_code = RunErrorCode.JOB_FAILED.value
            error_message = f"job {job_id} finished with state {outcome.job_state}"

        timeline.append(
            domain_build_stage_event(
                stage="watch",
                status="completed" if error_code is None else "failed",
                details=watch_details,
                error_code=error_code,
            )
        )
        run_status = "success" if error_code is None else "failed"
        timeline.append(domain_build_stage_event(stage="run", status=run_status, error_code=error_code))
        return TriggerRunResult(
            status=run_status,
            error_code=error_code,
            error_message=error_message,
            job_id=job_id,
            job_state=outcome.job_state,
            robot_name=outcome.robot_name,
            machine_name=outcome.machine_name,
            timeline=timeline,
        )

    def _job_plan_details(self, plan: JobTargetPlan) -> dict[str, object]:
        details: dict[str, object] = {
            "release_key": plan.release_key,
            "jobs_count": plan.jobs_count,
            "strategy": plan.strategy,
            "runtime_type": plan.runtime_type,
            "robot_ids": list(plan.robot_ids),
            "machine_session_ids": list(plan.machine_session_ids),
            "machine_ids": list(plan.machine_ids),
        }
        if self._config.priority:
            details["requested_priority"] = self._config.priority
        return details

    def _job_error_code_for_exception(self, error: Exception) -> str:
        """Map workflow exception type to a deterministic run error code.

        Args:
            error: Caught workflow exception.

        Returns:
            str: Deterministic error code.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if isinstance(error, OrchestratorAuthError):
            return RunErrorCode.AUTH_ERROR.value
        if isinstance(error, FolderNotFoundError):
            return RunErrorCode.FOLDER_NOT_FOUND.value
        if isinstance(error, OrchestratorLaunchError):
            return RunErrorCode.LAUNCH_ERROR.value
        if isinstance(error, OrchestratorStatusCheckError):
            return RunErrorCode.STATUS_CHECK_ERROR.value
        if isinstance(error, ValueError):
            return RunErrorCode.CONFIGURATION_ERROR.value
        return RunErrorCode.UNEXPECTED_ERROR.value
