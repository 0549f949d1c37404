"""Job submission and started-job id extraction."""

from __future__ import annotations

import json
import logging

from job_trigger.adapters import OrchestratorAdapterPort, OrchestratorLaunchError
from job_trigger.domain import JobHandle, JobTargetPlan, Session

logger = logging.getLogger(__name__)


class JobLauncher:
    """Submit one job-start request and return the handle of the first started job."""

    def __init__(self, orchestrator_adapter: OrchestratorAdapterPort):
        if orchestrator_adapter is None:
            raise ValueError("orchestrator_adapter must not be None")
        self._orchestrator_adapter = orchestrator_adapter

    def job_launch(self, session: Session, plan: JobTargetPlan, input_arguments: str = "{}") -> JobHandle:
        """Submit the plan and extract the started job id.

        Args:
            session: Authenticated request context bound to the target folder.
            plan: Immutable targeting plan.
            input_arguments: JSON-encoded process input arguments.

        Returns:
            JobHandle: Handle of the first started job.

        Raises:
            OrchestratorLaunchError: Raised when submission fails or no job was started.
        """

        start_info = plan.plan_to_start_info(input_arguments=input_arguments)
        logger.info("Starting job with payload: %s", json.dumps(start_info, default=str))
        started_jobs = self._orchestrator_adapter.adapter_start_jobs(session=session, start_info=start_info)
        if not started_jobs:
            raise OrchestratorLaunchError("Job start response contained no started jobs")

        job_id = started_jobs[0].get("Id")
        if job_id is None:
            raise OrchestratorLaunchError(
                "Job start response missing Id for first started job",
                response_body=json.dumps(started_jobs[0], default=str),
            )
        if len(started_jobs) > 1:
            logger.info("Service started %d jobs; tracking the first", len(started_jobs))
        logger.info("Job started with id=%s", job_id)
        return JobHandle(job_id=job_id)
