"""Application bootstrap wiring for validated settings and dependency assembly."""

from __future__ import annotations

from typing import Callable

import httpx

from job_trigger.adapters import OrchestratorClientAdapter
from job_trigger.config import JobTriggerSettings, config_load_input_arguments
from job_trigger.domain import Credentials
from job_trigger.jobs import CompletionWatcher, TriggerJobOrchestrator, TriggerRunConfig


def bootstrap_create_orchestrator_adapter(
    settings: JobTriggerSettings,
    http_client: httpx.Client | None = None,
) -> OrchestratorClientAdapter:
    """Build the orchestrator REST adapter from settings.

    Args:
        settings: Validated settings.
        http_client: Optional preconfigured HTTP client.

    Returns:
        OrchestratorClientAdapter: Adapter bound to the configured orchestrator.

    Raises:
        ValueError: Raised when the orchestrator URL is invalid.
    """

    return OrchestratorClientAdapter(
        orchestrator_url=settings.orchestrator_url,
        account=settings.account_name,
        tenant=settings.tenant_name,
        request_timeout_seconds=settings.request_timeout_seconds,
        http_client=http_client,
    )


def bootstrap_create_trigger_orchestrator(
    settings: JobTriggerSettings,
    orchestrator_adapter: OrchestratorClientAdapter,
    sleep: Callable[[float], None] | None = None,
    clock: Callable[[], float] | None = None,
) -> TriggerJobOrchestrator:
    """Build the trigger orchestrator for one invocation.

    Args:
        settings: Validated settings.
        orchestrator_adapter: Orchestrator REST adapter.
        sleep: Optional watcher sleep override.
        clock: Optional watcher clock override.

    Returns:
        TriggerJobOrchestrator: Fully wired orchestrator instance.

    Raises:
        SettingsLoadError: Raised when the input arguments file is invalid.
    """

    credentials = Credentials(
        application_id=settings.application_id,
        application_secret=settings.application_secret,
        scope=settings.application_scope,
        tenant=settings.tenant_name,
        account=settings.account_name,
    )
    completion_watcher = None
    if settings.wait_for_completion:
        completion_watcher = CompletionWatcher(
            orchestrator_adapter=orchestrator_adapter,
            timeout_seconds=settings.timeout_seconds,
            fail_on_failure=settings.fail_on_failure,
            poll_interval_seconds=settings.poll_interval_seconds,
            sleep=sleep,
            clock=clock,
        )
    return TriggerJobOrchestrator(
        orchestrator_adapter=orchestrator_adapter,
        credentials=credentials,
        config=TriggerRunConfig(
            process_name=settings.process_name,
            jobs_count=settings.jobs_count,
            runtime_type=settings.job_type,
            folder_name=settings.folder_name,
            robot_name=settings.robot_name,
            machine_name=settings.machine_name,
            wait_for_completion=settings.wait_for_completion,
            input_arguments=config_load_input_arguments(settings.input_path),
            priority=settings.priority,
        ),
        completion_watcher=completion_watcher,
    )
