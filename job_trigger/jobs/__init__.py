"""Job layer package for trigger workflow orchestration boundaries."""

from .completion_watcher import (
	DEFAULT_POLL_INTERVAL_SECONDS,
	CompletionWatcher,
	WatchOutcome,
	WatchPhase,
	job_watch_evaluate_tick,
)
from .endpoint_catalog import FOLDER_ENDPOINTS, MACHINE_ENDPOINTS, PROCESS_ENDPOINTS, ROBOT_ENDPOINTS
from .entity_resolver import EntityResolver, job_resolver_exact_match, job_resolver_partial_match
from .interfaces import JobOrchestratorPort, TriggerRunResult
from .job_launcher import JobLauncher
from .run_outcomes import RUN_FATAL_CODES, RUN_NON_FATAL_CODES, FolderNotFoundError, RunErrorCode
from .targeting_planner import job_build_target_plan
from .trigger_orchestrator import TriggerJobOrchestrator, TriggerRunConfig

__all__ = [
	"CompletionWatcher",
	"DEFAULT_POLL_INTERVAL_SECONDS",
	"EntityResolver",
	"FOLDER_ENDPOINTS",
	"FolderNotFoundError",
	"JobLauncher",
	"JobOrchestratorPort",
	"MACHINE_ENDPOINTS",
	"PROCESS_ENDPOINTS",
	"ROBOT_ENDPOINTS",
	"RUN_FATAL_CODES",
	"RUN_NON_FATAL_CODES",
	"RunErrorCode",
	"TriggerJobOrchestrator",
	"TriggerRunConfig",
	"TriggerRunResult",
	"WatchOutcome",
	"WatchPhase",
	"job_build_target_plan",
	"job_resolver_exact_match",
	"job_resolver_partial_match",
	"job_watch_evaluate_tick",
]
