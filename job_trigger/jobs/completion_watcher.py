"""Fixed-interval job completion watcher.

The watcher is an explicit tick state machine: `LAUNCHED -> POLLING ->
COMPLETED | TIMED_OUT`. Each tick waits one interval, fetches the job status
exactly once, then evaluates the terminal state before the elapsed-time
budget. `job_watch_evaluate_tick` holds the per-tick decision so the loop can
be driven by any scheduler without changing cadence or termination rules.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from job_trigger.adapters import OrchestratorAdapterPort
from job_trigger.domain import (
    JobHandle,
    JobStatus,
    Session,
    domain_job_state_is_failing,
    domain_job_state_is_terminal,
)

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 10.0


class WatchPhase(str, Enum):
    """Completion watcher states."""

    LAUNCHED = "launched"
    POLLING = "polling"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class WatchOutcome:
    """Final watcher outcome.

    Attributes:
        phase: `COMPLETED` or `TIMED_OUT`.
        succeeded: Whether the outcome counts as success under the failure policy.
        tick_count: Number of status fetches performed.
        elapsed_seconds: Elapsed time at the final tick.
        job_state: Last observed job state.
        robot_name: Executing robot name, when reported.
        machine_name: Executing machine name, when reported.
    """

    phase: WatchPhase
    succeeded: bool
    tick_count: int
    elapsed_seconds: float
    job_state: str | None = None
    robot_name: str | None = None
    machine_name: str | None = None


def job_watch_evaluate_tick(
    status: JobStatus,
    tick_count: int,
    elapsed_seconds: float,
    timeout_seconds: float,
    fail_on_failure: bool,
) -> WatchOutcome | None:
    """Decide the watcher transition for one fetched status.

    Args:
        status: Status fetched on this tick.
        tick_count: One-based tick number.
        elapsed_seconds: Time elapsed since the watch started.
        timeout_seconds: Wait budget.
        fail_on_failure: Whether Failed/Faulted states count as failures.

    Returns:
        WatchOutcome | None: Final outcome, or None to keep polling.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if domain_job_state_is_terminal(status.state):
        failed = fail_on_failure and domain_job_state_is_failing(status.state)
        return WatchOutcome(
            phase=WatchPhase.COMPLETED,
            succeeded=not failed,
            tick_count=tick_count,
            elapsed_seconds=elapsed_seconds,
            job_state=status.state,
            robot_name=status.robot_name,
            machine_name=status.machine_name,
        )
    if elapsed_seconds >= timeout_seconds:
        return WatchOutcome(
            phase=WatchPhase.TIMED_OUT,
            succeeded=False,
            tick_count=tick_count,
            elapsed_seconds=elapsed_seconds,
            job_state=status.state,
            robot_name=status.robot_name,
            machine_name=status.machine_name,
        )
    return None


class CompletionWatcher:
    """Poll job status on a fixed interval until a terminal state or timeout."""

    def __init__(
        self,
        orchestrator_adapter: OrchestratorAdapterPort,
        timeout_seconds: float,
        fail_on_failure: bool = True,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], None] | None = None,
        clock: Callable[[], float] | None = None,
    ):
        """Initialize watcher configuration.

        Args:
            orchestrator_adapter: Adapter used for status fetches.
            timeout_seconds: Cumulative wait budget.
            fail_on_failure: Whether Failed/Faulted states are failures.
            poll_interval_seconds: Fixed tick interval.
            sleep: Optional sleep function, defaults to `time.sleep`.
            clock: Optional monotonic clock, defaults to `time.monotonic`.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when timing values are invalid.
        """

        if orchestrator_adapter is None:
            raise ValueError("orchestrator_adapter must not be None")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be > 0")

        self._orchestrator_adapter = orchestrator_adapter
        self._timeout_seconds = float(timeout_seconds)
        self._fail_on_failure = fail_on_failure
        self._poll_interval_seconds = float(poll_interval_seconds)
        self._sleep = sleep or time.sleep
        self._clock = clock or time.monotonic

    def job_watch(self, session: Session, handle: JobHandle) -> WatchOutcome:
        """Run the polling loop for one job.

        Args:
            session: Authenticated request context bound to the job folder.
            handle: Started job handle.

        Returns:
            WatchOutcome: Completed or timed-out outcome.

        Raises:
            OrchestratorStatusCheckError: Raised immediately when a status fetch fails.
        """

        started_at = self._clock()
        phase = WatchPhase.LAUNCHED
        tick_count = 0
        logger.info(
            "Waiting for job id=%s (timeout=%ss, interval=%ss)",
            handle.job_id,
            self._timeout_seconds,
            self._poll_interval_seconds,
        )

        while phase in (WatchPhase.LAUNCHED, WatchPhase.POLLING):
            self._sleep(self._poll_interval_seconds)
            tick_count += 1
            phase = WatchPhase.POLLING

            status = self._orchestrator_adapter.adapter_get_job_status(session=session, job_id=handle.job_id)
            elapsed_seconds = self._clock() - started_at
            logger.info(
                "Job id=%s state=%s (tick %d, %.0fs elapsed)",
                handle.job_id,
                status.state,
                tick_count,
                elapsed_seconds,
            )

            outcome = job_watch_evaluate_tick(
                status=status,
                tick_count=tick_count,
                elapsed_seconds=elapsed_seconds,
                timeout_seconds=self._timeout_seconds,
                fail_on_failure=self._fail_on_failure,
            )
            if outcome is not None:
                self._job_log_outcome(handle=handle, outcome=outcome)
                return outcome

        raise RuntimeError(f"watcher left polling loop in unexpected phase={phase.value}")

    def _job_log_outcome(self, handle: JobHandle, outcome: WatchOutcome) -> None:
        if outcome.phase is WatchPhase.TIMED_OUT:
            logger.error(
                "Job id=%s did not finish within %ss (last state=%s)",
                handle.job_id,
                self._timeout_seconds,
                outcome.job_state,
            )
            return
        log_level = logging.INFO if outcome.succeeded else logging.ERROR
        logger.log(
            log_level,
            "Job id=%s finished with state=%s (robot=%s, machine=%s)",
            handle.job_id,
            outcome.job_state,
            outcome.robot_name or "-",
            outcome.machine_name or "-",
        )
