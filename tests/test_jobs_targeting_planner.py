"""Regression tests for job targeting plan construction."""

from __future__ import annotations

import pytest

from job_trigger.adapters import OrchestratorHttpStatusError
from job_trigger.domain import COUNT_BASED_STRATEGY
from job_trigger.jobs import job_build_target_plan


class _SessionLookupStub:
    """Callable session lookup stub recording requested machine ids."""

    def __init__(self, session_ids=None, error: Exception | None = None):
        self._session_ids = list(session_ids or [])
        self._error = error
        self.calls: list[object] = []

    def __call__(self, machine_id):
        self.calls.append(machine_id)
        if self._error is not None:
            raise self._error
        return list(self._session_ids)


def test_jobs_planner_available_session_targets_session_only() -> None:
    """Target the first available session and leave machine ids empty.

    Returns:
        None: Assertions validate session-based targeting.

    Raises:
        AssertionError: Raised when both machine fields are populated.
    """

    session_lookup = _SessionLookupStub(session_ids=[7, 8])

    plan = job_build_target_plan(
        release_key="rk-1",
        jobs_count=1,
        runtime_type="Unattended",
        robot_id=None,
        machine_id=42,
        session_lookup=session_lookup,
    )

    assert plan.machine_session_ids == (7,)
    assert plan.machine_ids == ()
    assert session_lookup.calls == [42]
    start_info = plan.plan_to_start_info()
    assert start_info["MachineSessionIds"] == [7]
    assert "MachineIds" not in start_info


def test_jobs_planner_without_sessions_falls_back_to_machine_id() -> None:
    """Target the machine directly when it has no available session."""

    plan = job_build_target_plan(
        release_key="rk-1",
        jobs_count=1,
        runtime_type="Unattended",
        robot_id=None,
        machine_id=42,
        session_lookup=_SessionLookupStub(session_ids=[]),
    )

    assert plan.machine_ids == (42,)
    assert plan.machine_session_ids == ()
    start_info = plan.plan_to_start_info()
    assert start_info["MachineIds"] == [42]
    assert "MachineSessionIds" not in start_info


def test_jobs_planner_session_lookup_failure_falls_back_to_machine_id() -> None:
    """Recover from session lookup failures with machine-level targeting."""

    plan = job_build_target_plan(
        release_key="rk-1",
        jobs_count=1,
        runtime_type="Unattended",
        robot_id=None,
        machine_id=42,
        session_lookup=_SessionLookupStub(error=OrchestratorHttpStatusError("forbidden", status_code=403)),
    )

    assert plan.machine_ids == (42,)
    assert plan.machine_session_ids == ()


def test_jobs_planner_robot_id_is_sole_robot_target() -> None:
    """Include a resolved robot id as the only robot target."""

    session_lookup = _SessionLookupStub()

    plan = job_build_target_plan(
        release_key="rk-1",
        jobs_count=2,
        runtime_type="NonProduction",
        robot_id=5,
        machine_id=None,
        session_lookup=session_lookup,
    )

    assert plan.robot_ids == (5,)
    assert plan.plan_to_start_info()["RobotIds"] == [5]
    assert session_lookup.calls == []


def test_jobs_planner_without_targets_uses_dynamic_allocation() -> None:
    """Omit every targeting field and keep fixed strategy and runtime type.

    Returns:
        None: Assertions validate the dynamic-allocation payload.

    Raises:
        AssertionError: Raised when targeting fields are emitted.
    """

    plan = job_build_target_plan(
        release_key="rk-1",
        jobs_count=1,
        runtime_type="Unattended",
        robot_id=None,
        machine_id=None,
        session_lookup=_SessionLookupStub(),
    )

    assert plan.plan_to_start_info(input_arguments='{"a":1}') == {
        "ReleaseKey": "rk-1",
        "JobsCount": 1,
        "InputArguments": '{"a":1}',
        "Strategy": COUNT_BASED_STRATEGY,
        "RuntimeType": "Unattended",
    }


@pytest.mark.parametrize("session_ids", [[], [11], [11, 12]])
@pytest.mark.parametrize("lookup_fails", [False, True])
def test_jobs_planner_never_populates_both_machine_fields(session_ids: list[int], lookup_fails: bool) -> None:
    """Keep session and machine targeting mutually exclusive for every lookup outcome."""

    session_lookup = _SessionLookupStub(
        session_ids=session_ids,
        error=OrchestratorHttpStatusError("boom", status_code=500) if lookup_fails else None,
    )

    plan = job_build_target_plan(
        release_key="rk-1",
        jobs_count=1,
        runtime_type="Unattended",
        robot_id=None,
        machine_id=42,
        session_lookup=session_lookup,
    )

    assert bool(plan.machine_session_ids) != bool(plan.machine_ids)
