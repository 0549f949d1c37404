"""Regression tests for immutable domain contracts."""

from __future__ import annotations

import dataclasses

import pytest

from job_trigger.domain import (
    COUNT_BASED_STRATEGY,
    Credentials,
    JobTargetPlan,
    Session,
    domain_build_stage_event,
    domain_job_state_is_failing,
    domain_job_state_is_terminal,
)


def test_domain_session_binds_organization_unit_exactly_once() -> None:
    """Return a new bound session and refuse a second folder binding.

    Returns:
        None: Assertions validate construct-then-freeze behavior.

    Raises:
        AssertionError: Raised when the session is mutated or rebound.
    """

    session = Session(bearer_token="token", tenant="DefaultTenant", account="acme")

    bound_session = session.session_with_organization_unit(12)

    assert session.organization_unit_id is None
    assert bound_session.organization_unit_id == 12
    assert bound_session.bearer_token == "token"
    with pytest.raises(ValueError, match="already set"):
        bound_session.session_with_organization_unit(13)
    with pytest.raises(dataclasses.FrozenInstanceError):
        bound_session.organization_unit_id = 14  # type: ignore[misc]


def test_domain_session_repr_hides_bearer_token() -> None:
    """Keep bearer tokens and secrets out of repr output."""

    session = Session(bearer_token="super-secret-token", tenant="DefaultTenant", account="acme")
    credentials = Credentials(
        application_id="app-id",
        application_secret="super-secret",
        scope="OR.Jobs",
        tenant="DefaultTenant",
        account="acme",
    )

    assert "super-secret-token" not in repr(session)
    assert "super-secret" not in repr(credentials)


def test_domain_credentials_reject_blank_fields() -> None:
    """Reject credentials with blank required fields."""

    with pytest.raises(ValueError, match="scope must not be blank"):
        Credentials(application_id="app-id", application_secret="secret", scope=" ", tenant="T", account="A")


def test_domain_plan_rejects_session_and_machine_targeting_together() -> None:
    """Refuse plans carrying both machine targeting fields."""

    with pytest.raises(ValueError, match="mutually exclusive"):
        JobTargetPlan(
            release_key="rk-1",
            jobs_count=1,
            strategy=COUNT_BASED_STRATEGY,
            runtime_type="Unattended",
            machine_session_ids=(7,),
            machine_ids=(42,),
        )


def test_domain_plan_rejects_non_positive_jobs_count() -> None:
    """Refuse plans that would start no jobs."""

    with pytest.raises(ValueError, match="jobs_count"):
        JobTargetPlan(release_key="rk-1", jobs_count=0, strategy=COUNT_BASED_STRATEGY, runtime_type="Unattended")


@pytest.mark.parametrize(
    ("state", "terminal", "failing"),
    [
        ("Pending", False, False),
        ("Running", False, False),
        ("Stopping", False, False),
        ("Successful", True, False),
        ("Stopped", True, False),
        ("Failed", True, True),
        ("Faulted", True, True),
    ],
)
def test_domain_job_state_classification(state: str, terminal: bool, failing: bool) -> None:
    """Classify job states into terminal and failing sets."""

    assert domain_job_state_is_terminal(state) is terminal
    assert domain_job_state_is_failing(state) is failing


def test_domain_stage_event_includes_error_code_only_when_given() -> None:
    """Attach error codes and details only when provided."""

    plain_event = domain_build_stage_event(stage="auth", status="started")
    coded_event = domain_build_stage_event(
        stage="process",
        status="degraded",
        details={"release_key": "InvoiceBot"},
        error_code="RESOLUTION_DEGRADED",
    )

    assert set(plain_event) == {"stage", "status", "at_utc"}
    assert coded_event["error_code"] == "RESOLUTION_DEGRADED"
    assert coded_event["details"] == {"release_key": "InvoiceBot"}
