"""Regression tests for the command-line entrypoint and exit codes."""

from __future__ import annotations

import json
from pathlib import Path

import httpx

import pytest

import job_trigger.jobs.completion_watcher as completion_watcher_module
import job_trigger.main as main_module
from job_trigger.adapters import OrchestratorClientAdapter
from job_trigger.config import JobTriggerSettings

_REQUIRED_ARGUMENTS = [
    "--process-name",
    "InvoiceBot",
    "--orchestrator-url",
    "https://cloud.example.test",
    "--tenant",
    "DefaultTenant",
    "--account",
    "acme",
    "--application-id",
    "app-id",
    "--application-secret",
    "app-secret",
    "--application-scope",
    "OR.Jobs",
]


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run each test without ambient settings from the environment or a dotenv file."""

    monkeypatch.chdir(tmp_path)
    for field_name in JobTriggerSettings.model_fields:
        monkeypatch.delenv(field_name.upper(), raising=False)


def _install_mock_orchestrator(monkeypatch: pytest.MonkeyPatch, job_state: str) -> list[httpx.Request]:
    """Route adapter construction to an in-memory orchestrator.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        job_state: State reported by every job status request.

    Returns:
        list[httpx.Request]: Captured requests, filled as the run progresses.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    captured_requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        captured_requests.append(request)
        request_path = request.url.path
        if request_path.endswith("/identity_/connect/token"):
            return httpx.Response(200, json={"access_token": "token-123"})
        if request_path.endswith("/odata/Folders"):
            return httpx.Response(200, json={"value": [{"Id": 12, "DisplayName": "Finance"}]})
        if request_path.endswith("/odata/Releases"):
            return httpx.Response(200, json={"value": [{"Key": "release-key-1", "Name": "InvoiceBot"}]})
        if request_path.endswith("StartJobs"):
            return httpx.Response(201, json={"value": [{"Id": 99}]})
        if request_path.endswith("/odata/Jobs(99)"):
            return httpx.Response(200, json={"State": job_state, "Robot": {"Name": "robot-a", "MachineName": "VM-01"}})
        return httpx.Response(200, json={"value": []})

    def _create_adapter(settings: JobTriggerSettings) -> OrchestratorClientAdapter:
        return OrchestratorClientAdapter(
            orchestrator_url=settings.orchestrator_url,
            account=settings.account_name,
            tenant=settings.tenant_name,
            http_client=httpx.Client(transport=httpx.MockTransport(_handler)),
        )

    monkeypatch.setattr(main_module, "bootstrap_create_orchestrator_adapter", _create_adapter)
    monkeypatch.setattr(completion_watcher_module.time, "sleep", lambda seconds: None)
    return captured_requests


def test_main_missing_required_arguments_exit_with_code_one() -> None:
    """Exit with code 1 when required configuration is missing."""

    with pytest.raises(SystemExit) as exit_info:
        main_module.main(["--process-name", "InvoiceBot"])

    assert exit_info.value.code == 1


def test_main_no_wait_run_succeeds_and_writes_result(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Return normally after launch and write the run summary when waiting is disabled.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate exit behavior and summary content.

    Raises:
        AssertionError: Raised when the run fails or the summary is wrong.
    """

    captured_requests = _install_mock_orchestrator(monkeypatch, job_state="Running")
    result_path = tmp_path / "out" / "result.json"

    main_module.main(
        [*_REQUIRED_ARGUMENTS, "--folder-name", "Finance", "--no-wait", "--result-path", str(result_path)]
    )

    summary = json.loads(result_path.read_text(encoding="utf-8"))
    assert summary["status"] == "success"
    assert summary["job_id"] == 99
    assert summary["job_state"] is None
    assert not any(request.url.path.endswith("/odata/Jobs(99)") for request in captured_requests)


def test_main_waits_and_exits_one_when_job_faults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Exit with code 1 when the awaited job ends Faulted."""

    _install_mock_orchestrator(monkeypatch, job_state="Faulted")
    result_path = tmp_path / "result.json"

    with pytest.raises(SystemExit) as exit_info:
        main_module.main([*_REQUIRED_ARGUMENTS, "--result-path", str(result_path)])

    assert exit_info.value.code == 1
    summary = json.loads(result_path.read_text(encoding="utf-8"))
    assert summary["error_code"] == "JOB_FAILED"
    assert summary["robot_name"] == "robot-a"


def test_main_faulted_job_succeeds_when_failure_policy_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    """Return normally for a Faulted job when fail-on-failure is turned off."""

    _install_mock_orchestrator(monkeypatch, job_state="Faulted")

    main_module.main([*_REQUIRED_ARGUMENTS, "--no-fail-on-failure"])


def test_main_invalid_input_file_exits_with_configuration_error(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    """Exit with code 1 and record CONFIGURATION_ERROR for unreadable input files."""

    _install_mock_orchestrator(monkeypatch, job_state="Successful")
    result_path = tmp_path / "result.json"

    with pytest.raises(SystemExit) as exit_info:
        main_module.main(
            [
                *_REQUIRED_ARGUMENTS,
                "--input-path",
                str(tmp_path / "missing.json"),
                "--result-path",
                str(result_path),
            ]
        )

    assert exit_info.value.code == 1
    assert json.loads(result_path.read_text(encoding="utf-8"))["error_code"] == "CONFIGURATION_ERROR"
