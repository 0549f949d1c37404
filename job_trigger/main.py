"""Command-line entrypoint for triggering one orchestrator job.

This module parses arguments, validates startup configuration, runs the
trigger workflow and maps its result to the process exit code.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from job_trigger.bootstrap import bootstrap_create_orchestrator_adapter, bootstrap_create_trigger_orchestrator
from job_trigger.config import JobTriggerSettings, SettingsLoadError, config_load_settings
from job_trigger.jobs import RunErrorCode, TriggerRunResult

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main_build_argument_parser() -> argparse.ArgumentParser:
    """Build the command-line parser.

    Every option defaults to None so unset options fall back to environment
    variables of the same name.

    Returns:
        argparse.ArgumentParser: Configured parser.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    argument_parser = argparse.ArgumentParser(
        prog="orchestrator-job-trigger",
        description="Start an orchestrator job and optionally wait for it to finish",
    )
    argument_parser.add_argument("--process-name", dest="process_name", type=str, help="Process to start")
    argument_parser.add_argument(
        "--orchestrator-url",
        dest="orchestrator_url",
        type=str,
        help="Orchestrator URL, either the cloud host or the full orchestrator base path",
    )
    argument_parser.add_argument("--tenant", dest="tenant_name", type=str, help="Tenant logical name")
    argument_parser.add_argument("--account", dest="account_name", type=str, help="Account logical name")
    argument_parser.add_argument("--application-id", dest="application_id", type=str, help="External app id")
    argument_parser.add_argument(
        "--application-secret",
        dest="application_secret",
        type=str,
        help="External app secret",
    )
    argument_parser.add_argument(
        "--application-scope",
        dest="application_scope",
        type=str,
        help="External app scopes",
    )
    argument_parser.add_argument(
        "--input-path",
        dest="input_path",
        type=str,
        help="JSON file with process input arguments",
    )
    argument_parser.add_argument("--jobs-count", dest="jobs_count", type=int, help="Number of jobs to start")
    argument_parser.add_argument(
        "--result-path",
        dest="result_path",
        type=str,
        help="File receiving the JSON run summary",
    )
    argument_parser.add_argument(
        "--priority",
        dest="priority",
        type=str,
        help="Requested priority (recorded only)",
    )
    argument_parser.add_argument("--robot-name", dest="robot_name", type=str, help="Robot to target")
    argument_parser.add_argument("--folder-name", dest="folder_name", type=str, help="Folder containing the process")
    argument_parser.add_argument("--machine-name", dest="machine_name", type=str, help="Machine to target")
    argument_parser.add_argument(
        "--timeout-seconds",
        dest="timeout_seconds",
        type=float,
        help="Maximum seconds to wait for completion (default 1800)",
    )
    argument_parser.add_argument(
        "--fail-on-failure",
        dest="fail_on_failure",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Exit non-zero when the job ends Failed or Faulted (default on)",
    )
    argument_parser.add_argument(
        "--wait",
        dest="wait_for_completion",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Wait for the job to reach a terminal state (default on)",
    )
    argument_parser.add_argument(
        "--job-type",
        dest="job_type",
        type=str,
        help="Runtime type sent with the start request (default Unattended)",
    )
    argument_parser.add_argument("--log-level", dest="log_level", type=str, help="Logging level (default INFO)")
    return argument_parser


def main_configure_logging(log_level: str) -> None:
    """Configure root logging once for the command-line process."""

    logging.basicConfig(format=_LOG_FORMAT)
    logging.getLogger().setLevel(log_level)


def main_write_result(result_path: str, result: TriggerRunResult) -> None:
    """Write the run summary as JSON.

    Args:
        result_path: Destination file path.
        result: Run result.

    Returns:
        None: Writes the file as side effect.

    Raises:
        OSError: Raised when the file cannot be written.
    """

    destination = Path(result_path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(result.result_to_payload(), indent=2, default=str), encoding="utf-8")
    logger.info("Run summary written to %s", destination)


def main_run(settings: JobTriggerSettings) -> TriggerRunResult:
    """Build dependencies and execute the trigger workflow once.

    Args:
        settings: Validated settings.

    Returns:
        TriggerRunResult: Run result, including configuration failures.

    Raises:
        RuntimeError: Raised only for failures outside the mapped error taxonomy.
    """

    try:
        orchestrator_adapter = bootstrap_create_orchestrator_adapter(settings)
    except ValueError as error:
        logger.error("%s: %s", RunErrorCode.CONFIGURATION_ERROR.value, error)
        return TriggerRunResult(
            status="failed",
            error_code=RunErrorCode.CONFIGURATION_ERROR.value,
            error_message=str(error),
        )

    try:
        try:
            trigger_orchestrator = bootstrap_create_trigger_orchestrator(settings, orchestrator_adapter)
        except (SettingsLoadError, ValueError) as error:
            logger.error("%s: %s", RunErrorCode.CONFIGURATION_ERROR.value, error)
            return TriggerRunResult(
                status="failed",
                error_code=RunErrorCode.CONFIGURATION_ERROR.value,
                error_message=str(error),
            )
        return trigger_orchestrator.job_execute()
    finally:
        orchestrator_adapter.adapter_close()


def main(argv: list[str] | None = None) -> None:
    """Run one trigger invocation and exit non-zero on any fatal condition.

    Args:
        argv: Optional argument list, defaults to `sys.argv[1:]`.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SystemExit: Raised with code 1 when the run fails.
    """

    parsed_arguments = main_build_argument_parser().parse_args(argv)
    try:
        settings = config_load_settings(overrides=vars(parsed_arguments))
    except SettingsLoadError as error:
        main_configure_logging("INFO")
        logger.error("%s: %s", RunErrorCode.CONFIGURATION_ERROR.value, error)
        raise SystemExit(1) from error

    main_configure_logging(settings.log_level)
    if settings.priority:
        logger.info("Requested priority '%s' is recorded but not sent with the start request", settings.priority)

    result = main_run(settings)

    if settings.result_path:
        try:
            main_write_result(settings.result_path, result)
        except OSError as error:
            logger.error("Run summary could not be written to %s: %s", settings.result_path, error)
            raise SystemExit(1) from error

    if not result.result_is_success():
        logger.error("Run failed with %s", result.error_code)
        raise SystemExit(1)
    logger.info("Run completed successfully (job id=%s, state=%s)", result.job_id, result.job_state or "not awaited")


if __name__ == "__main__":
    main()
