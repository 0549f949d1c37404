"""Typed runtime settings with dotenv support and startup validation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ALLOWED_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class JobTriggerSettings(BaseSettings):
    """Settings for one job trigger invocation.

    Environment variable names map directly to field names in uppercase.
    Example: `orchestrator_url` reads from `ORCHESTRATOR_URL`. Command-line
    arguments take precedence over environment values.

    Attributes:
        orchestrator_url: Orchestrator URL, bare host or full base path.
        tenant_name: Tenant logical name.
        account_name: Account logical name.
        application_id: External application client id.
        application_secret: External application client secret.
        application_scope: Space-separated OAuth scopes.
        process_name: Process to start.
        folder_name: Optional folder providing the organization unit context.
        robot_name: Optional robot to target.
        machine_name: Optional machine to target.
        jobs_count: Number of jobs to start.
        job_type: Runtime type sent with the start request.
        priority: Requested priority, recorded for diagnostics only.
        input_path: Optional JSON file with process input arguments.
        result_path: Optional JSON file receiving the run summary.
        wait_for_completion: Whether to poll until the job finishes.
        fail_on_failure: Whether Failed/Faulted job states fail the run.
        timeout_seconds: Cumulative wait budget for completion.
        poll_interval_seconds: Fixed status polling interval.
        request_timeout_seconds: Optional per-request HTTP timeout; unset waits indefinitely.
        log_level: Root logging level.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    orchestrator_url: str = Field(min_length=1)
    tenant_name: str = Field(min_length=1)
    account_name: str = Field(min_length=1)
    application_id: str = Field(min_length=1)
    application_secret: str = Field(min_length=1, repr=False)
    application_scope: str = Field(min_length=1)
    process_name: str = Field(min_length=1)
    folder_name: str | None = Field(default=None)
    robot_name: str | None = Field(default=None)
    machine_name: str | None = Field(default=None)
    jobs_count: int = Field(default=1, ge=1)
    job_type: str = Field(default="Unattended", min_length=1)
    priority: str | None = Field(default=None)
    input_path: str | None = Field(default=None)
    result_path: str | None = Field(default=None)
    wait_for_completion: bool = Field(default=True)
    fail_on_failure: bool = Field(default=True)
    timeout_seconds: float = Field(default=1800.0, gt=0)
    poll_interval_seconds: float = Field(default=10.0, gt=0)
    request_timeout_seconds: float | None = Field(default=None, gt=0)
    log_level: str = Field(default="INFO")

    @field_validator(
        "orchestrator_url",
        "tenant_name",
        "account_name",
        "application_id",
        "application_secret",
        "application_scope",
        "process_name",
        "job_type",
    )
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("folder_name", "robot_name", "machine_name", "priority", "input_path", "result_path")
    @classmethod
    def _normalize_optional_string(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped_value = value.strip()
        return stripped_value or None

    @field_validator("orchestrator_url")
    @classmethod
    def _validate_url_scheme(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("orchestrator_url must start with http:// or https://")
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in _ALLOWED_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_ALLOWED_LOG_LEVELS)}")
        return normalized_value


def config_load_settings(overrides: dict[str, Any] | None = None) -> JobTriggerSettings:
    """Load and validate settings from environment, dotenv and explicit overrides.

    Args:
        overrides: Values taking precedence over the environment; None values are ignored.

    Returns:
        JobTriggerSettings: Validated settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    explicit_values = {key: value for key, value in (overrides or {}).items() if value is not None}
    try:
        return JobTriggerSettings(**explicit_values)
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Pass the missing arguments or set environment variables. "
            f"Details: {error}"
        ) from error


def config_load_input_arguments(input_path: str | None) -> str:
    """Load process input arguments as the JSON string sent with the start request.

    Args:
        input_path: Optional path to a JSON object file.

    Returns:
        str: Compact JSON object text, `{}` when no path is configured.

    Raises:
        SettingsLoadError: Raised when the file is unreadable or not a JSON object.
    """

    if input_path is None:
        return "{}"

    try:
        payload = json.loads(Path(input_path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as error:
        raise SettingsLoadError(f"Input arguments file could not be loaded: {input_path}: {error}") from error
    if not isinstance(payload, dict):
        raise SettingsLoadError(f"Input arguments file must contain a JSON object: {input_path}")
    return json.dumps(payload, separators=(",", ":"))
