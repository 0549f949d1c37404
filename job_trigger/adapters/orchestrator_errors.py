"""Project-native typed exceptions for orchestrator adapter failures."""

from __future__ import annotations


class OrchestratorAdapterError(Exception):
    """Base exception for adapter-level orchestrator failures.

    Attributes:
        status_code: HTTP status code when the service answered.
        response_body: Raw response body text when available.
    """

    def __init__(self, message: str, status_code: int | None = None, response_body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body

    def error_diagnostic_details(self) -> dict[str, object]:
        """Return structured diagnostics for logs and run timelines."""

        details: dict[str, object] = {"error_type": type(self).__name__, "error_message": str(self)}
        if self.status_code is not None:
            details["status_code"] = self.status_code
        if self.response_body:
            details["response_body"] = self.response_body
        return details


class OrchestratorConnectionError(OrchestratorAdapterError, ConnectionError):
    """Transport-level connectivity failure during orchestrator communication."""


class OrchestratorTimeoutError(OrchestratorAdapterError, TimeoutError):
    """Transport timeout while waiting for an orchestrator response."""


class OrchestratorHttpStatusError(OrchestratorAdapterError, ConnectionError):
    """Non-success HTTP status returned by the orchestrator."""


class OrchestratorResponseError(OrchestratorAdapterError, ValueError):
    """Response body did not match the expected JSON contract."""


class OrchestratorAuthError(OrchestratorAdapterError, RuntimeError):
    """Token acquisition failed."""


class OrchestratorLaunchError(OrchestratorAdapterError, RuntimeError):
    """Job submission failed or returned no started jobs."""


class OrchestratorStatusCheckError(OrchestratorAdapterError, RuntimeError):
    """Job status request failed while waiting for completion."""


def adapter_wrap_error(
    error: OrchestratorAdapterError,
    error_type: type[OrchestratorAdapterError],
    message: str,
) -> OrchestratorAdapterError:
    """Re-wrap a transport error as an operation error keeping HTTP details.

    Args:
        error: Original adapter error.
        error_type: Operation-level error class.
        message: Operation context prefix.

    Returns:
        OrchestratorAdapterError: New error instance of `error_type`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return error_type(
        f"{message}: {error}",
        status_code=error.status_code,
        response_body=error.response_body,
    )
