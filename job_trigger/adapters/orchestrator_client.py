"""Orchestrator REST adapter implementation for auth, discovery and job lifecycle calls."""

from __future__ import annotations

import logging
from typing import Any, Final
from urllib.parse import urlsplit

import httpx

from job_trigger.domain import Credentials, EntityId, JobStatus, Session

from .interfaces import OrchestratorAdapterPort
from .orchestrator_errors import (
    OrchestratorAdapterError,
    OrchestratorAuthError,
    OrchestratorConnectionError,
    OrchestratorHttpStatusError,
    OrchestratorLaunchError,
    OrchestratorResponseError,
    OrchestratorStatusCheckError,
    OrchestratorTimeoutError,
    adapter_wrap_error,
)

logger = logging.getLogger(__name__)


def adapter_build_identity_root(orchestrator_url: str) -> str:
    """Return the scheme and host portion of the orchestrator URL.

    Args:
        orchestrator_url: Orchestrator URL as configured.

    Returns:
        str: Identity root such as `https://cloud.example.com`.

    Raises:
        ValueError: Raised when the URL lacks a scheme or host.
    """

    parsed_url = urlsplit(orchestrator_url.strip())
    if not parsed_url.scheme or not parsed_url.netloc:
        raise ValueError("orchestrator_url must include scheme and host")
    return f"{parsed_url.scheme}://{parsed_url.netloc}"


def adapter_build_base_url(orchestrator_url: str, account: str, tenant: str) -> str:
    """Return the orchestrator base URL that OData paths are appended to.

    A bare host URL is expanded to `{host}/{account}/{tenant}/orchestrator_`;
    a URL that already carries a path is used as given.

    Args:
        orchestrator_url: Orchestrator URL as configured.
        account: Account logical name.
        tenant: Tenant logical name.

    Returns:
        str: Base URL without trailing slash.

    Raises:
        ValueError: Raised when the URL lacks a scheme or host.
    """

    identity_root = adapter_build_identity_root(orchestrator_url)
    url_path = urlsplit(orchestrator_url.strip()).path.strip("/")
    if not url_path:
        return f"{identity_root}/{account.strip()}/{tenant.strip()}/orchestrator_"
    return f"{identity_root}/{url_path}"


class OrchestratorClientAdapter(OrchestratorAdapterPort):
    """Adapter implementation backed by one pooled `httpx.Client`."""

    _TOKEN_PATH: Final[str] = "identity_/connect/token"
    _SESSIONS_PATH: Final[str] = "odata/Sessions"
    _START_JOBS_PATH: Final[str] = "odata/Jobs/UiPath.Server.Configuration.OData.StartJobs"
    _TENANT_HEADER: Final[str] = "X-UIPATH-TenantName"
    _ACCOUNT_HEADER: Final[str] = "X-UIPATH-AccountName"
    _ORGANIZATION_UNIT_HEADER: Final[str] = "X-UIPATH-OrganizationUnitId"

    def __init__(
        self,
        orchestrator_url: str,
        account: str,
        tenant: str,
        request_timeout_seconds: float | None = None,
        http_client: httpx.Client | None = None,
    ):
        """Initialize orchestrator adapter.

        Args:
            orchestrator_url: Orchestrator URL, bare host or full base path.
            account: Account logical name.
            tenant: Tenant logical name.
            request_timeout_seconds: Optional per-request timeout; None waits indefinitely.
            http_client: Optional preconfigured client, mainly for tests.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        if not account.strip():
            raise ValueError("account must not be blank")
        if not tenant.strip():
            raise ValueError("tenant must not be blank")
        if request_timeout_seconds is not None and request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._identity_root = adapter_build_identity_root(orchestrator_url)
        self._base_url = adapter_build_base_url(orchestrator_url, account=account, tenant=tenant)
        self._http_client = http_client or httpx.Client(timeout=request_timeout_seconds)

    def adapter_close(self) -> None:
        """Close the pooled HTTP client."""

        self._http_client.close()

    def adapter_acquire_token(self, credentials: Credentials) -> str:
        """Exchange application credentials for a bearer token.

        Args:
            credentials: Application credentials.

        Returns:
            str: Non-empty bearer token.

        Raises:
            OrchestratorAuthError: Raised for transport, HTTP or contract failures.
        """

        token_url = f"{self._identity_root}/{self._TOKEN_PATH}"
        form_body = {
            "grant_type": "client_credentials",
            "client_id": credentials.application_id,
            "client_secret": credentials.application_secret,
            "scope": credentials.scope,
        }
        logger.debug("Requesting access token from %s", token_url)
        try:
            response = self._adapter_request(
                "POST",
                token_url,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                data=form_body,
            )
            payload = self._adapter_parse_json_object(response, context_label="token")
        except OrchestratorAdapterError as error:
            raise adapter_wrap_error(error, OrchestratorAuthError, "Token acquisition failed") from error

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token.strip():
            raise OrchestratorAuthError(
                "Token acquisition failed: response missing access_token",
                status_code=response.status_code,
                response_body=response.text,
            )
        return access_token

    def adapter_list_entities(self, session: Session, list_path: str) -> list[dict[str, Any]]:
        """Return the `value` array of one OData listing.

        Args:
            session: Authenticated request context.
            list_path: OData path relative to the base URL.

        Returns:
            list[dict[str, Any]]: Object elements in service order.

        Raises:
            OrchestratorAdapterError: Raised on transport or contract failures.
        """

        return self._adapter_get_value_array(session=session, path=list_path)

    def adapter_list_available_session_ids(self, session: Session, machine_id: EntityId) -> list[EntityId]:
        """Return ids of sessions in `Available` state on one machine.

        Args:
            session: Authenticated request context.
            machine_id: Resolved machine id.

        Returns:
            list[EntityId]: Session ids in service order.

        Raises:
            OrchestratorAdapterError: Raised on transport or contract failures.
        """

        session_elements = self._adapter_get_value_array(
            session=session,
            path=self._SESSIONS_PATH,
            params={"$filter": f"Machine/Id eq {machine_id} and State eq 'Available'"},
        )
        return [element["Id"] for element in session_elements if element.get("Id") is not None]

    def adapter_start_jobs(self, session: Session, start_info: dict[str, object]) -> list[dict[str, Any]]:
        """Submit one job-start request and return started job elements.

        Args:
            session: Authenticated request context.
            start_info: Serialized start info payload.

        Returns:
            list[dict[str, Any]]: Started job elements, possibly empty.

        Raises:
            OrchestratorLaunchError: Raised for transport, HTTP or contract failures.
        """

        start_url = f"{self._base_url}/{self._START_JOBS_PATH}"
        try:
            response = self._adapter_request(
                "POST",
                start_url,
                headers=self._adapter_session_headers(session),
                json={"startInfo": start_info},
            )
            payload = self._adapter_parse_json_object(response, context_label="start_jobs")
        except OrchestratorAdapterError as error:
            raise adapter_wrap_error(error, OrchestratorLaunchError, "Job start request failed") from error

        started_jobs = payload.get("value")
        if not isinstance(started_jobs, list):
            raise OrchestratorLaunchError(
                "Job start response missing value array",
                status_code=response.status_code,
                response_body=response.text,
            )
        return [element for element in started_jobs if isinstance(element, dict)]

    def adapter_get_job_status(self, session: Session, job_id: EntityId) -> JobStatus:
        """Fetch the current status of one job.

        Args:
            session: Authenticated request context.
            job_id: Started job id.

        Returns:
            JobStatus: Freshly fetched status.

        Raises:
            OrchestratorStatusCheckError: Raised for transport, HTTP or contract failures.
        """

        job_url = f"{self._base_url}/odata/Jobs({job_id})"
        try:
            response = self._adapter_request(
                "GET",
                job_url,
                headers=self._adapter_session_headers(session),
                params={"$expand": "Robot"},
            )
            payload = self._adapter_parse_json_object(response, context_label="job_status")
        except OrchestratorAdapterError as error:
            raise adapter_wrap_error(error, OrchestratorStatusCheckError, "Job status request failed") from error

        state_value = payload.get("State")
        if not isinstance(state_value, str) or not state_value.strip():
            raise OrchestratorStatusCheckError(
                f"Job status response missing State for job_id={job_id}",
                status_code=response.status_code,
                response_body=response.text,
            )

        robot_payload = payload.get("Robot")
        robot_name = None
        machine_name = None
        if isinstance(robot_payload, dict):
            robot_name = robot_payload.get("Name")
            machine_name = robot_payload.get("MachineName")
        return JobStatus(state=state_value.strip(), robot_name=robot_name, machine_name=machine_name)

    def _adapter_get_value_array(
        self,
        session: Session,
        path: str,
        params: dict[str, str] | None = None,
    ) -> list[dict[str, Any]]:
        """Execute one OData GET and return its object elements.

        Args:
            session: Authenticated request context.
            path: OData path relative to the base URL.
            params: Optional query string parameters.

        Returns:
            list[dict[str, Any]]: Object elements of the `value` array.

        Raises:
            OrchestratorAdapterError: Raised on transport or contract failures.
        """

        response = self._adapter_request(
            "GET",
            f"{self._base_url}/{path.lstrip('/')}",
            headers=self._adapter_session_headers(session),
            params=params,
        )
        payload = self._adapter_parse_json_object(response, context_label=path)
        value_array = payload.get("value")
        if not isinstance(value_array, list):
            raise OrchestratorResponseError(
                f"Listing response missing value array for path={path}",
                status_code=response.status_code,
                response_body=response.text,
            )
        return [element for element in value_array if isinstance(element, dict)]

    def _adapter_session_headers(self, session: Session) -> dict[str, str]:
        """Build the headers required on every post-auth call.

        Args:
            session: Authenticated request context.

        Returns:
            dict[str, str]: Request headers; folder header only once a folder is bound.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        headers = {
            "Authorization": f"Bearer {session.bearer_token}",
            self._TENANT_HEADER: session.tenant,
            self._ACCOUNT_HEADER: session.account,
            "Content-Type": "application/json",
        }
        if session.organization_unit_id is not None:
            headers[self._ORGANIZATION_UNIT_HEADER] = str(session.organization_unit_id)
        return headers

    def _adapter_request(self, method: str, url: str, **request_options: Any) -> httpx.Response:
        """Execute one HTTP request and map transport failures to adapter errors.

        Args:
            method: HTTP method.
            url: Absolute request URL.
            request_options: Keyword arguments forwarded to `httpx.Client.request`.

        Returns:
            httpx.Response: Successful (2xx) response.

        Raises:
            OrchestratorTimeoutError: Raised when the transport times out.
            OrchestratorConnectionError: Raised for other transport failures.
            OrchestratorHttpStatusError: Raised for non-2xx responses.
        """

        try:
            response = self._http_client.request(method, url, **request_options)
        except httpx.TimeoutException as error:
            raise OrchestratorTimeoutError(f"Orchestrator request timed out: {method} {url}") from error
        except httpx.RequestError as error:
            raise OrchestratorConnectionError(f"Orchestrator request failed: {method} {url}: {error}") from error

        if not response.is_success:
            raise OrchestratorHttpStatusError(
                f"Orchestrator returned HTTP {response.status_code} for {method} {url}",
                status_code=response.status_code,
                response_body=response.text,
            )
        return response

    def _adapter_parse_json_object(self, response: httpx.Response, context_label: str) -> dict[str, Any]:
        """Parse a response body as a JSON object.

        Args:
            response: Successful HTTP response.
            context_label: Context label for error messages.

        Returns:
            dict[str, Any]: Parsed JSON object.

        Raises:
            OrchestratorResponseError: Raised when the body is not a JSON object.
        """

        try:
            payload = response.json()
        except ValueError as error:
            raise OrchestratorResponseError(
                f"Orchestrator JSON parse failed for context={context_label}",
                status_code=response.status_code,
                response_body=response.text,
            ) from error
        if not isinstance(payload, dict):
            raise OrchestratorResponseError(
                f"Orchestrator response is not a JSON object for context={context_label}",
                status_code=response.status_code,
                response_body=response.text,
            )
        return payload
