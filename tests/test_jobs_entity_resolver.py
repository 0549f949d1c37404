"""Regression tests for exact/partial entity resolution ordering and fallbacks."""

from __future__ import annotations

from typing import Any

from job_trigger.adapters import OrchestratorConnectionError
from job_trigger.domain import EndpointSpec, EntityQuery, Session
from job_trigger.jobs import (
    MACHINE_ENDPOINTS,
    PROCESS_ENDPOINTS,
    ROBOT_ENDPOINTS,
    EntityResolver,
    job_resolver_partial_match,
)

_SESSION = Session(bearer_token="token", tenant="DefaultTenant", account="acme", organization_unit_id=12)


class _ListingAdapterStub:
    """Adapter stub serving static listings per OData path."""

    def __init__(self, listings: dict[str, list[dict[str, Any]] | Exception]):
        """Initialize listing stub state.

        Args:
            listings: Listing elements or exception to raise, keyed by list path.

        Returns:
            None: Initializer does not return values.

        Raises:
            RuntimeError: This stub does not raise runtime errors.
        """

        self._listings = listings
        self.list_calls: list[str] = []

    def adapter_list_entities(self, session: Session, list_path: str) -> list[dict[str, Any]]:
        """Return configured listing or raise configured error.

        Args:
            session: Request context.
            list_path: Requested OData path.

        Returns:
            list[dict[str, Any]]: Configured listing, empty when unknown.

        Raises:
            Exception: Raised when an exception is configured for the path.
        """

        _ = session
        self.list_calls.append(list_path)
        listing = self._listings.get(list_path, [])
        if isinstance(listing, Exception):
            raise listing
        return listing


def _process_query(target_name: str) -> EntityQuery:
    return EntityQuery(entity_type="process", target_name=target_name, candidate_endpoints=PROCESS_ENDPOINTS)


def test_jobs_resolver_exact_match_prefers_first_configured_endpoint() -> None:
    """Resolve from the first endpoint with an exact match even when later endpoints match too.

    Returns:
        None: Assertions validate endpoint precedence.

    Raises:
        AssertionError: Raised when a later endpoint wins.
    """

    adapter = _ListingAdapterStub(
        {
            "odata/Releases": [{"Key": "release-key", "Name": "InvoiceBot"}],
            "odata/Processes": [{"Key": "process-key", "Name": "InvoiceBot"}],
        }
    )

    resolution = EntityResolver(adapter).job_resolve(session=_SESSION, query=_process_query("InvoiceBot"))

    assert resolution.resolved is not None
    assert resolution.resolved.id == "release-key"
    assert resolution.resolved.source_endpoint == "Releases"
    assert resolution.resolved.match_kind == "exact"
    assert adapter.list_calls == ["odata/Releases"]


def test_jobs_resolver_exhausts_exact_pass_before_partial_pass() -> None:
    """Try exact matching on every endpoint before any partial match is accepted.

    Returns:
        None: Assertions validate pass ordering.

    Raises:
        AssertionError: Raised when a partial match short-circuits a later exact match.
    """

    adapter = _ListingAdapterStub(
        {
            "odata/Releases": [{"Key": "partial-key", "Name": "InvoiceBot_Production"}],
            "odata/Processes": [{"Key": "exact-key", "Name": "InvoiceBot"}],
        }
    )

    resolution = EntityResolver(adapter).job_resolve(session=_SESSION, query=_process_query("InvoiceBot"))

    assert resolution.resolved is not None
    assert resolution.resolved.id == "exact-key"
    assert resolution.resolved.match_kind == "exact"
    assert adapter.list_calls == ["odata/Releases", "odata/Processes"]


def test_jobs_resolver_partial_pass_refetches_endpoints_in_order() -> None:
    """Run the partial pass only after both exact listings were fetched."""

    adapter = _ListingAdapterStub(
        {
            "odata/Releases": [{"Key": "partial-key", "Name": "InvoiceBot_Production"}],
            "odata/Processes": [],
        }
    )

    resolution = EntityResolver(adapter).job_resolve(session=_SESSION, query=_process_query("InvoiceBot"))

    assert resolution.resolved is not None
    assert resolution.resolved.id == "partial-key"
    assert resolution.resolved.match_kind == "partial"
    assert adapter.list_calls == ["odata/Releases", "odata/Processes", "odata/Releases"]


def test_jobs_resolver_partial_multi_match_selects_listing_order_first() -> None:
    """Select the first partial hit in listing order rather than sorted order.

    Returns:
        None: Assertions validate deterministic tie-break.

    Raises:
        AssertionError: Raised when tie-break uses another ordering.
    """

    adapter = _ListingAdapterStub(
        {
            "odata/Releases": [
                {"Key": "zeta-key", "Name": "Zeta Invoice"},
                {"Key": "alpha-key", "Name": "Alpha Invoice"},
            ],
        }
    )

    resolution = EntityResolver(adapter).job_resolve(session=_SESSION, query=_process_query("Invoice"))

    assert resolution.resolved is not None
    assert resolution.resolved.id == "zeta-key"
    assert resolution.resolved.name == "Zeta Invoice"


def test_jobs_resolver_partial_match_is_bidirectional() -> None:
    """Match when either name contains the other, and never on empty names."""

    assert job_resolver_partial_match("InvoiceBot_Production", "InvoiceBot")
    assert job_resolver_partial_match("InvoiceBot", "InvoiceBot_Production")
    assert not job_resolver_partial_match("InvoiceBot", "PayrollBot")
    assert not job_resolver_partial_match("InvoiceBot", "")


def test_jobs_resolver_exact_match_is_case_sensitive() -> None:
    """Treat case-only differences as partial candidates only when substrings match."""

    adapter = _ListingAdapterStub({"odata/Machines": [{"Id": 42, "Name": "vm-01"}]})
    query = EntityQuery(entity_type="machine", target_name="VM-01", candidate_endpoints=MACHINE_ENDPOINTS)

    resolution = EntityResolver(adapter).job_resolve(session=_SESSION, query=query)

    assert resolution.resolved is None
    assert resolution.available_names == ("vm-01",)


def test_jobs_resolver_empty_listings_return_not_found() -> None:
    """Return not found after both passes when every endpoint is empty.

    Returns:
        None: Assertions validate not-found outcome and call count.

    Raises:
        AssertionError: Raised when resolution reports a match.
    """

    adapter = _ListingAdapterStub({})

    resolution = EntityResolver(adapter).job_resolve(session=_SESSION, query=_process_query("InvoiceBot"))

    assert not resolution.resolution_is_found()
    assert resolution.available_names == ()
    assert adapter.list_calls == ["odata/Releases", "odata/Processes", "odata/Releases", "odata/Processes"]


def test_jobs_resolver_skips_endpoint_on_transport_error() -> None:
    """Continue with the next endpoint when one listing call fails."""

    adapter = _ListingAdapterStub(
        {
            "odata/Releases": OrchestratorConnectionError("connection reset"),
            "odata/Processes": [{"Key": "process-key", "Name": "InvoiceBot"}],
        }
    )

    resolution = EntityResolver(adapter).job_resolve(session=_SESSION, query=_process_query("InvoiceBot"))

    assert resolution.resolved is not None
    assert resolution.resolved.id == "process-key"
    assert resolution.resolved.source_endpoint == "Processes"


def test_jobs_resolver_applies_endpoint_filter_for_robot_users() -> None:
    """Ignore user entries whose type is not Robot.

    Returns:
        None: Assertions validate filter selector behavior.

    Raises:
        AssertionError: Raised when non-robot users are matched.
    """

    adapter = _ListingAdapterStub(
        {
            "odata/Users": [
                {"Id": 1, "Name": "robot-a", "Type": "User"},
                {"Id": 2, "Name": "robot-a", "Type": "Robot"},
                {"Id": 3, "Name": "robot-b", "Type": "Robot"},
            ],
        }
    )
    query = EntityQuery(entity_type="robot", target_name="robot-a", candidate_endpoints=ROBOT_ENDPOINTS)

    resolution = EntityResolver(adapter).job_resolve(session=_SESSION, query=query)

    assert resolution.resolved is not None
    assert resolution.resolved.id == 2


def test_jobs_resolver_collects_available_names_across_endpoints() -> None:
    """Report de-duplicated candidate names from every endpoint for diagnostics."""

    endpoints = (
        EndpointSpec(display_name="First", list_path="odata/First", key_field="Id", name_field="Name"),
        EndpointSpec(display_name="Second", list_path="odata/Second", key_field="Id", name_field="Name"),
    )
    adapter = _ListingAdapterStub(
        {
            "odata/First": [{"Id": 1, "Name": "alpha"}, {"Id": 2, "Name": "beta"}, {"Id": 9}],
            "odata/Second": [{"Id": 3, "Name": "beta"}, {"Name": "gamma"}],
        }
    )
    query = EntityQuery(entity_type="machine", target_name="delta", candidate_endpoints=endpoints)

    resolution = EntityResolver(adapter).job_resolve(session=_SESSION, query=query)

    assert resolution.resolved is None
    assert resolution.available_names == ("alpha", "beta")
