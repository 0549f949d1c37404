"""Multi-endpoint entity resolution with exact and partial matching passes.

Resolution runs an exact-match pass over every configured endpoint before a
partial-match pass is attempted. Within the partial pass the first element in
listing order wins when several elements match; callers relying on partial
names should expect that tie-break rather than any sorted order.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator

from job_trigger.adapters import OrchestratorAdapterError, OrchestratorAdapterPort
from job_trigger.domain import EndpointSpec, EntityQuery, EntityResolution, ResolvedEntity, Session

logger = logging.getLogger(__name__)

MATCH_KIND_EXACT = "exact"
MATCH_KIND_PARTIAL = "partial"


def job_resolver_exact_match(target_name: str, element_name: str) -> bool:
    """Return whether names are equal, case-sensitively."""

    return element_name == target_name


def job_resolver_partial_match(target_name: str, element_name: str) -> bool:
    """Return whether either name contains the other.

    Args:
        target_name: Requested name.
        element_name: Name read from a listing element.

    Returns:
        bool: True when target contains element name or element name contains target.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if not target_name or not element_name:
        return False
    return element_name in target_name or target_name in element_name


class EntityResolver:
    """Resolve logical names into internal identifiers using read-only listings."""

    def __init__(self, orchestrator_adapter: OrchestratorAdapterPort):
        """Initialize resolver dependencies.

        Args:
            orchestrator_adapter: Adapter used to fetch endpoint listings.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when the adapter is missing.
        """

        if orchestrator_adapter is None:
            raise ValueError("orchestrator_adapter must not be None")
        self._orchestrator_adapter = orchestrator_adapter

    def job_resolve(self, session: Session, query: EntityQuery) -> EntityResolution:
        """Resolve one query, short-circuiting on the first successful pass.

        Args:
            session: Authenticated request context.
            query: Name and ordered candidate endpoints.

        Returns:
            EntityResolution: Resolution with `resolved` set, or None when not found.
                `available_names` lists candidate names seen in the exact pass.

        Raises:
            RuntimeError: Endpoint transport failures are logged, not raised.
        """

        available_names: list[str] = []

        resolved = self._job_run_pass(
            session=session,
            query=query,
            match_kind=MATCH_KIND_EXACT,
            matcher=job_resolver_exact_match,
            observed_names=available_names,
        )
        if resolved is None:
            logger.info(
                "No exact %s match for '%s'; trying partial match",
                query.entity_type,
                query.target_name,
            )
            resolved = self._job_run_pass(
                session=session,
                query=query,
                match_kind=MATCH_KIND_PARTIAL,
                matcher=job_resolver_partial_match,
                observed_names=None,
            )

        if resolved is not None:
            logger.info(
                "Resolved %s '%s' to id=%s via %s (%s match, name='%s')",
                query.entity_type,
                query.target_name,
                resolved.id,
                resolved.source_endpoint,
                resolved.match_kind,
                resolved.name,
            )
        return EntityResolution(
            query=query,
            resolved=resolved,
            available_names=tuple(dict.fromkeys(available_names)),
        )

    def _job_run_pass(
        self,
        session: Session,
        query: EntityQuery,
        match_kind: str,
        matcher: Callable[[str, str], bool],
        observed_names: list[str] | None,
    ) -> ResolvedEntity | None:
        """Run one matching pass over all endpoints in configured order.

        Args:
            session: Authenticated request context.
            query: Lookup request.
            match_kind: Pass label recorded on the resolved entity.
            matcher: Name predicate `(target_name, element_name) -> bool`.
            observed_names: Optional list collecting every candidate name seen.

        Returns:
            ResolvedEntity | None: First match, or None when no endpoint matched.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        for endpoint in query.candidate_endpoints:
            listing = self._job_fetch_listing(session=session, query=query, endpoint=endpoint)
            if listing is None:
                continue

            matches: list[tuple[Any, str]] = []
            for element_key, element_name in self._job_iter_candidates(endpoint=endpoint, listing=listing):
                if observed_names is not None:
                    observed_names.append(element_name)
                if matcher(query.target_name, element_name):
                    matches.append((element_key, element_name))

            if not matches:
                continue
            if len(matches) > 1:
                logger.warning(
                    "%s '%s' matched %d %s entries (%s match); using first in listing order: %s",
                    query.entity_type.capitalize(),
                    query.target_name,
                    len(matches),
                    endpoint.display_name,
                    match_kind,
                    ", ".join(name for _, name in matches),
                )
            first_key, first_name = matches[0]
            return ResolvedEntity(
                id=first_key,
                name=first_name,
                source_endpoint=endpoint.display_name,
                match_kind=match_kind,
            )
        return None

    def _job_fetch_listing(
        self,
        session: Session,
        query: EntityQuery,
        endpoint: EndpointSpec,
    ) -> list[dict[str, Any]] | None:
        """Fetch one endpoint listing, logging and skipping adapter failures.

        Args:
            session: Authenticated request context.
            query: Lookup request, used for log context.
            endpoint: Endpoint to list.

        Returns:
            list[dict[str, Any]] | None: Listing elements, or None when the call failed.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        try:
            return self._orchestrator_adapter.adapter_list_entities(session=session, list_path=endpoint.list_path)
        except OrchestratorAdapterError as error:
            logger.warning(
                "Listing %s failed while resolving %s '%s'; skipping endpoint: %s",
                endpoint.display_name,
                query.entity_type,
                query.target_name,
                error,
            )
            return None

    def _job_iter_candidates(
        self,
        endpoint: EndpointSpec,
        listing: list[dict[str, Any]],
    ) -> Iterator[tuple[Any, str]]:
        """Yield `(key, name)` pairs of usable elements in listing order."""

        for element in listing:
            if not endpoint.endpoint_accepts(element):
                continue
            element_name = element.get(endpoint.name_field)
            element_key = element.get(endpoint.key_field)
            if not isinstance(element_name, str) or element_key is None:
                continue
            yield element_key, element_name
