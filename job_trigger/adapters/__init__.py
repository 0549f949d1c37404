"""Adapter layer package for orchestrator integration boundaries."""

from .interfaces import OrchestratorAdapterPort
from .orchestrator_client import (
	OrchestratorClientAdapter,
	adapter_build_base_url,
	adapter_build_identity_root,
)
from .orchestrator_errors import (
	OrchestratorAdapterError,
	OrchestratorAuthError,
	OrchestratorConnectionError,
	OrchestratorHttpStatusError,
	OrchestratorLaunchError,
	OrchestratorResponseError,
	OrchestratorStatusCheckError,
	OrchestratorTimeoutError,
)

__all__ = [
	"OrchestratorAdapterError",
	"OrchestratorAdapterPort",
	"OrchestratorAuthError",
	"OrchestratorClientAdapter",
	"OrchestratorConnectionError",
	"OrchestratorHttpStatusError",
	"OrchestratorLaunchError",
	"OrchestratorResponseError",
	"OrchestratorStatusCheckError",
	"OrchestratorTimeoutError",
	"adapter_build_base_url",
	"adapter_build_identity_root",
]
