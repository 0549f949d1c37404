"""Static endpoint tables used for entity resolution."""

from __future__ import annotations

from typing import Final

from job_trigger.domain import EndpointSpec

FOLDER_ENDPOINTS: Final[tuple[EndpointSpec, ...]] = (
    EndpointSpec(display_name="Folders", list_path="odata/Folders", key_field="Id", name_field="DisplayName"),
)

# Searched in order; Releases before Processes.
PROCESS_ENDPOINTS: Final[tuple[EndpointSpec, ...]] = (
    EndpointSpec(display_name="Releases", list_path="odata/Releases", key_field="Key", name_field="Name"),
    EndpointSpec(display_name="Processes", list_path="odata/Processes", key_field="Key", name_field="Name"),
)

ROBOT_ENDPOINTS: Final[tuple[EndpointSpec, ...]] = (
    EndpointSpec(
        display_name="Users",
        list_path="odata/Users",
        key_field="Id",
        name_field="Name",
        filter_field="Type",
        filter_value="Robot",
    ),
)

MACHINE_ENDPOINTS: Final[tuple[EndpointSpec, ...]] = (
    EndpointSpec(display_name="Machines", list_path="odata/Machines", key_field="Id", name_field="Name"),
)
