"""Parsing and formatting of Fabric capacity resource identifiers."""

import re
from dataclasses import dataclass

from .errors import InvalidIdentifier

PROVIDER = "Microsoft.Fabric"

EXPECTED_SHAPE = (
    "/subscriptions/{subscriptionId}/resourceGroups/{resourceGroup}"
    f"/providers/{PROVIDER}/capacities/{{capacityName}}"
)

_RESOURCE_ID_PATTERN = re.compile(
    r"^/subscriptions/(?P<subscription>[^/]+)"
    r"/resourceGroups/(?P<resource_group>[^/]+)"
    r"/providers/Microsoft\.Fabric"
    r"/capacities/(?P<name>[^/]+)/?$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ResourceCoordinates:
    """The coordinates that address a single capacity resource."""

    subscription_id: str
    resource_group: str
    capacity_name: str

    def __str__(self) -> str:
        """String representation."""
        return f"{self.capacity_name} (rg={self.resource_group}, sub={self.subscription_id})"


def parse_resource_id(resource_id: str) -> ResourceCoordinates:
    """Split a capacity resource identifier into its coordinates.

    Only the path shape is checked. Subscription GUIDs and names are passed
    through untouched; the management API decides whether they exist.

    Args:
        resource_id: Full ARM resource identifier of the capacity

    Returns:
        ResourceCoordinates for the capacity

    Raises:
        InvalidIdentifier: If the identifier does not match the expected shape
    """
    match = _RESOURCE_ID_PATTERN.match((resource_id or "").strip())
    if match is None:
        raise InvalidIdentifier(
            f"Invalid capacity resource ID {resource_id!r}. Expected format: {EXPECTED_SHAPE}"
        )

    return ResourceCoordinates(
        subscription_id=match.group("subscription"),
        resource_group=match.group("resource_group"),
        capacity_name=match.group("name"),
    )


def format_resource_id(coordinates: ResourceCoordinates) -> str:
    """Build the ARM resource path for a set of coordinates."""
    return (
        f"/subscriptions/{coordinates.subscription_id}"
        f"/resourceGroups/{coordinates.resource_group}"
        f"/providers/{PROVIDER}/capacities/{coordinates.capacity_name}"
    )
