"""Tests for capacity resource identifier parsing."""

import pytest

from fabric_capacity.errors import CapacityErrorKind, InvalidIdentifier
from fabric_capacity.resource_locator import (
    ResourceCoordinates,
    format_resource_id,
    parse_resource_id,
)

VALID_ID = (
    "/subscriptions/00000000-0000-0000-0000-000000000001"
    "/resourceGroups/rg-analytics/providers/Microsoft.Fabric/capacities/fabcap01"
)


class TestParseResourceId:
    """Tests for parse_resource_id."""

    def test_valid_identifier(self):
        """Test that a well-formed identifier yields its three coordinates."""
        coords = parse_resource_id(VALID_ID)

        assert coords.subscription_id == "00000000-0000-0000-0000-000000000001"
        assert coords.resource_group == "rg-analytics"
        assert coords.capacity_name == "fabcap01"

    def test_trailing_slash_and_whitespace(self):
        """Test that a trailing slash and surrounding whitespace are tolerated."""
        coords = parse_resource_id(f"  {VALID_ID}/ ")
        assert coords.capacity_name == "fabcap01"

    def test_segment_names_are_case_insensitive(self):
        """Test that ARM segment names match regardless of case."""
        coords = parse_resource_id(
            "/SUBSCRIPTIONS/sub/resourcegroups/rg/providers/microsoft.fabric/Capacities/cap"
        )
        assert coords == ResourceCoordinates("sub", "rg", "cap")

    def test_subscription_is_not_validated_as_guid(self):
        """Test that only the shape is checked, not the subscription format."""
        coords = parse_resource_id(
            "/subscriptions/not-a-guid/resourceGroups/rg/providers/Microsoft.Fabric/capacities/cap"
        )
        assert coords.subscription_id == "not-a-guid"

    @pytest.mark.parametrize(
        "resource_id",
        [
            "",
            "fabcap01",
            "/subscriptions/sub/resourceGroups/rg",
            "/subscriptions/sub/resourceGroups/rg/providers/Microsoft.Fabric/capacities/",
            "/subscriptions/sub/resourceGroups/rg/providers/Microsoft.PowerBIDedicated/capacities/cap",
            "/subscriptions/sub/resourceGroups/rg/providers/Microsoft.Fabric/capacities/cap/extra",
            "/subscriptions//resourceGroups/rg/providers/Microsoft.Fabric/capacities/cap",
        ],
    )
    def test_malformed_identifiers(self, resource_id):
        """Test that malformed identifiers raise InvalidIdentifier."""
        with pytest.raises(InvalidIdentifier) as exc_info:
            parse_resource_id(resource_id)

        assert exc_info.value.kind == CapacityErrorKind.INVALID_IDENTIFIER
        assert "Expected format" in exc_info.value.message

    def test_none_identifier(self):
        """Test that a missing identifier is rejected rather than crashing."""
        with pytest.raises(InvalidIdentifier):
            parse_resource_id(None)


class TestFormatResourceId:
    """Tests for format_resource_id."""

    def test_format_round_trip(self):
        """Test that formatting parsed coordinates reproduces the identifier."""
        assert format_resource_id(parse_resource_id(VALID_ID)) == VALID_ID

    def test_coordinates_string(self):
        """Test coordinate string representation."""
        coords = ResourceCoordinates("sub", "rg", "cap")
        assert str(coords) == "cap (rg=rg, sub=sub)"
