"""Tests for the Fabric capacity management client."""

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from fabric_capacity.errors import (
    ResizeRejected,
    ResumeRejected,
    StatusFetchFailed,
    SuspendRejected,
)
from fabric_capacity.fabric_client import FabricCapacityClient
from fabric_capacity.models.types import (
    CapacityResource,
    CapacitySku,
    LifecycleState,
    TransitionRequest,
    WaitStatus,
)
from fabric_capacity.resource_locator import ResourceCoordinates
from fabric_capacity.workflows.convergence import ConvergenceWaiter

COORDS = ResourceCoordinates("sub-1", "rg-1", "fabcap")
CAPACITY_PATH = "/subscriptions/sub-1/resourceGroups/rg-1/providers/Microsoft.Fabric/capacities/fabcap"

CAPACITY_JSON = {
    "id": CAPACITY_PATH,
    "name": "fabcap",
    "type": "Microsoft.Fabric/capacities",
    "location": "West Europe",
    "sku": {"name": "F2", "tier": "Fabric"},
    "properties": {
        "administration": {"members": ["admin@contoso.com"]},
        "provisioningState": "Succeeded",
        "state": "Active",
    },
    "tags": {"costCenter": "42"},
}


def make_client(handler) -> FabricCapacityClient:
    return FabricCapacityClient(
        token="test-token",
        base_url="https://management.example.com/",
        api_version="2023-11-01",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
class TestGetCapacity:
    """Tests for reading capacity status."""

    async def test_parses_snapshot(self):
        """Test that the response is parsed into a CapacityResource."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json=CAPACITY_JSON)

        client = make_client(handler)
        try:
            capacity = await client.get_capacity(COORDS)
        finally:
            await client.close()

        request = seen["request"]
        assert request.method == "GET"
        assert request.url.path == CAPACITY_PATH
        assert request.url.params["api-version"] == "2023-11-01"
        assert request.headers["Authorization"] == "Bearer test-token"

        assert isinstance(capacity, CapacityResource)
        assert capacity.name == "fabcap"
        assert capacity.sku == "F2"
        assert capacity.state == "Active"
        assert capacity.provisioning_state == "Succeeded"
        assert capacity.location == "West Europe"
        assert capacity.properties == CAPACITY_JSON["properties"]
        assert capacity.tags == {"costCenter": "42"}
        assert capacity.lifecycle.is_running

    async def test_error_status_carries_code_and_body(self):
        """Test that a non-success status maps to StatusFetchFailed with details."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text='{"error": {"code": "ResourceNotFound"}}')

        client = make_client(handler)
        try:
            with pytest.raises(StatusFetchFailed) as exc_info:
                await client.get_capacity(COORDS)
        finally:
            await client.close()

        assert exc_info.value.status_code == 404
        assert "ResourceNotFound" in exc_info.value.response_body

    async def test_transport_error(self):
        """Test that a transport failure maps to StatusFetchFailed without a status."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        try:
            with pytest.raises(StatusFetchFailed) as exc_info:
                await client.get_capacity(COORDS)
        finally:
            await client.close()

        assert exc_info.value.status_code is None

    async def test_invalid_json(self):
        """Test that an unparseable body maps to StatusFetchFailed."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>not json</html>")

        client = make_client(handler)
        try:
            with pytest.raises(StatusFetchFailed):
                await client.get_capacity(COORDS)
        finally:
            await client.close()

    async def test_null_fields_become_empty_strings(self):
        """Test that explicit nulls are normalized so state checks never see None."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "name": None,
                    "location": None,
                    "sku": {"name": None, "tier": None},
                    "properties": {"state": None, "provisioningState": "Updating"},
                },
            )

        client = make_client(handler)
        try:
            capacity = await client.get_capacity(COORDS)
        finally:
            await client.close()

        assert capacity.name == "fabcap"
        assert capacity.sku == ""
        assert capacity.sku_tier == "Fabric"
        assert capacity.state == ""
        assert capacity.location == ""
        assert capacity.provisioning_state == "Updating"
        assert capacity.lifecycle is LifecycleState.UNKNOWN

        # a resize wait over such a snapshot keeps polling until its deadline
        clock = [datetime(2026, 1, 15, tzinfo=timezone.utc)]

        async def read():
            return capacity

        async def sleep(delay):
            clock[0] += delay

        waiter = ConvergenceWaiter(read_status=read, sleep=sleep, now=lambda: clock[0])
        outcome = await waiter.wait_for_sku(CapacitySku.F64, timedelta(minutes=1))

        assert outcome.status == WaitStatus.TIMED_OUT


@pytest.mark.asyncio
class TestTransitions:
    """Tests for resume, suspend and resize requests."""

    async def test_resume_posts_action(self):
        """Test that resume posts to the resume action."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(202)

        client = make_client(handler)
        try:
            assert await client.resume_capacity(COORDS) is True
        finally:
            await client.close()

        assert seen["request"].method == "POST"
        assert seen["request"].url.path == f"{CAPACITY_PATH}/resume"

    async def test_suspend_posts_action(self):
        """Test that suspend posts to the suspend action."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200)

        client = make_client(handler)
        try:
            assert await client.suspend_capacity(COORDS) is True
        finally:
            await client.close()

        assert seen["request"].url.path == f"{CAPACITY_PATH}/suspend"

    async def test_rejected_resume(self):
        """Test that a rejected resume raises ResumeRejected with the status."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(409, text="capacity is busy")

        client = make_client(handler)
        try:
            with pytest.raises(ResumeRejected) as exc_info:
                await client.resume_capacity(COORDS)
        finally:
            await client.close()

        assert exc_info.value.status_code == 409
        assert exc_info.value.response_body == "capacity is busy"

    async def test_rejected_suspend(self):
        """Test that a rejected suspend raises SuspendRejected."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        client = make_client(handler)
        try:
            with pytest.raises(SuspendRejected) as exc_info:
                await client.suspend_capacity(COORDS)
        finally:
            await client.close()

        assert exc_info.value.status_code == 500

    async def test_resize_sends_full_body(self):
        """Test that resize replaces the resource with location and properties intact."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json=CAPACITY_JSON)

        snapshot = CapacityResource(
            subscription_id="sub-1",
            resource_group="rg-1",
            name="fabcap",
            sku="F2",
            state="Active",
            provisioning_state="Succeeded",
            location="West Europe",
            properties=CAPACITY_JSON["properties"],
        )
        request = TransitionRequest.from_snapshot(snapshot, CapacitySku.F64)

        client = make_client(handler)
        try:
            assert await client.update_capacity_sku(request) is True
        finally:
            await client.close()

        sent = seen["request"]
        assert sent.method == "PUT"
        assert sent.url.path == CAPACITY_PATH
        body = json.loads(sent.content)
        assert body["location"] == "West Europe"
        assert body["properties"] == CAPACITY_JSON["properties"]
        assert body["sku"] == {"name": "F64", "tier": "Fabric"}

    async def test_rejected_resize(self):
        """Test that a rejected resize raises ResizeRejected with status and body."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, text='{"error": {"code": "InsufficientQuota"}}')

        request = TransitionRequest(coordinates=COORDS, target_sku="F1024", location="West Europe")

        client = make_client(handler)
        try:
            with pytest.raises(ResizeRejected) as exc_info:
                await client.update_capacity_sku(request)
        finally:
            await client.close()

        assert exc_info.value.status_code == 400
        assert "InsufficientQuota" in exc_info.value.response_body
