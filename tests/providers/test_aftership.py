"""Tests for cargotrack.providers.aftership"""

import json

import httpx
import pytest

from cargotrack.errors import DecodeError, InvalidResponseError, ServerError
from cargotrack.models import Carrier, OrderStatus
from cargotrack.providers.aftership import AfterShipProvider


def _make_provider(handler) -> AfterShipProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AfterShipProvider(api_key="test-key", base_url="https://aftership.test/v4", client=client)


def _tracking_payload(tag="InTransit", checkpoints=None, slug="correios"):
    return {"data": {"tracking": {"tag": tag, "slug": slug, "checkpoints": checkpoints or []}}}


class TestAfterShipRequest:

    async def test_sends_key_header_and_path(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("api-key")
            return httpx.Response(200, json=_tracking_payload())

        await _make_provider(handler).fetch_tracking("LB123456789BR")

        assert seen["method"] == "GET"
        assert seen["url"] == "https://aftership.test/v4/trackings/LB123456789BR"
        assert seen["key"] == "test-key"

    async def test_non_200_raises_server_error(self):
        provider = _make_provider(lambda request: httpx.Response(429, json={}))

        with pytest.raises(ServerError) as exc_info:
            await provider.fetch_tracking("LB123456789BR")
        assert exc_info.value.status_code == 429

    async def test_transport_failure_raises_invalid_response(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(InvalidResponseError):
            await _make_provider(handler).fetch_tracking("LB123456789BR")

    async def test_non_json_body_raises_decode_error(self):
        provider = _make_provider(lambda request: httpx.Response(200, content=b"<html>oops</html>"))

        with pytest.raises(DecodeError):
            await provider.fetch_tracking("LB123456789BR")


class TestAfterShipParsing:

    async def test_checkpoints_become_sorted_events(self):
        payload = _tracking_payload(tag="Delivered", checkpoints=[
            {"created_at": "2024-05-08T10:00:00Z", "tag": "InTransit", "message": "Em trânsito", "location": "São Paulo"},
            {"created_at": "2024-05-10T15:30:00Z", "tag": "Delivered", "message": "Entregue", "location": "Curitiba"},
            {"created_at": "2024-05-09T08:00:00Z", "tag": "OutForDelivery", "message": "Saiu para entrega"},
        ])
        provider = _make_provider(lambda request: httpx.Response(200, json=payload))

        result = await provider.fetch_tracking("LB123456789BR")

        assert result.carrier == Carrier.CORREIOS
        assert result.status == OrderStatus.DELIVERED
        assert [e.status for e in result.events] == [
            OrderStatus.DELIVERED, OrderStatus.OUT_FOR_DELIVERY, OrderStatus.IN_TRANSIT,
        ]
        assert result.events[0].location == "Curitiba"
        assert result.events[1].location is None

    async def test_status_follows_newest_checkpoint(self):
        # Top-level tag lags behind the newest checkpoint
        payload = _tracking_payload(tag="InTransit", checkpoints=[
            {"created_at": "2024-05-10T15:30:00Z", "tag": "Exception", "message": "Endereço incorreto"},
            {"created_at": "2024-05-08T10:00:00Z", "tag": "InTransit", "message": "Em trânsito"},
        ])
        provider = _make_provider(lambda request: httpx.Response(200, json=payload))

        result = await provider.fetch_tracking("LB123456789BR")

        assert result.status == OrderStatus.EXCEPTION == result.events[0].status

    async def test_no_checkpoints_uses_tag(self):
        provider = _make_provider(lambda request: httpx.Response(200, json=_tracking_payload(tag="Pending", slug="dhl")))

        result = await provider.fetch_tracking("1Z999AA10123456784")

        assert result.status == OrderStatus.CREATED
        assert result.carrier == Carrier.OTHER
        assert result.events == []

    async def test_unknown_tags_map_to_in_transit(self):
        payload = _tracking_payload(tag="Weird", checkpoints=[
            {"created_at": "2024-05-10T15:30:00Z", "tag": "Weird", "message": "?"},
        ])
        provider = _make_provider(lambda request: httpx.Response(200, json=payload))

        result = await provider.fetch_tracking("LB123456789BR")

        assert result.status == OrderStatus.IN_TRANSIT

    async def test_unparseable_checkpoint_dates_skipped(self):
        payload = _tracking_payload(tag="InTransit", checkpoints=[
            {"created_at": "not-a-date", "tag": "Delivered", "message": "x"},
            {"created_at": "2024-05-10T15:30:00Z", "tag": "InTransit", "message": "ok"},
        ])
        provider = _make_provider(lambda request: httpx.Response(200, json=payload))

        result = await provider.fetch_tracking("LB123456789BR")

        assert len(result.events) == 1
        assert result.status == OrderStatus.IN_TRANSIT

    @pytest.mark.parametrize("body", [
        {},
        {"data": {}},
        {"data": {"tracking": {"checkpoints": []}}},
        {"data": {"tracking": {"tag": "InTransit", "checkpoints": "nope"}}},
        {"data": {"tracking": {"tag": "InTransit", "checkpoints": ["nope"]}}},
        [],
    ])
    async def test_schema_mismatch_raises_decode_error(self, body):
        provider = _make_provider(lambda request: httpx.Response(200, content=json.dumps(body).encode()))

        with pytest.raises(DecodeError):
            await provider.fetch_tracking("LB123456789BR")

    @pytest.mark.parametrize("body", [
        _tracking_payload(slug=7),
        _tracking_payload(checkpoints=[{"created_at": "2024-05-10T08:00:00Z", "message": {"pt": "Entregue"}}]),
        _tracking_payload(checkpoints=[{"created_at": "2024-05-10T08:00:00Z", "location": ["SP"]}]),
    ])
    async def test_wrong_field_types_raise_decode_error(self, body):
        provider = _make_provider(lambda request: httpx.Response(200, json=body))

        with pytest.raises(DecodeError):
            await provider.fetch_tracking("LB123456789BR")
