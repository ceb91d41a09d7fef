"""Tests for cargotrack.providers.simulated"""

from datetime import datetime, timedelta, timezone

import pytest

from cargotrack.models import Carrier, OrderStatus, sort_events
from cargotrack.providers.simulated import SimulatedTrackingProvider, stable_seed

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)

CODES = ["LB123456789BR", "OA016913717BR", "TBA123456789000", "SE1234567890", "1Z999AA10123456784"]


@pytest.fixture
def provider():
    return SimulatedTrackingProvider(latency=0, clock=lambda: NOW)


class TestStableSeed:

    def test_same_code_same_seed(self):
        assert stable_seed("LB123456789BR") == stable_seed("lb123456789br ")

    def test_different_codes_differ(self):
        assert stable_seed("LB123456789BR") != stable_seed("LB123456780BR")


class TestBuildTimeline:

    @pytest.mark.parametrize("code", CODES)
    def test_deterministic(self, provider, code):
        assert provider.build_timeline(code, NOW) == provider.build_timeline(code, NOW)

    @pytest.mark.parametrize("code", CODES)
    def test_shape(self, provider, code):
        events = provider.build_timeline(code, NOW)
        assert 1 <= len(events) <= 6
        assert events[0].status == OrderStatus.CREATED
        assert events[0].description == "Objeto postado"
        assert all(e.date <= NOW for e in events)
        # posted between 1 and 7 days ago
        assert NOW - timedelta(days=7) <= events[0].date <= NOW - timedelta(days=1)

    def test_timelines_reach_six_events(self, provider):
        counts = {len(provider.build_timeline(f"LB{n:09d}BR", NOW)) for n in range(300)}
        assert max(counts) == 6
        assert min(counts) >= 2

    def test_long_timelines_end_delivered(self, provider):
        for n in range(300):
            events = provider.build_timeline(f"LB{n:09d}BR", NOW)
            if len(events) == 6:
                assert [e.status for e in events[-2:]] == [OrderStatus.DELIVERED, OrderStatus.DELIVERED]
                break
        else:
            pytest.fail("no six-event timeline generated")

    @pytest.mark.parametrize("code", CODES)
    def test_steps_one_day_apart(self, provider, code):
        events = provider.build_timeline(code, NOW)
        for earlier, later in zip(events, events[1:]):
            assert later.date - earlier.date == timedelta(days=1)

    @pytest.mark.parametrize("code", CODES)
    def test_never_returns_future_events(self, provider, code):
        later = provider.build_timeline(code, NOW + timedelta(days=10))
        now_events = provider.build_timeline(code, NOW)
        assert len(now_events) <= len(later)


class TestFetchTracking:

    @pytest.mark.parametrize("code", CODES)
    async def test_status_matches_newest_event(self, provider, code):
        result = await provider.fetch_tracking(code)
        assert result.events == sort_events(result.events)
        assert result.status == result.events[0].status

    async def test_repeatable(self, provider):
        first = await provider.fetch_tracking("LB123456789BR")
        second = await provider.fetch_tracking("LB123456789BR")
        assert first == second

    async def test_carrier_from_code(self, provider):
        result = await provider.fetch_tracking("LB123456789BR")
        assert result.carrier == Carrier.CORREIOS

    async def test_carrier_hint_used_for_generic_codes(self, provider):
        result = await provider.fetch_tracking("1Z999AA10123456784", carrier_hint=Carrier.CORREIOS)
        assert result.carrier == Carrier.CORREIOS

    async def test_generic_code_without_hint_is_other(self, provider):
        result = await provider.fetch_tracking("1Z999AA10123456784", carrier_hint=Carrier.UNKNOWN)
        assert result.carrier == Carrier.OTHER
