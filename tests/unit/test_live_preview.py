"""
Unit Tests for the live preview client.

Debouncing, latest-wins sequencing and failure masking.
"""
import asyncio

import httpx
import pytest

from pain_safety.services.live_preview import DebouncedRequester, LivePreviewSession, PainApiClient
from pain_safety.utils.exceptions import PainApiError


class RecordingFetch:
    """Fake fetch that records payloads and can hold selected requests."""

    def __init__(self):
        self.calls = []
        self.gates = {}

    def hold(self, request_id):
        self.gates[request_id] = asyncio.Event()
        return self.gates[request_id]

    async def __call__(self, payload):
        self.calls.append(payload)
        gate = self.gates.get(payload["id"])
        if gate is not None:
            await gate.wait()
        if payload.get("fail"):
            raise PainApiError("server error", endpoint="/pain/opiates/mme", status_code=500)
        return {"id": payload["id"]}


@pytest.mark.asyncio
class TestDebouncedRequester:

    async def test_burst_collapses_to_one_request(self):
        fetch = RecordingFetch()
        requester = DebouncedRequester(fetch, debounce_s=0.05)
        for i in range(1, 4):
            requester.submit({"id": i})
        await requester.flush()
        assert [c["id"] for c in fetch.calls] == [3]
        assert requester.latest == {"id": 3}
        assert requester.latest_seq == 3

    async def test_stale_response_is_dropped(self):
        fetch = RecordingFetch()
        gate = fetch.hold(1)
        requester = DebouncedRequester(fetch, debounce_s=0)

        first = requester.submit({"id": 1})
        await asyncio.sleep(0.01)           # request 1 is now in flight
        requester.submit({"id": 2})
        await asyncio.sleep(0.01)
        assert requester.latest == {"id": 2}

        gate.set()                          # request 1 finishes last
        assert await first is None
        await requester.flush()
        assert requester.latest == {"id": 2}
        assert [c["id"] for c in fetch.calls] == [1, 2]

    async def test_failure_yields_none(self):
        fetch = RecordingFetch()
        requester = DebouncedRequester(fetch, debounce_s=0)
        requester.submit({"id": 1})
        await requester.flush()
        assert requester.latest == {"id": 1}

        requester.submit({"id": 2, "fail": True})
        await requester.flush()
        assert requester.latest is None

    async def test_clear_invalidates_in_flight(self):
        fetch = RecordingFetch()
        gate = fetch.hold(1)
        requester = DebouncedRequester(fetch, debounce_s=0)
        requester.submit({"id": 1})
        await asyncio.sleep(0.01)
        requester.clear()
        gate.set()
        await requester.flush()
        assert requester.latest is None

    async def test_aclose_cancels_pending(self):
        fetch = RecordingFetch()
        requester = DebouncedRequester(fetch, debounce_s=10)
        requester.submit({"id": 1})
        await requester.aclose()
        assert fetch.calls == []


def _mock_client(handler) -> PainApiClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PainApiClient(base_url="http://pain.test/api", client=client)


@pytest.mark.asyncio
class TestPainApiClient:

    async def test_success(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json={"totalMME": 30.0})

        client = _mock_client(handler)
        data = await client.calculate_mme({"medications": []})
        assert data == {"totalMME": 30.0}
        assert seen == ["/api/pain/opiates/mme"]

    async def test_non_success_raises(self):
        client = _mock_client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(PainApiError) as exc_info:
            await client.safety_check({"medications": []})
        assert exc_info.value.response_status == 500
        assert exc_info.value.endpoint == "/pain/opiates/safety-check"

    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = _mock_client(handler)
        with pytest.raises(PainApiError):
            await client.calculate_mme({})


@pytest.mark.asyncio
class TestLivePreviewSession:

    async def test_update_and_clear(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/mme"):
                return httpx.Response(200, json={"totalMME": 30.0})
            return httpx.Response(200, json={"findings": [], "recommendations": [], "totalMME": 30.0})

        async with LivePreviewSession(_mock_client(handler), mme_debounce_s=0, safety_debounce_s=0) as session:
            session.update([{"name": "oxycodone", "doseMgPerDose": 5, "dosesPerDay": 4}])
            await session.flush()
            assert session.mme == {"totalMME": 30.0}
            assert session.safety["findings"] == []

            session.update([{"name": "  "}])
            assert session.mme is None
            assert session.safety is None
