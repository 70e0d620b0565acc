"""
Live preview client.

Keeps an MME total and a safety check in step with a medication list that is
being edited. Every edit goes through a DebouncedRequester: a burst of edits
collapses into one request after the debounce window, and each request is
tagged with an increasing sequence number so a slow response for an old edit
can never overwrite the result for a newer one.

Usage:
    async with LivePreviewSession() as session:
        session.update(medications, patient_context)
        await session.flush()
        print(session.mme, session.safety)
"""
import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

import httpx

from pain_safety import config
from pain_safety.utils import get_logger
from pain_safety.utils.exceptions import PainApiError

logger = get_logger(__name__)

Payload = Dict[str, Any]
Fetch = Callable[[Payload], Awaitable[Payload]]


class PainApiClient:
    """Thin async client for the /api/pain endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or config.PAIN_API_BASE_URL).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else config.CLIENT_TIMEOUT_S
        )

    async def _post(self, endpoint: str, payload: Payload) -> Payload:
        url = f"{self.base_url}{endpoint}"
        try:
            response = await self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise PainApiError(f"Request to {endpoint} failed: {e}", endpoint=endpoint) from e

        if response.status_code != 200:
            raise PainApiError(
                f"{endpoint} returned {response.status_code}",
                endpoint=endpoint,
                status_code=response.status_code,
                details={"body": response.text[:500]},
            )
        return response.json()

    async def calculate_mme(self, payload: Payload) -> Payload:
        return await self._post("/pain/opiates/mme", payload)

    async def safety_check(self, payload: Payload) -> Payload:
        return await self._post("/pain/opiates/safety-check", payload)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class DebouncedRequester:
    """
    Debounced, latest-wins wrapper around one async fetch.

    submit() restarts the debounce window. A request still waiting out its
    window is cancelled by the next submit; a request already on the wire is
    left to finish, but its result is dropped unless its sequence number is
    still the latest issued.
    """

    def __init__(self, fetch: Fetch, debounce_s: float, name: str = "preview"):
        self._fetch = fetch
        self.debounce_s = debounce_s
        self.name = name
        self._seq = 0
        self._waiting: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()
        self.latest: Optional[Payload] = None
        self.latest_seq = 0

    @property
    def seq(self) -> int:
        return self._seq

    def submit(self, payload: Payload) -> asyncio.Task:
        self._seq += 1
        self._cancel_waiting()
        task = asyncio.create_task(self._run(self._seq, payload))
        self._waiting = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def clear(self) -> None:
        """Invalidate everything issued so far and drop the current result."""
        self._seq += 1
        self._cancel_waiting()
        self.latest = None
        self.latest_seq = self._seq

    def _cancel_waiting(self) -> None:
        if self._waiting is not None and not self._waiting.done():
            self._waiting.cancel()
        self._waiting = None

    async def _run(self, seq: int, payload: Payload) -> Optional[Payload]:
        await asyncio.sleep(self.debounce_s)
        if self._waiting is asyncio.current_task():
            self._waiting = None

        try:
            result = await self._fetch(payload)
        except Exception as e:
            logger.warning(f"{self.name}: request #{seq} failed: {e}")
            result = None

        if seq != self._seq:
            logger.debug(f"{self.name}: dropping stale response #{seq} (latest #{self._seq})")
            return None
        self.latest = result
        self.latest_seq = seq
        return result

    async def flush(self) -> None:
        """Wait for every outstanding request to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()
        self._waiting = None


class LivePreviewSession:
    """MME and safety previews for one editing session."""

    def __init__(
        self,
        client: Optional[PainApiClient] = None,
        mme_debounce_s: Optional[float] = None,
        safety_debounce_s: Optional[float] = None,
    ):
        self.client = client or PainApiClient()
        self._mme = DebouncedRequester(
            self.client.calculate_mme,
            config.LIVE_MME_DEBOUNCE_S if mme_debounce_s is None else mme_debounce_s,
            name="mme-preview",
        )
        self._safety = DebouncedRequester(
            self.client.safety_check,
            config.LIVE_SAFETY_DEBOUNCE_S if safety_debounce_s is None else safety_debounce_s,
            name="safety-preview",
        )

    @property
    def mme(self) -> Optional[Payload]:
        return self._mme.latest

    @property
    def safety(self) -> Optional[Payload]:
        return self._safety.latest

    def update(
        self,
        medications: List[Payload],
        patient_context: Optional[Payload] = None,
        phenotypes: Optional[Dict[str, Optional[str]]] = None,
    ) -> None:
        """Schedule both previews for the edited list."""
        named = [m for m in medications if str(m.get("name") or "").strip()]
        if not named:
            # Nothing to preview; also invalidates requests already in flight
            self._mme.clear()
            self._safety.clear()
            return

        base = {"medications": named, "patient_context": patient_context or {}}
        self._mme.submit(base)
        self._safety.submit({**base, "phenotypes": phenotypes or {}})

    async def flush(self) -> None:
        await asyncio.gather(self._mme.flush(), self._safety.flush())

    async def aclose(self) -> None:
        await self._mme.aclose()
        await self._safety.aclose()
        await self.client.aclose()

    async def __aenter__(self) -> "LivePreviewSession":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
