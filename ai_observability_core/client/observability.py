"""Async HTTP client for the observability API."""

from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import quote

import httpx

from ai_observability_core.exceptions import ObservabilityCoreError
from ai_observability_core.logging import get_pipeline_logger
from ai_observability_core.query import serialize_traces_params
from ai_observability_core.scoring import ScoreTracesResult, ScoringTarget
from ai_observability_core.storage import ListScoresResult, TraceRecord, TracesPaginatedArg, TracesPaginatedResult

logger = get_pipeline_logger(__name__)

DEFAULT_API_PREFIX = "/api/observability"


class ObservabilityClientError(ObservabilityCoreError):
    """Non-2xx response from the observability API."""

    def __init__(self, status_code: int, body: Any) -> None:
        self.status_code = status_code
        self.body = body
        message = body.get("error") if isinstance(body, Mapping) else None
        super().__init__(f"Observability API returned {status_code}: {message or body}")


class ObservabilityClient:
    """Typed wrapper over the observability routes.

    Use as an async context manager, or call ``aclose()`` when done.
    ``transport`` is passed through to httpx, which lets tests swap in
    ``httpx.MockTransport`` or an ``httpx.ASGITransport`` around the app.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_prefix: str = DEFAULT_API_PREFIX,
        headers: Mapping[str, str] | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._prefix = api_prefix.rstrip("/")
        self._client = httpx.AsyncClient(base_url=base_url, headers=dict(headers or {}), timeout=timeout, transport=transport)

    async def __aenter__(self) -> "ObservabilityClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._client.request(method, f"{self._prefix}{path}", **kwargs)
        if response.is_success:
            return response.json()
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text
        logger.debug("%s %s failed with %d", method, path, response.status_code)
        raise ObservabilityClientError(response.status_code, body)

    async def get_traces(self, args: TracesPaginatedArg | None = None) -> TracesPaginatedResult:
        query = serialize_traces_params(args) if args is not None else ""
        path = f"/traces?{query}" if query else "/traces"
        return TracesPaginatedResult.model_validate(await self._request("GET", path))

    async def get_trace(self, trace_id: str) -> TraceRecord:
        """Fetch one trace. Raises ObservabilityClientError with status 404 when unknown."""
        return TraceRecord.model_validate(await self._request("GET", f"/traces/{quote(trace_id, safe='')}"))

    async def list_scores_by_span(self, trace_id: str, span_id: str, *, page: int = 0, per_page: int = 10) -> ListScoresResult:
        path = f"/traces/{quote(trace_id, safe='')}/{quote(span_id, safe='')}/scores"
        data = await self._request("GET", path, params={"page": page, "perPage": per_page})
        return ListScoresResult.model_validate(data)

    async def score(self, scorer_name: str, targets: Sequence[ScoringTarget]) -> ScoreTracesResult:
        """Ask the server to score ``targets`` in the background."""
        payload = {
            "scorerName": scorer_name,
            "targets": [
                {"traceId": t.trace_id, **({"spanId": t.span_id} if t.span_id is not None else {})} for t in targets
            ],
        }
        return ScoreTracesResult.model_validate(await self._request("POST", "/traces/score", json=payload))
