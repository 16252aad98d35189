"""Tests for ObservabilityClient."""

import json

import httpx
import pytest

from ai_observability_core.client import ObservabilityClient, ObservabilityClientError
from ai_observability_core.scoring import ScoringTarget
from ai_observability_core.server import create_app
from ai_observability_core.storage import (
    EntityType,
    ObservabilityInMemory,
    PaginationArgs,
    TracesFilter,
    TracesPaginatedArg,
)
from tests.support.helpers import make_span


def _mock_client(handler) -> ObservabilityClient:
    return ObservabilityClient("http://observability.test", transport=httpx.MockTransport(handler))


class TestRequests:
    @pytest.mark.asyncio
    async def test_get_traces_serializes_arguments(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"pagination": {"total": 0, "page": 1, "perPage": 5, "hasMore": False}, "spans": []})

        async with _mock_client(handler) as client:
            result = await client.get_traces(
                TracesPaginatedArg(pagination=PaginationArgs(page=1, per_page=5), filters=TracesFilter(tags=["a"]))
            )

        assert result.pagination.per_page == 5
        assert seen[0].url.path == "/api/observability/traces"
        assert seen[0].url.query == b"page=1&perPage=5&tags%5B0%5D=a"

    @pytest.mark.asyncio
    async def test_ids_are_escaped(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"pagination": {"total": 0, "page": 0, "perPage": 10, "hasMore": False}, "scores": []})

        async with _mock_client(handler) as client:
            await client.list_scores_by_span("trace/1", "span 2")

        assert seen[0].url.raw_path.startswith(b"/api/observability/traces/trace%2F1/span%202/scores")

    @pytest.mark.asyncio
    async def test_score_body(self):
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"status": "success", "message": "Scoring started for 2 traces", "traceCount": 2})

        async with _mock_client(handler) as client:
            result = await client.score("quality", [ScoringTarget("t1"), ScoringTarget("t2", "s2")])

        assert result.trace_count == 2
        assert seen[0] == {"scorerName": "quality", "targets": [{"traceId": "t1"}, {"traceId": "t2", "spanId": "s2"}]}

    @pytest.mark.asyncio
    async def test_error_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400, json={"error": "Validation failed", "details": [{"field": "pagination.page", "message": "bad"}]}
            )

        async with _mock_client(handler) as client:
            with pytest.raises(ObservabilityClientError) as exc_info:
                await client.get_traces()

        assert exc_info.value.status_code == 400
        assert exc_info.value.body["details"][0]["field"] == "pagination.page"
        assert "Validation failed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_json_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="bad gateway")

        async with _mock_client(handler) as client:
            with pytest.raises(ObservabilityClientError) as exc_info:
                await client.get_trace("t1")

        assert exc_info.value.status_code == 502
        assert exc_info.value.body == "bad gateway"


class TestAgainstApp:
    @pytest.mark.asyncio
    async def test_listing_round_trip(self, storage: ObservabilityInMemory):
        await storage.batch_create_spans(
            [
                make_span("t1", "a", entity_type=EntityType.AGENT, tags=["prod"], metadata={"region": "eu"}),
                make_span("t2", "b", entity_type=EntityType.AGENT, tags=["dev"], started=1),
                make_span("t3", "c", entity_type=EntityType.TOOL, tags=["prod"], started=2),
            ]
        )
        transport = httpx.ASGITransport(app=create_app(storage))
        async with ObservabilityClient("http://app", transport=transport) as client:
            result = await client.get_traces(
                TracesPaginatedArg(filters=TracesFilter(entity_type=EntityType.AGENT, tags=["prod", "qa"], metadata={"region": "eu"}))
            )
            trace = await client.get_trace("t1")
            with pytest.raises(ObservabilityClientError) as exc_info:
                await client.get_trace("missing")

        assert [s.span_id for s in result.spans] == ["a"]
        assert trace.spans[0].metadata == {"region": "eu"}
        assert exc_info.value.status_code == 404
