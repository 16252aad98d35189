"""Translation between trace listing query strings and TracesPaginatedArg.

Query format (flattened for readability):
    page, perPage                   scalars at root level
    entityType, entityId, status... scalar filters at root level
    dateRange[start], dateRange[end] bracket notation for pagination window
    startedAt[start], endedAt[end]  bracket notation for filter windows
    tags[0], tags[1]                index notation for arrays (tags=a,b also accepted)
    metadata[key], scope[key]       bracket notation for key/value maps
    orderBy[field], orderBy[direction]

Parsing never raises for bad data: every field-level problem is collected into
``ParseResult.errors``.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeAlias
from urllib.parse import urlencode

from pydantic import ValidationError as PydanticValidationError

from ai_observability_core.exceptions import FieldError, field_errors_from_pydantic
from ai_observability_core.storage._models import TracesPaginatedArg

from ._brackets import compact_indices, decode_query, encode_query

__all__ = [
    "NESTED_FILTER_KEYS",
    "SCALAR_FILTER_KEYS",
    "ParseResult",
    "QueryInput",
    "parse_traces_query_params",
    "serialize_traces_params",
]

SCALAR_FILTER_KEYS: tuple[str, ...] = (
    "spanType",
    "entityType",
    "entityId",
    "entityName",
    "userId",
    "organizationId",
    "resourceId",
    "runId",
    "sessionId",
    "threadId",
    "requestId",
    "environment",
    "source",
    "serviceName",
    "deploymentId",
    "status",
    "hasChildError",
)
"""Filter keys that travel as plain ``key=value`` pairs at the query root."""

NESTED_FILTER_KEYS: tuple[str, ...] = ("startedAt", "endedAt", "tags", "metadata", "scope", "versionInfo")
"""Filter keys that travel in bracket notation."""

QUERY_DEPTH = 2

QueryInput: TypeAlias = str | Mapping[str, str | Sequence[str] | None]


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of parse_traces_query_params: validated data or every validation error."""

    data: TracesPaginatedArg | None = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.data is not None and not self.errors


def _to_query_string(params: QueryInput) -> str:
    if isinstance(params, str):
        return params
    if not isinstance(params, Mapping):
        raise TypeError(f"Expected a query string or a mapping, got {type(params).__name__}")
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, str):
            pairs.append((key, value))
        else:
            pairs.extend((key, item) for item in value)
    return urlencode(pairs)


def _restructure(parsed: dict[str, Any]) -> dict[str, Any]:
    restructured: dict[str, Any] = {}

    pagination = {key: parsed[key] for key in ("page", "perPage") if key in parsed}
    if "dateRange" in parsed:
        pagination["dateRange"] = parsed["dateRange"]
    if pagination:
        restructured["pagination"] = pagination

    filters = {key: parsed[key] for key in (*SCALAR_FILTER_KEYS, *NESTED_FILTER_KEYS) if key in parsed}
    # Only tags is an array; map keys such as metadata[0] stay keys.
    if "tags" in filters:
        filters["tags"] = compact_indices(filters["tags"])
    if filters:
        restructured["filters"] = filters

    if "orderBy" in parsed:
        restructured["orderBy"] = parsed["orderBy"]

    return restructured


def parse_traces_query_params(params: QueryInput) -> ParseResult:
    """Parse trace listing query params into a validated TracesPaginatedArg.

    Accepts either a raw query string (``"page=0&entityType=agent&dateRange[start]=..."``,
    leading ``?`` allowed) or a mapping as produced by web frameworks
    (``{"page": "0", "tags[0]": "a"}``; list values repeat the key, None values are skipped).

    Returns:
        ParseResult with ``data`` on success, or ``errors`` listing every invalid
        field as ``FieldError(field="pagination.page", message=...)``.

    Raises:
        TypeError: If ``params`` is neither a string nor a mapping.
    """
    parsed = decode_query(_to_query_string(params), depth=QUERY_DEPTH, compact=False)
    try:
        data = TracesPaginatedArg.model_validate(_restructure(parsed))
    except PydanticValidationError as exc:
        return ParseResult(errors=field_errors_from_pydantic(exc))
    return ParseResult(data=data)


def _non_empty(value: dict[str, Any]) -> dict[str, Any] | None:
    present = {key: item for key, item in value.items() if item is not None}
    return present or None


def serialize_traces_params(args: TracesPaginatedArg) -> str:
    """Serialize TracesPaginatedArg into a query string (without leading ``?``).

    Inverse of parse_traces_query_params for every schema-valid argument whose
    map values are strings.

    Examples:
        pagination page=0                 -> page=0
        filters entity_type=agent         -> entityType=agent
        filters tags=["a", "b"]           -> tags%5B0%5D=a&tags%5B1%5D=b
        pagination date_range.start=T     -> dateRange%5Bstart%5D=2024-01-01T00%3A00%3A00Z
    """
    flat: dict[str, Any] = {}

    if args.pagination is not None:
        flat["page"] = args.pagination.page
        flat["perPage"] = args.pagination.per_page
        if args.pagination.date_range is not None:
            flat["dateRange"] = _non_empty(args.pagination.date_range.model_dump(by_alias=True))

    if args.filters is not None:
        filters = args.filters.model_dump(by_alias=True, exclude_none=True)
        for key in SCALAR_FILTER_KEYS:
            flat[key] = filters.get(key)
        for key in NESTED_FILTER_KEYS:
            value = filters.get(key)
            flat[key] = value or None

    if args.order_by is not None:
        flat["orderBy"] = _non_empty(args.order_by.model_dump(by_alias=True))

    return encode_query(flat)
