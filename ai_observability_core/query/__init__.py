"""Query string codec for trace listings."""

from ._brackets import compact_indices, decode_query, encode_query
from .params import SCALAR_FILTER_KEYS, ParseResult, parse_traces_query_params, serialize_traces_params

__all__ = [
    "SCALAR_FILTER_KEYS",
    "ParseResult",
    "compact_indices",
    "decode_query",
    "encode_query",
    "parse_traces_query_params",
    "serialize_traces_params",
]
