"""Bracket-notation query string codec.

Decodes ``key[sub]=v`` and ``key[0]=v`` pairs into nested dicts and lists and
encodes nested structures back into the same notation. Follows the conventions
of the JavaScript ``qs`` package that browser clients use: bounded nesting
depth, index arrays compacted in order, repeated keys combined into lists.
"""

import re
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from urllib.parse import parse_qsl, quote

__all__ = ["compact_indices", "decode_query", "encode_query"]

DEFAULT_DEPTH = 2
DEFAULT_ARRAY_LIMIT = 20

_SEGMENT = re.compile(r"\[([^\[\]]*)\]")
_INDEX = re.compile(r"[0-9]{1,9}")


def _split_key(key: str, depth: int) -> list[str]:
    """Split ``a[b][c]`` into ``["a", "b", "c"]``.

    At most ``depth`` bracket segments are split off; anything after that is
    kept verbatim as one final segment. Trailing text that is not a bracket
    segment is dropped. Keys without a leading parent name stay flat.
    """
    bracket = key.find("[")
    if bracket <= 0:
        return [key]

    segments = [key[:bracket]]
    rest = key[bracket:]
    pos = 0
    while len(segments) <= depth:
        match = _SEGMENT.match(rest, pos)
        if match is None:
            break
        segments.append(match.group(1))
        pos = match.end()

    if pos == 0:
        return [key]
    if len(segments) > depth and rest.startswith("[", pos):
        segments.append(rest[pos:])
    return segments


def _is_index(key: str) -> bool:
    return _INDEX.fullmatch(key) is not None


def _next_index(node: dict[str, Any]) -> str:
    indices = [int(k) for k in node if _is_index(k)]
    return str(max(indices) + 1) if indices else "0"


def _as_dict(value: Any) -> dict[str, Any]:
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        return {str(i): item for i, item in enumerate(value)}
    return {"0": value}


def _assign(root: dict[str, Any], path: list[str], value: str) -> None:
    node = root
    for segment in path[:-1]:
        key = segment or _next_index(node)
        child = node.get(key)
        if not isinstance(child, dict):
            child = {} if child is None else _as_dict(child)
            node[key] = child
        node = child

    leaf = path[-1] or _next_index(node)
    existing = node.get(leaf)
    if existing is None:
        node[leaf] = value
    elif isinstance(existing, list):
        existing.append(value)
    elif isinstance(existing, dict):
        existing[_next_index(existing)] = value
    else:
        node[leaf] = [existing, value]


def compact_indices(value: Any, *, array_limit: int | None = None) -> Any:
    """Turn maps keyed only by array indices into lists ordered by index.

    Applies recursively. A map holding an index above ``array_limit`` stays a
    map; ``None`` lifts the limit.
    """
    if isinstance(value, list):
        return [compact_indices(item, array_limit=array_limit) for item in value]
    if not isinstance(value, dict):
        return value
    compacted = {key: compact_indices(item, array_limit=array_limit) for key, item in value.items()}
    if compacted and all(_is_index(key) and (array_limit is None or int(key) <= array_limit) for key in compacted):
        return [compacted[key] for key in sorted(compacted, key=int)]
    return compacted


def decode_query(
    query: str,
    *,
    depth: int = DEFAULT_DEPTH,
    array_limit: int = DEFAULT_ARRAY_LIMIT,
    compact: bool = True,
) -> dict[str, Any]:
    """Decode a query string into a nested structure.

    Example:
        >>> decode_query("page=0&tags[0]=a&tags[1]=b&metadata[env]=prod")
        {'page': '0', 'tags': ['a', 'b'], 'metadata': {'env': 'prod'}}

    Values are always strings; type coercion is left to the caller's schema.
    With ``compact=False`` index maps are returned as decoded (``{"0": "a"}``)
    so the caller can decide per key which ones are arrays.
    """
    root: dict[str, Any] = {}
    for raw_key, value in parse_qsl(query.removeprefix("?"), keep_blank_values=True):
        if not raw_key:
            continue
        _assign(root, _split_key(raw_key, depth), value)
    if not compact:
        return root
    return {key: compact_indices(value, array_limit=array_limit) for key, value in root.items()}


def _render_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        if value.tzinfo is not None and value.utcoffset() == UTC.utcoffset(None):
            return value.replace(tzinfo=None).isoformat() + "Z"
        return value.isoformat()
    return str(value)


def _flatten(prefix: str, value: Any, out: list[tuple[str, str]]) -> None:
    if value is None:
        return
    if isinstance(value, Mapping):
        for key, item in value.items():
            _flatten(f"{prefix}[{key}]", item, out)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten(f"{prefix}[{index}]", item, out)
    else:
        out.append((prefix, _render_scalar(value)))


def encode_query(params: Mapping[str, Any]) -> str:
    """Encode a nested structure as a bracket-notation query string (no leading ``?``).

    Dicts become ``key[sub]``, lists ``key[i]``; None values are skipped.
    Keys and values are percent-encoded, brackets included.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        _flatten(key, value, pairs)
    return "&".join(f"{quote(key, safe='')}={quote(value, safe='')}" for key, value in pairs)
