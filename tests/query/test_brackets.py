"""Tests for the bracket-notation query codec."""

from datetime import UTC, datetime

from ai_observability_core.query import compact_indices, decode_query, encode_query
from ai_observability_core.storage import SpanType


class TestDecodeQuery:
    def test_flat_keys_stay_scalars(self):
        assert decode_query("page=0&entityType=agent") == {"page": "0", "entityType": "agent"}

    def test_leading_question_mark_ignored(self):
        assert decode_query("?page=1") == {"page": "1"}

    def test_empty_query(self):
        assert decode_query("") == {}

    def test_bracket_map(self):
        assert decode_query("metadata[env]=prod&metadata[region]=eu") == {"metadata": {"env": "prod", "region": "eu"}}

    def test_index_array(self):
        assert decode_query("tags[0]=a&tags[1]=b") == {"tags": ["a", "b"]}

    def test_index_array_out_of_order(self):
        assert decode_query("tags[1]=b&tags[0]=a") == {"tags": ["a", "b"]}

    def test_empty_brackets_append(self):
        assert decode_query("tags[]=a&tags[]=b") == {"tags": ["a", "b"]}

    def test_repeated_keys_combine(self):
        assert decode_query("tags=a&tags=b") == {"tags": ["a", "b"]}

    def test_percent_encoded_brackets(self):
        assert decode_query("tags%5B0%5D=a&dateRange%5Bstart%5D=2024-01-01T00%3A00%3A00Z") == {
            "tags": ["a"],
            "dateRange": {"start": "2024-01-01T00:00:00Z"},
        }

    def test_blank_values_kept(self):
        assert decode_query("entityId=") == {"entityId": ""}

    def test_depth_limit_keeps_remainder(self):
        assert decode_query("a[b][c][d]=x") == {"a": {"b": {"c": {"[d]": "x"}}}}

    def test_index_above_array_limit_stays_map(self):
        assert decode_query("tags[25]=x") == {"tags": {"25": "x"}}

    def test_unicode_digits_are_map_keys(self):
        assert decode_query("tags[%C2%B2]=a&tags[%D9%A3]=b") == {"tags": {"²": "a", "٣": "b"}}

    def test_oversized_index_is_map_key(self):
        key = "9" * 5000
        assert decode_query(f"tags[{key}]=a&tags[]=b") == {"tags": {key: "a", "0": "b"}}

    def test_uncompacted_keeps_index_maps(self):
        assert decode_query("tags[0]=a&metadata[0]=x", compact=False) == {"tags": {"0": "a"}, "metadata": {"0": "x"}}

    def test_custom_depth(self):
        assert decode_query("a[b][c]=x", depth=1) == {"a": {"b": {"[c]": "x"}}}

    def test_values_are_strings(self):
        decoded = decode_query("page=3&hasChildError=true")
        assert decoded == {"page": "3", "hasChildError": "true"}


class TestCompactIndices:
    def test_index_map_becomes_ordered_list(self):
        assert compact_indices({"1": "b", "0": "a"}) == ["a", "b"]

    def test_no_limit_by_default(self):
        value = {str(i): f"t{i}" for i in range(25)}
        assert compact_indices(value) == [f"t{i}" for i in range(25)]

    def test_limit_keeps_map(self):
        assert compact_indices({"25": "x"}, array_limit=20) == {"25": "x"}

    def test_mixed_keys_keep_map(self):
        assert compact_indices({"0": "a", "env": "b"}) == {"0": "a", "env": "b"}


class TestEncodeQuery:
    def test_scalars(self):
        assert encode_query({"page": 0, "perPage": 10}) == "page=0&perPage=10"

    def test_none_skipped(self):
        assert encode_query({"page": None, "entityId": "a1"}) == "entityId=a1"

    def test_lists_use_index_notation(self):
        assert encode_query({"tags": ["a", "b"]}) == "tags%5B0%5D=a&tags%5B1%5D=b"

    def test_maps_use_bracket_notation(self):
        assert encode_query({"metadata": {"env": "prod"}}) == "metadata%5Benv%5D=prod"

    def test_bools_render_lowercase(self):
        assert encode_query({"hasChildError": True}) == "hasChildError=true"
        assert encode_query({"hasChildError": False}) == "hasChildError=false"

    def test_enums_render_by_value(self):
        assert encode_query({"spanType": SpanType.TOOL_CALL}) == "spanType=tool_call"

    def test_utc_datetimes_render_with_z(self):
        value = datetime(2024, 1, 1, tzinfo=UTC)
        assert encode_query({"dateRange": {"start": value}}) == "dateRange%5Bstart%5D=2024-01-01T00%3A00%3A00Z"

    def test_values_are_percent_encoded(self):
        assert encode_query({"entityName": "a&b=c d"}) == "entityName=a%26b%3Dc%20d"

    def test_decode_reads_encoded_output(self):
        params = {"page": 1, "tags": ["x", "y"], "metadata": {"env": "prod"}}
        assert decode_query(encode_query(params)) == {"page": "1", "tags": ["x", "y"], "metadata": {"env": "prod"}}
