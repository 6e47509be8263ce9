"""
Tests for WebUI parameter normalization helpers.
"""

import pytest

from qbit_client.models import AddTorrentOptions, TorrentListOptions
from qbit_client.utils import (
    format_bytes,
    is_greater,
    join_hashes,
    join_list,
    join_url,
    to_query_params,
    to_wire_fields,
)


class TestJoining:
    def test_join_list_passes_single_string_through(self):
        assert join_list("a,b", ",") == "a,b"

    def test_join_list_uses_delimiter(self):
        assert join_list(["http://a", "http://b"], "\n") == "http://a\nhttp://b"

    def test_join_hashes_pipe_separated(self):
        assert join_hashes(["aaa", "bbb", "ccc"]) == "aaa|bbb|ccc"
        assert join_hashes("all") == "all"

    def test_join_empty_list(self):
        assert join_hashes([]) == ""


class TestIsGreater:
    def test_numeric_runs_compare_as_numbers(self):
        assert is_greater("5.10.0", "5.2.0")
        assert not is_greater("5.2.0", "5.10.0")

    def test_major_versions(self):
        assert is_greater("5.0.1", "5.0.0")
        assert is_greater("10.0.0", "5.0.0")
        assert not is_greater("4.6.7", "5.0.0")

    def test_equal_is_not_greater(self):
        assert not is_greater("5.0.0", "5.0.0")


class TestJoinUrl:
    def test_collapses_slashes(self):
        assert join_url("http://host/api/v2/", "/torrents/info") == "http://host/api/v2/torrents/info"

    def test_skips_empty_segments(self):
        assert join_url("http://host", "", None, "app/version") == "http://host/app/version"

    def test_nothing_to_join(self):
        assert join_url() == ""
        assert join_url("", None) == ""

    def test_multiple_segments(self):
        assert join_url("http://host/", "/api/", "/v2/", "log/main") == "http://host/api/v2/log/main"


class TestQueryParams:
    def test_booleans_are_lowercase(self):
        assert to_query_params({"deleteFiles": True, "reverse": False}) == {
            "deleteFiles": "true",
            "reverse": "false",
        }

    def test_drops_none_and_stringifies(self):
        assert to_query_params({"limit": 10, "offset": None, "ratio": 1.5}) == {"limit": "10", "ratio": "1.5"}


class TestWireFields:
    def test_none_options(self):
        assert to_wire_fields(None) == {}

    def test_unset_fields_are_not_sent(self):
        assert to_wire_fields(TorrentListOptions(filter="downloading")) == {"filter": "downloading"}

    def test_wire_names(self):
        fields = to_wire_fields(TorrentListOptions(is_private=True, include_trackers=False))
        assert fields == {"private": True, "includeTrackers": False}

    def test_filename_is_never_sent(self):
        fields = to_wire_fields(AddTorrentOptions(filename="ubuntu.torrent", auto_tmm=True, up_limit=100))
        assert fields == {"autoTMM": True, "upLimit": 100}

    def test_rejects_non_dataclass(self):
        with pytest.raises(TypeError):
            to_wire_fields({"filter": "all"})


def test_format_bytes():
    assert format_bytes(None) == "N/A"
    assert format_bytes(512) == "512.00 B"
    assert format_bytes(1536) == "1.50 KB"
