"""Tests for merging candidates into the canonical result set."""

import json
import random
from datetime import UTC, datetime

from graphql_endpoint_scraper.discovery.models import EndpointRecord, ResultSet
from graphql_endpoint_scraper.discovery.reducer import is_valid_record, merge_by_name, reduce_endpoints

HASH = "abcdefghijk"  # 11 chars, the shortest accepted
GENERATED = datetime(2026, 10, 19, 12, 30, 45, 123456, tzinfo=UTC)


def rec(name: str, hash: str = HASH, features: tuple[str, ...] = ()) -> EndpointRecord:
    return EndpointRecord(name=name, hash=hash, features=features)


class TestFilter:
    def test_name_length_boundary(self):
        assert not is_valid_record(rec("abc"))
        assert is_valid_record(rec("abcd"))

    def test_hash_length_boundary(self):
        assert not is_valid_record(rec("Name", hash="a" * 10))
        assert is_valid_record(rec("Name", hash="a" * 11))

    def test_empty_fields_dropped(self):
        assert not is_valid_record(rec("", hash=HASH))
        assert not is_valid_record(rec("Name", hash=""))

    def test_reduce_drops_invalid_records(self):
        result = reduce_endpoints([rec("abc"), rec("abcd"), rec("Short", hash="x" * 10)], generated=GENERATED)
        assert [e.name for e in result.endpoints] == ["abcd"]


class TestMerge:
    def test_richer_record_wins_in_either_order(self):
        bare = rec("UserTweets", hash="bare_hash_000")
        rich = rec("UserTweets", hash="rich_hash_000", features=("a", "b", "c"))

        assert merge_by_name([bare, rich])["UserTweets"] == rich
        assert merge_by_name([rich, bare])["UserTweets"] == rich

    def test_equal_feature_count_keeps_first_seen(self):
        first = rec("Following", hash="first_hash_00", features=("a",))
        second = rec("Following", hash="second_hash_0", features=("b",))
        assert merge_by_name([first, second])["Following"] == first

    def test_names_are_unique(self):
        merged = merge_by_name([rec("Same"), rec("Same", features=("x",)), rec("Other")])
        assert sorted(merged) == ["Other", "Same"]


class TestReduce:
    def test_sorted_by_name(self):
        names = ["UserByScreenName", "Bookmarks", "HomeTimeline", "CreateTweet", "Likes", "aboutAccount"]
        result = reduce_endpoints([rec(n) for n in names], generated=GENERATED)

        out = [e.name for e in result.endpoints]
        assert out == ["aboutAccount", "Bookmarks", "CreateTweet", "HomeTimeline", "Likes", "UserByScreenName"]
        assert all(a.casefold() <= b.casefold() for a, b in zip(out, out[1:]))

    def test_sort_ignores_case(self):
        result = reduce_endpoints([rec(n) for n in ["UserByScreenName", "aboutAccount", "Bookmarks"]], generated=GENERATED)
        assert [e.name for e in result.endpoints] == ["aboutAccount", "Bookmarks", "UserByScreenName"]

    def test_names_differing_only_by_case_are_both_kept_in_stable_order(self):
        result = reduce_endpoints([rec("likesTimeline"), rec("LikesTimeline")], generated=GENERATED)
        assert [e.name for e in result.endpoints] == ["LikesTimeline", "likesTimeline"]

    def test_reordering_input_gives_identical_output(self):
        candidates = [rec(f"Operation{i:03d}", hash=f"hash{i:08d}", features=("f",) * (i % 3)) for i in range(40)]
        shuffled = candidates[:]
        random.Random(7).shuffle(shuffled)

        a = reduce_endpoints(candidates, generated=GENERATED).to_dict()
        b = reduce_endpoints(shuffled, generated=GENERATED).to_dict()
        assert json.dumps(a) == json.dumps(b)

    def test_count_matches_endpoints(self):
        result = reduce_endpoints([rec("Alpha"), rec("Bravo", features=("x",))], generated=GENERATED)
        assert result.count == 2
        assert result.with_features == 1

    def test_empty_input(self):
        result = reduce_endpoints([], generated=GENERATED)
        assert result == ResultSet(generated=GENERATED, endpoints=())
        assert result.count == 0

    def test_default_timestamp_is_utc_now(self):
        result = reduce_endpoints([])
        assert result.generated.tzinfo is not None
        assert (datetime.now(UTC) - result.generated).total_seconds() < 60


class TestResultSetSerialization:
    def test_to_dict_shape(self):
        result = reduce_endpoints([rec("HomeTimeline", features=("flag_a", "flag_b"))], generated=GENERATED)
        assert result.to_dict() == {
            "generated": "2026-10-19T12:30:45.123Z",
            "count": 1,
            "endpoints": [{"name": "HomeTimeline", "hash": HASH, "features": ["flag_a", "flag_b"]}],
        }
