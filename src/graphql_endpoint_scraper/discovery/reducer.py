"""Merge candidate records into the canonical, deduplicated result set."""

from collections.abc import Iterable
from datetime import UTC, datetime

from .models import EndpointRecord, ResultSet

MIN_NAME_LENGTH = 4
MIN_HASH_LENGTH = 11


def is_valid_record(record: EndpointRecord) -> bool:
    """Drop placeholder matches: short names and short hashes."""
    return len(record.name) >= MIN_NAME_LENGTH and len(record.hash) >= MIN_HASH_LENGTH


def sort_key(record: EndpointRecord) -> tuple[str, str]:
    """Case-insensitive name order; names differing only by case fall back to code points."""
    return record.name.casefold(), record.name


def merge_by_name(candidates: Iterable[EndpointRecord]) -> dict[str, EndpointRecord]:
    """Keep one record per name.

    The first occurrence wins unless a later one carries strictly more
    feature switches, so a rich-form match replaces a minimal-form one no
    matter which was scanned first.
    """
    merged: dict[str, EndpointRecord] = {}
    for record in candidates:
        if not is_valid_record(record):
            continue
        existing = merged.get(record.name)
        if existing is None or len(record.features) > len(existing.features):
            merged[record.name] = record
    return merged


def reduce_endpoints(candidates: Iterable[EndpointRecord], generated: datetime | None = None) -> ResultSet:
    """Filter, merge by name and sort candidates into a ResultSet.

    Args:
        candidates: Chunk-derived records first, then bundle-derived in scan order.
        generated: Timestamp of the run; defaults to now (UTC).
    """
    merged = merge_by_name(candidates)
    endpoints = tuple(sorted(merged.values(), key=sort_key))
    return ResultSet(generated=generated or datetime.now(UTC), endpoints=endpoints)
