"""Data models for endpoint discovery.

An operation descriptor in a compiled bundle looks like:

    {queryId:"abc123XYZhash",operationName:"Foo",operationType:"query",
     metadata:{featureSwitches:["flag_a","flag_b"],fieldToggles:[]}}

Candidate records are produced straight from such literals and may be
duplicated or bogus; the reducer turns them into a ResultSet.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ScrapeStage(str, Enum):
    """Lifecycle of a single scrape run."""

    IDLE = "idle"
    LAUNCHING = "launching"
    READY = "ready"
    HARVESTING = "harvesting"
    SCANNING = "scanning"
    REDUCING = "reducing"
    CLOSED = "closed"


@dataclass(frozen=True)
class EndpointRecord:
    """A GraphQL operation: its name, query hash and feature switches."""

    name: str
    hash: str
    features: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "hash": self.hash, "features": list(self.features)}


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ResultSet:
    """Deduplicated endpoints of one run, sorted by name."""

    generated: datetime
    endpoints: tuple[EndpointRecord, ...] = ()

    @property
    def count(self) -> int:
        return len(self.endpoints)

    @property
    def with_features(self) -> int:
        """Number of endpoints carrying at least one feature switch."""
        return sum(1 for endpoint in self.endpoints if endpoint.features)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated": format_timestamp(self.generated),
            "count": self.count,
            "endpoints": [endpoint.to_dict() for endpoint in self.endpoints],
        }


@dataclass
class ScanReport:
    """Outcome of scanning a list of bundle URLs."""

    total: int = 0
    scanned: int = 0
    failed: list[str] = field(default_factory=list)
    records: list[EndpointRecord] = field(default_factory=list)
