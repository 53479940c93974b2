"""Operation descriptor extraction from JavaScript source text.

Minified bundles emit descriptors in two shapes:

- rich: ``queryId:"…"`` … ``operationName:"…"`` … ``featureSwitches:[…]``
- minimal: ``queryId:"…"`` followed closely by ``operationName:"…"``

Both passes are pure functions over the text. Gaps between the keys may not
cross a closing brace, which keeps a match inside a single object literal.
"""

import re
from collections.abc import Iterator
from functools import lru_cache

from .models import EndpointRecord

DEFAULT_MINIMAL_FORM_WINDOW = 500

RICH_FORM_PATTERN = re.compile(
    r'queryId:\s*"([^"]+)"[^}]*?operationName:\s*"([^"]+)"[^}]*?featureSwitches:\s*\[([^\]]*)\]'
)

_QUOTED = re.compile(r'"([^"]+)"')


@lru_cache(maxsize=8)
def minimal_form_pattern(window: int = DEFAULT_MINIMAL_FORM_WINDOW) -> re.Pattern[str]:
    """Fallback pattern; ``window`` bounds the characters between the two keys."""
    if window < 0:
        raise ValueError("window must be >= 0")
    return re.compile(rf'queryId:\s*"([^"]+)"[^}}]{{0,{window}}}?operationName:\s*"(\w+)"')


def _iter_rich(code: str) -> Iterator[tuple[int, EndpointRecord]]:
    for match in RICH_FORM_PATTERN.finditer(code):
        query_id, operation_name, switches = match.groups()
        features = tuple(_QUOTED.findall(switches))
        yield match.start(), EndpointRecord(name=operation_name, hash=query_id, features=features)


def _iter_minimal(code: str, window: int) -> Iterator[tuple[int, EndpointRecord]]:
    for match in minimal_form_pattern(window).finditer(code):
        query_id, operation_name = match.groups()
        yield match.start(), EndpointRecord(name=operation_name, hash=query_id)


def extract_rich_form(code: str) -> list[EndpointRecord]:
    """Descriptors carrying a ``featureSwitches`` array."""
    return [record for _, record in _iter_rich(code)]


def extract_minimal_form(code: str, window: int = DEFAULT_MINIMAL_FORM_WINDOW) -> list[EndpointRecord]:
    """Descriptors matched on ``queryId``/``operationName`` alone, with no features."""
    return [record for _, record in _iter_minimal(code, window)]


def extract_endpoints(code: str, window: int = DEFAULT_MINIMAL_FORM_WINDOW) -> list[EndpointRecord]:
    """Run both passes over ``code`` and concatenate their candidates.

    Rich-form records come first. A minimal-form match that starts at the
    same ``queryId`` as a rich-form match and carries the same name and hash
    is the same literal seen twice and is left out; everything else is kept,
    duplicates by name included, for the reducer to resolve.

    Args:
        code: JavaScript source, any size.
        window: Upper bound on the gap used by the minimal-form pass.

    Returns:
        Candidate records, possibly empty.
    """
    if not code:
        return []

    rich = list(_iter_rich(code))
    seen = {(offset, record.name, record.hash) for offset, record in rich}

    records = [record for _, record in rich]
    records.extend(
        record for offset, record in _iter_minimal(code, window) if (offset, record.name, record.hash) not in seen
    )
    return records
