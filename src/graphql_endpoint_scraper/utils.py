"""Utilities for persisting the result artifact."""

import json
import logging
from pathlib import Path

from .discovery.models import ResultSet

logger = logging.getLogger(__name__)


def write_result(result: ResultSet, path: Path) -> Path:
    """Write the result set as indented JSON, replacing any previous artifact.

    Args:
        result: The reduced endpoints of this run.
        path: Target file; parent directories are created.

    Returns:
        Path to the saved file.
    """
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result.to_dict(), indent=2) + "\n", encoding="utf-8")

    logger.info(f"Saved {result.count} endpoints to {path}")
    return path
