"""
Utility decorators and context managers.
"""

import logging
import time
from contextlib import contextmanager
from typing import Dict, Iterator

logger = logging.getLogger(__name__)


@contextmanager
def timer(label: str = "") -> Iterator[Dict[str, int]]:
    """
    Measure wall time of a block in milliseconds.

    The yielded dict is filled in when the block exits, so read it
    after the with statement.

    Example:
        >>> with timer("render") as t:
        ...     do_work()
        >>> elapsed = t["ms"]
    """
    result = {"ms": 0}
    start = time.perf_counter()
    try:
        yield result
    finally:
        result["ms"] = max(1, int((time.perf_counter() - start) * 1000))
        if label:
            logger.debug(f"{label} took {result['ms']} ms")
