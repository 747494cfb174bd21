from __future__ import annotations

import logging
from typing import Protocol


logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for counter store failures."""


class StoreUnavailable(StoreError):
    """The store could not be reached or rejected the request (network, auth)."""


class CounterStore(Protocol):
    """Interface that all counter stores implement."""

    def ping(self) -> None:
        """Round-trip to the store. Raises StoreUnavailable on failure."""
        ...

    def incr(self, name: str) -> int:
        """Atomically increment ``name`` and return the new value."""
        ...

    def close(self) -> None:
        ...


def check_connectivity(store: CounterStore) -> bool:
    """Best-effort startup check; logs the outcome and never raises."""
    try:
        store.ping()
    except StoreUnavailable as e:
        cause = e.__cause__ or e
        logger.warning(f"Could not connect to Redis: {cause}")
        return False
    logger.info("Connected to Redis")
    return True
