"""Redis counter store using redis-py.

Configuration comes from Settings:
- REDIS_ADDR (default: "localhost:6379")
- password resolved by access_counter.credentials
- logical DB fixed at 0
- REDIS_CONNECT_TIMEOUT / REDIS_SOCKET_TIMEOUT (default: 5s / 3s)

Each call is a single attempt; redis-py errors are translated to
StoreUnavailable with the original exception chained.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

import redis
from redis.backoff import NoBackoff
from redis.retry import Retry

from .interface import StoreUnavailable


logger = logging.getLogger(__name__)


class RedisStore:
    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        password: Optional[str] = None,
        db: int = 0,
        connect_timeout: float = 5.0,
        socket_timeout: float = 3.0,
    ) -> None:
        self.host = host
        self.port = port
        # an empty password means no AUTH at all
        self.password = password or None
        self.db = db
        self.connect_timeout = connect_timeout
        self.socket_timeout = socket_timeout
        self._client: Optional[redis.Redis] = None
        self._lock = threading.Lock()

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def _get_client(self) -> redis.Redis:
        with self._lock:
            if self._client is None:
                logger.info(f"Creating Redis client for {self.address} (db={self.db})")
                self._client = redis.Redis(
                    host=self.host,
                    port=self.port,
                    password=self.password,
                    db=self.db,
                    # a silent or blackholed peer must fail the call, not hang it
                    socket_connect_timeout=self.connect_timeout,
                    socket_timeout=self.socket_timeout,
                    retry_on_timeout=False,
                    retry=Retry(NoBackoff(), 0),
                )
            return self._client

    def ping(self) -> None:
        try:
            self._get_client().ping()
        except redis.exceptions.RedisError as e:
            raise StoreUnavailable(f"Redis at {self.address} unreachable") from e

    def incr(self, name: str) -> int:
        try:
            value = self._get_client().incr(name)
        except redis.exceptions.RedisError as e:
            raise StoreUnavailable(f"INCR {name} failed against {self.address}") from e
        logger.debug(f"INCR {name} -> {value}")
        return int(value)

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                try:
                    self._client.close()
                except redis.exceptions.RedisError:
                    logger.exception("Error closing Redis client")
                logger.info(f"Closed Redis client for {self.address}")
                self._client = None
