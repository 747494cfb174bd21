from .interface import CounterStore, StoreError, StoreUnavailable, check_connectivity
from .memory import MemoryStore
from .redis_store import RedisStore

__all__ = [
	"CounterStore",
	"StoreError",
	"StoreUnavailable",
	"check_connectivity",
	"MemoryStore",
	"RedisStore",
]
