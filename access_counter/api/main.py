from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool
import logging
from dataclasses import dataclass
from typing import Mapping, Optional
from contextlib import asynccontextmanager

from access_counter.adapters.interface import CounterStore, check_connectivity
from access_counter.adapters.memory import MemoryStore
from access_counter.adapters.redis_store import RedisStore
from access_counter.api import routes
from access_counter.config import Settings
from access_counter.credentials import ResolvedCredential, resolve_credential

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything the handlers need, built once per process at startup."""
    settings: Settings
    credential: ResolvedCredential
    store: CounterStore


def build_store(settings: Settings, credential: ResolvedCredential) -> CounterStore:
    if settings.store_backend == "memory":
        logger.warning("Using in-memory counter store; counts are not shared or persisted")
        return MemoryStore()
    host, port = settings.redis_host_port()
    return RedisStore(
        host=host,
        port=port,
        password=credential.value,
        db=settings.redis_db,
        connect_timeout=settings.redis_connect_timeout,
        socket_timeout=settings.redis_socket_timeout,
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[CounterStore] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> FastAPI:
    """Build the FastAPI app.

    ``store`` replaces the store built from settings (tests inject a
    MemoryStore). ``environ`` replaces ``os.environ`` for settings and the
    password lookup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan handler: resolve the password, build the store, check it."""
        cfg = settings if settings is not None else Settings.from_env(environ)
        credential = resolve_credential(cfg, environ)
        counter_store = store if store is not None else build_store(cfg, credential)
        # an unreachable store only degrades /data; startup continues.
        # The ping blocks on the network, so keep it off the event loop.
        await run_in_threadpool(check_connectivity, counter_store)
        app.state.ctx = AppContext(
            settings=cfg,
            credential=credential,
            store=counter_store,
        )
        try:
            yield
        finally:
            logger.info("Shutting down store client...")
            try:
                counter_store.close()
            except Exception as e:
                logger.warning(f"Error closing store: {e}", exc_info=True)
            app.state.ctx = None

    app = FastAPI(title="Access Counter", lifespan=lifespan)
    app.include_router(routes.router)
    return app


app = create_app()
