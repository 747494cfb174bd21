import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from access_counter.adapters.interface import StoreUnavailable

logger = logging.getLogger(__name__)

router = APIRouter()

DB_ERROR_BODY = "Error connecting to database"


@router.get("/data", response_class=PlainTextResponse)
def data(request: Request):
    """Increment the access counter and report the new value.

    Store failures are logged and answered with a generic 500; the cause is
    never sent to the client.
    """
    ctx = getattr(request.app.state, "ctx", None)
    if ctx is None:
        logger.error("Request to /data before startup completed")
        return PlainTextResponse(DB_ERROR_BODY, status_code=500)
    try:
        count = ctx.store.incr(ctx.settings.counter_key)
    except StoreUnavailable as e:
        logger.error(f"Error incrementing counter: {e} (cause: {e.__cause__!r})")
        return PlainTextResponse(DB_ERROR_BODY, status_code=500)
    return PlainTextResponse(f"Access count: {count}")


@router.get("/healthz", response_class=PlainTextResponse)
async def healthz():
    """Liveness probe. Does not touch the store.

    Declared async so it runs on the event loop and never waits for a
    threadpool slot held by a slow /data call.
    """
    return PlainTextResponse("OK")
