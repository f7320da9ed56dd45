import asyncio
import contextlib
import logging
import sqlite3
from contextlib import asynccontextmanager

from ats_engine.core.config.scoring import get_scoring_config
from ats_engine.metrics.store import init_db, purge_old_records

logger = logging.getLogger(__name__)

PURGE_INTERVAL_S = 3600


@asynccontextmanager
async def lifespan(app):
    get_scoring_config()
    init_db()
    purge_old_records()

    stop_event = asyncio.Event()

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                purge_old_records()
            except sqlite3.Error as exc:
                logger.warning("quality_metrics_purge_failed error=%s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=PURGE_INTERVAL_S)
            except asyncio.TimeoutError:
                continue

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
