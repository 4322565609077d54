import logging
import os
import time
from typing import Any, Optional

import httpx

from .config import MavConfig

logger = logging.getLogger(__name__)


def configure_logging_if_needed() -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


async def log_request(request: httpx.Request) -> None:
    logger.debug("HTTP %s %s", request.method, request.url)


def make_client(cfg: MavConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    timeout = httpx.Timeout(
        connect=cfg.connect_timeout,
        read=cfg.read_timeout,
        write=cfg.write_timeout,
        pool=cfg.pool_timeout,
    )
    return httpx.AsyncClient(
        base_url=cfg.base_url,
        timeout=timeout,
        headers={"Accept": "application/json"},
        event_hooks={"request": [log_request]},
        transport=transport,
    )


async def get_json(
    client: httpx.AsyncClient,
    path: str,
    *,
    params: Optional[dict] = None,
    allow_missing: bool = False,
) -> Any:
    """GET and decode JSON. With allow_missing, a 404 yields None instead of an error."""
    t0 = time.perf_counter()
    r = await client.get(path, params=params)
    elapsed = time.perf_counter() - t0

    if allow_missing and r.status_code == 404:
        logger.debug("GET %s -> 404 after %.2fs", path, elapsed)
        return None

    if r.status_code >= 400:
        logger.warning("HTTP %d GET %s after %.2fs body_snippet=%r", r.status_code, path, elapsed, (r.text or "")[:300])
    else:
        logger.debug("GET %s completed in %.2fs status=%d", path, elapsed, r.status_code)

    r.raise_for_status()
    return r.json()
