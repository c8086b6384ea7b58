from __future__ import annotations

import math
from functools import lru_cache
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url


def engine_options(database_url: str, connect_timeout: float) -> dict[str, Any]:
    """Timeouts that keep a dead database from pinning a worker thread."""

    if make_url(database_url).get_backend_name() != "postgresql":
        return {}
    return {
        # libpq takes whole seconds
        "connect_args": {"connect_timeout": max(1, math.ceil(connect_timeout))},
        "pool_timeout": connect_timeout,
    }


@lru_cache(maxsize=4)
def get_engine(database_url: str, connect_timeout: float = 2.0) -> Engine:
    # psycopg3 driver uses `postgresql+psycopg://...`
    return create_engine(database_url, pool_pre_ping=True, **engine_options(database_url, connect_timeout))


def ping_database(engine: Engine) -> None:
    """Run a trivial query; raises if the database is unreachable."""

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
