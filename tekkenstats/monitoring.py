"""Query performance monitoring for the Tekken stats backend.

Aggregate leaderboard queries scan the whole ``character_stats`` table, so
logging the slow ones is the quickest way to spot a missing index.
"""

import logging
import time
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

_MAX_LOGGED_STATEMENT_LENGTH = 500


def _truncate_statement(statement: str) -> str:
    """Clip long SQL statements so log lines stay readable."""
    if len(statement) <= _MAX_LOGGED_STATEMENT_LENGTH:
        return statement
    return statement[:_MAX_LOGGED_STATEMENT_LENGTH] + "..."


def setup_query_monitoring(
    engine: AsyncEngine,
    slow_query_threshold: float = 0.1,
) -> None:
    """Log a warning for every statement slower than ``slow_query_threshold``.

    Args:
        engine: Async SQLAlchemy engine to monitor
        slow_query_threshold: Threshold in seconds (default: 0.1s = 100ms)
    """
    if not hasattr(engine, "sync_engine"):
        logger.warning("Engine does not have sync_engine attribute, skipping query monitoring")
        return

    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def receive_before_cursor_execute(
        conn: Any,  # SQLAlchemy Connection - using Any due to incomplete typing in library
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        """Record query start time."""
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(engine.sync_engine, "after_cursor_execute")
    def receive_after_cursor_execute(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        """Log slow queries after execution."""
        total = time.perf_counter() - conn.info["query_start_time"].pop()

        if total > slow_query_threshold:
            logger.warning(
                f"Slow query detected ({total:.3f}s): {_truncate_statement(statement)}",
                extra={
                    "duration_seconds": total,
                    "query": statement,
                    "threshold_seconds": slow_query_threshold,
                },
            )

    logger.info(
        f"Query performance monitoring enabled "
        f"(slow query threshold: {slow_query_threshold}s)"
    )
