from typing import List

import pymysql
from dbutils.pooled_db import PooledDB
from pymysql.cursors import DictCursor

from reporting.config import ReportSettings
from reporting.logger import get_logger
from reporting.models import TransactionAggregateRow

logger = get_logger("db")

POOL_MAX_CONNECTIONS = 2

# No time predicate: the report window is not applied to this query.
SUCCESS_TOTALS_SQL = """
    SELECT
      SUM(CAST(lp.transaction_amount AS DECIMAL(15,2))) AS total_amount,
      SUBSTRING_INDEX(TRIM(m.name), ' ', 1) AS name
    FROM live_payment lp
    JOIN merchant m
      ON lp.created_merchant = m.id
    WHERE lp.transaction_status = 'success'
    GROUP BY name
"""


def build_pool(settings: ReportSettings) -> PooledDB:
    """
    Build the process-wide PyMySQL pool.

    Nothing connects until the first query. blocking=True makes callers
    wait for a free connection instead of failing when both are busy.
    """
    params = {k: v for k, v in settings.db_params.items() if v is not None}
    logger.info(
        "db.pool_configured",
        extra={
            "fields": {
                "host": params.get("host"),
                "port": params.get("port"),
                "database": params.get("database"),
                "max_connections": POOL_MAX_CONNECTIONS,
            }
        },
    )
    return PooledDB(
        creator=pymysql,
        maxconnections=POOL_MAX_CONNECTIONS,
        blocking=True,
        cursorclass=DictCursor,
        charset="utf8mb4",
        **params,
    )


class TransactionStore:
    """Read side of the live_payment / merchant tables."""

    def __init__(self, pool):
        self._pool = pool

    def fetch_success_totals(self) -> List[TransactionAggregateRow]:
        conn = self._pool.connection()
        try:
            cursor = conn.cursor()
            try:
                cursor.execute(SUCCESS_TOTALS_SQL)
                records = cursor.fetchall()
            finally:
                cursor.close()
        finally:
            # Hands the connection back to the pool
            conn.close()

        rows = [TransactionAggregateRow.from_db_row(r) for r in records]
        logger.debug("db.success_totals_fetched", extra={"fields": {"groups": len(rows)}})
        return rows
