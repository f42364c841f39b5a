"""Sphinx/Manticore adapter over the MySQL wire protocol."""

import re

import pymysql
import structlog

from searchprobe.backends.base import BackendAdapter
from searchprobe.config import BackendConfig
from searchprobe.errors import ConfigurationError, TransportError
from searchprobe.execution.strategies import SQL_STRATEGIES, QueryStrategy
from searchprobe.models.tabular import TabularRows

logger = structlog.get_logger()

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

SEARCH_SQL = (
    "SELECT id, url, created_at, title_text, content_text, WEIGHT() AS score "
    "FROM {index} WHERE MATCH(%s) ORDER BY score DESC LIMIT {limit}"
)


class SphinxSqlAdapter(BackendAdapter):
    """
    Tabular row adapter.

    Each call opens a short-lived connection bounded by the call timeout and
    returns the result set as TabularRows with the WEIGHT() column last.
    """

    def __init__(self, config: BackendConfig, connect=pymysql.connect):
        super().__init__(config)
        if not _IDENTIFIER.match(config.index_name):
            raise ConfigurationError(
                "Index name is not a valid SQL identifier",
                details={"index": config.index_name},
            )
        self._connect = connect

    def _open(self, timeout_ms: int):
        timeout = max(1.0, timeout_ms / 1000.0)
        try:
            return self._connect(
                host=self.config.host,
                port=self.config.port,
                connect_timeout=timeout,
                read_timeout=timeout,
                charset="utf8mb4",
            )
        except (pymysql.err.OperationalError, pymysql.err.InterfaceError, OSError) as e:
            raise TransportError(
                f"Backend connection failed: {e}",
                details={"backend": self.backend_id},
            ) from e

    def execute(self, query_body: dict, timeout_ms: int) -> TabularRows | dict:
        sql = SEARCH_SQL.format(
            index=self.config.index_name,
            limit=int(query_body.get("limit", 10)),
        )
        connection = self._open(timeout_ms)
        try:
            with connection.cursor() as cursor:
                cursor.execute(sql, (query_body["match"],))
                columns = tuple(d[0] for d in cursor.description or ())
                rows = tuple(tuple(row) for row in cursor.fetchall())
        except (pymysql.err.OperationalError, pymysql.err.InterfaceError) as e:
            raise TransportError(
                f"Backend query failed at transport level: {e}",
                details={"backend": self.backend_id},
            ) from e
        except pymysql.err.MySQLError as e:
            # engine-side query errors are payloads, not transport faults
            logger.debug("backend_query_error", backend=self.backend_id, error=str(e))
            return {"error": str(e)}
        finally:
            connection.close()

        return TabularRows(columns=columns, rows=rows)

    def ping(self, timeout_ms: int = 5000):
        connection = self._open(timeout_ms)
        try:
            with connection.cursor() as cursor:
                cursor.execute("SHOW TABLES")
        except pymysql.err.MySQLError as e:
            raise TransportError(
                f"Backend is not accessible: {e}",
                details={"backend": self.backend_id},
            ) from e
        finally:
            connection.close()

    def default_strategies(self) -> list[QueryStrategy]:
        return list(SQL_STRATEGIES)
