from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import psycopg2

from domain.errors import StorageUnavailable


logger = logging.getLogger(__name__)


class PostgresConnector:
    """
    Connector for a PostgreSQL server.

    Uses the same schema and statements as the SQLite connector; only the
    parameter marker and the spelling of the balance column type differ.
    `params` are passed to `psycopg2.connect` unchanged.
    """

    name = "PostgreSQL"
    supports_modification = True
    placeholder = "%s"
    double_type = "double precision"
    errors = (psycopg2.Error,)

    _DEFAULTS = {
        "host": "localhost",
        "port": "5432",
        "dbname": "minecraft",
        "user": "root",
        "password": "",
    }

    def __init__(self, params: Optional[Dict[str, Any]] = None) -> None:
        self._params = {**self._DEFAULTS, **(params or {})}

    def connect(self):
        try:
            conn = psycopg2.connect(**self._params)
        except psycopg2.Error as exc:
            raise StorageUnavailable(
                f"Cannot connect to {self._params.get('host')}:{self._params.get('port')}: {exc}"
            ) from exc
        conn.autocommit = True
        logger.debug("Connected to PostgreSQL database %s", self._params.get("dbname"))
        return conn

    def is_closed(self, connection: Any) -> bool:
        return bool(connection.closed)

    def is_disconnect(self, error: BaseException) -> bool:
        return isinstance(error, (psycopg2.OperationalError, psycopg2.InterfaceError))

    @classmethod
    def config_defaults(cls) -> Dict[str, str]:
        return dict(cls._DEFAULTS)
