from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Dict, Union

from domain.errors import StorageUnavailable


logger = logging.getLogger(__name__)


class SqliteConnector:
    """
    Connector for a single SQLite file inside the host's data directory.

    SQLite cannot alter existing tables in place, so `supports_modification`
    is False. Connections are opened in auto-commit mode and may be shared
    with the health probe thread; the repository serializes access.
    """

    name = "SQLite"
    supports_modification = False
    placeholder = "?"
    double_type = "double"
    errors = (sqlite3.Error,)

    def __init__(
        self,
        data_dir: Union[str, Path],
        filename: str = "database.db",
    ) -> None:
        self._db_path = Path(data_dir) / filename

    @property
    def db_path(self) -> Path:
        return self._db_path

    def connect(self) -> sqlite3.Connection:
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                str(self._db_path.absolute()),
                isolation_level=None,
                check_same_thread=False,
            )
        except (OSError, sqlite3.Error) as exc:
            raise StorageUnavailable(f"Cannot open {self._db_path}: {exc}") from exc
        logger.debug("Opened SQLite database at %s", self._db_path)
        return conn

    def is_closed(self, connection: sqlite3.Connection) -> bool:
        # sqlite3 has no "closed" flag; any attribute access on a closed
        # connection raises ProgrammingError.
        try:
            connection.total_changes
        except sqlite3.ProgrammingError:
            return True
        return False

    def is_disconnect(self, error: BaseException) -> bool:
        message = str(error).lower()
        if isinstance(error, sqlite3.ProgrammingError):
            return "closed" in message
        if isinstance(error, sqlite3.OperationalError):
            return "unable to open" in message or "disk i/o" in message
        return False

    @classmethod
    def config_defaults(cls) -> Dict[str, str]:
        return {}
