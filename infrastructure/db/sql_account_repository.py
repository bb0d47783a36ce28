from __future__ import annotations

import functools
import logging
import threading
from contextlib import closing
from typing import Any, Callable, Dict, List, Optional, Sequence

from domain.errors import StorageError
from domain.models import Account, TableNames
from domain.repositories import AccountRepository
from infrastructure.db.connector import Connector
from infrastructure.scheduler import ScheduledTask, Scheduler, ThreadScheduler


logger = logging.getLogger(__name__)

DEFAULT_PROBE_INTERVAL = 60.0

# Names bound per DELETE in clean(); stays under every SQLite variable limit.
DELETE_BATCH_SIZE = 500


def _absorb(fallback: Callable[[], Any]):
    """
    Run a public repository operation under the connection lock and turn
    any storage failure into `fallback()`.

    A driver error the connector classifies as a lost connection discards
    the handle and the operation is retried once on a fresh connection.
    """

    def decorator(method):
        @functools.wraps(method)
        def wrapper(self: "SqlAccountRepository", *args, **kwargs):
            with self._lock:
                for attempt in range(2):
                    try:
                        return method(self, *args, **kwargs)
                    except StorageError as exc:
                        logger.warning(
                            "%s: %s skipped, storage unavailable: %s",
                            self.name,
                            method.__name__,
                            exc,
                        )
                        break
                    except self._connector.errors as exc:
                        if self._connector.is_disconnect(exc):
                            self._discard_connection()
                            if attempt == 0:
                                logger.warning(
                                    "%s: connection lost during %s, reconnecting",
                                    self.name,
                                    method.__name__,
                                )
                                continue
                        logger.error(
                            "%s: %s failed: %s",
                            self.name,
                            method.__name__,
                            exc,
                            exc_info=True,
                        )
                        break
                return fallback()

        return wrapper

    return decorator


class _Statements:
    """SQL text for one combination of table names and parameter marker."""

    def __init__(self, names: TableNames, placeholder: str, double_type: str) -> None:
        p = placeholder
        accounts = names.accounts
        version = names.version
        user = names.name_column
        money = names.money_column
        uuid = names.uuid_column
        columns = f"{user}, {uuid}, {money}"

        self.create_accounts = (
            f"CREATE TABLE IF NOT EXISTS {accounts} ("
            f"{user} varchar(64) NOT NULL, "
            f"{uuid} varchar(36), "
            f"{money} {double_type} NOT NULL)"
        )
        self.create_version = f"CREATE TABLE IF NOT EXISTS {version} (version int NOT NULL)"

        self.select_version = f"SELECT version FROM {version}"
        self.count_version = f"SELECT COUNT(*) FROM {version}"
        self.clear_version = f"DELETE FROM {version}"
        self.insert_version = f"INSERT INTO {version} (version) VALUES ({p})"

        self.select_all = f"SELECT {columns} FROM {accounts}"
        self.select_top = f"SELECT {columns} FROM {accounts} ORDER BY {money} DESC LIMIT {p}"
        self.select_by_money = f"SELECT {user} FROM {accounts} WHERE {money} = {p}"
        self.insert_account = f"INSERT INTO {accounts} ({columns}) VALUES ({p}, {p}, {p})"
        self.delete_all = f"DELETE FROM {accounts}"

        self._accounts = accounts
        self._user = user
        self._uuid = uuid
        self._money = money
        self._p = p

    def _match(self, by_uuid: bool) -> str:
        column = self._uuid if by_uuid else self._user
        return f"UPPER({column}) = UPPER({self._p})"

    def select_account(self, by_uuid: bool) -> str:
        return f"SELECT {self._user}, {self._money} FROM {self._accounts} WHERE {self._match(by_uuid)}"

    def update_account(self, by_uuid: bool) -> str:
        return (
            f"UPDATE {self._accounts} SET {self._money} = {self._p}, {self._user} = {self._p} "
            f"WHERE {self._match(by_uuid)}"
        )

    def delete_account(self, by_uuid: bool) -> str:
        return f"DELETE FROM {self._accounts} WHERE {self._match(by_uuid)}"

    def delete_names(self, count: int) -> str:
        markers = ", ".join([self._p] * count)
        return (
            f"DELETE FROM {self._accounts} "
            f"WHERE {self._money} = {self._p} AND {self._user} IN ({markers})"
        )


class SqlAccountRepository(AccountRepository):
    """
    `AccountRepository` implemented once in terms of generic SQL.

    Everything engine specific (opening connections, parameter style,
    driver exceptions) comes from the injected `Connector`. The repository
    owns a single connection which is created lazily, replaced whenever it
    is found closed or broken, and checked in the background by a periodic
    `SELECT 1` probe once `init()` has run.

    Writes use update-then-insert: `save_account` issues an UPDATE and only
    INSERTs when no row matched. Two processes saving the same new account
    at the same moment can therefore both insert; there is no unique
    constraint guarding against it.

    `clean()` needs two facts from the host: the balance new accounts start
    with (`default_balance`) and whether a player is online (`is_active`).
    """

    def __init__(
        self,
        connector: Connector,
        *,
        is_active: Callable[[str], bool],
        default_balance: float = 0.0,
        names: Optional[TableNames] = None,
        scheduler: Optional[Scheduler] = None,
        probe_interval: float = DEFAULT_PROBE_INTERVAL,
    ) -> None:
        self._connector = connector
        self._is_active = is_active
        self._default_balance = default_balance
        self._names = names or TableNames()
        self._scheduler = scheduler or ThreadScheduler()
        self._probe_interval = probe_interval
        self._sql = _Statements(self._names, connector.placeholder, connector.double_type)

        self._lock = threading.RLock()
        self._connection: Any = None
        self._probe: Optional[ScheduledTask] = None

    @property
    def name(self) -> str:
        return self._connector.name

    @property
    def supports_modification(self) -> bool:
        return self._connector.supports_modification

    @property
    def names(self) -> TableNames:
        return self._names

    # Connection handling

    def _ensure_connected(self) -> Any:
        conn = self._connection
        if conn is not None and not self._connector.is_closed(conn):
            return conn

        self._connection = None
        conn = self._connector.connect()
        self._connection = conn
        logger.info("%s: connection established", self.name)
        self._stamp_initial_version(conn)
        return conn

    def _stamp_initial_version(self, conn: Any) -> None:
        # A fresh connection marks the schema as version 1 unless a version
        # is already stored.
        with closing(conn.cursor()) as cur:
            cur.execute(self._sql.create_version)
            cur.execute(self._sql.count_version)
            (count,) = cur.fetchone()
            if count == 0:
                cur.execute(self._sql.insert_version, (1,))
                logger.info("%s: schema version initialised to 1", self.name)

    def _discard_connection(self) -> None:
        conn, self._connection = self._connection, None
        if conn is None:
            return
        try:
            conn.close()
        except self._connector.errors as exc:
            logger.debug("%s: error while closing connection: %s", self.name, exc)

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        conn = self._ensure_connected()
        cur = conn.cursor()
        try:
            cur.execute(sql, tuple(params))
        except Exception:
            cur.close()
            raise
        return cur

    def _run(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Execute a statement that returns no rows; report affected rows."""
        with closing(self._execute(sql, params)) as cur:
            return cur.rowcount

    def _fetch_accounts(self, sql: str, params: Sequence[Any] = ()) -> List[Account]:
        with closing(self._execute(sql, params)) as cur:
            return [self._to_domain(row) for row in cur.fetchall()]

    @staticmethod
    def _to_domain(row: Sequence[Any]) -> Account:
        return Account(name=row[0], uuid=row[1], money=float(row[2]))

    def _start_probe(self) -> None:
        with self._lock:
            if self._probe is None:
                self._probe = self._scheduler.schedule_repeating(
                    self._probe_interval,
                    self._probe_connection,
                )

    def _probe_connection(self) -> None:
        with self._lock:
            conn = self._connection
            if conn is None or self._connector.is_closed(conn):
                return
            try:
                with closing(conn.cursor()) as cur:
                    cur.execute("/* ping */ SELECT 1")
            except self._connector.errors as exc:
                logger.warning("%s: health probe failed, dropping connection: %s", self.name, exc)
                self._discard_connection()
            else:
                logger.debug("%s: health probe ok", self.name)

    # AccountRepository

    def init(self) -> bool:
        self._create_tables()
        self._start_probe()
        return self.check_connection()

    @_absorb(lambda: None)
    def _create_tables(self) -> None:
        self._run(self._sql.create_accounts)
        self._run(self._sql.create_version)

    @_absorb(lambda: False)
    def check_connection(self) -> bool:
        self._ensure_connected()
        return True

    @_absorb(lambda: 0)
    def get_version(self) -> int:
        with closing(self._execute(self._sql.select_version)) as cur:
            row = cur.fetchone()
        return int(row[0]) if row else 0

    @_absorb(lambda: None)
    def set_version(self, version: int) -> None:
        self._run(self._sql.clear_version)
        self._run(self._sql.insert_version, (int(version),))

    @_absorb(lambda: None)
    def load_account_data(
        self,
        name: str,
        uuid: Optional[str],
    ) -> Optional[Dict[str, Any]]:
        by_uuid = uuid is not None
        sql = self._sql.select_account(by_uuid)
        with closing(self._execute(sql, (uuid if by_uuid else name,))) as cur:
            row = cur.fetchone()
        if not row:
            return {}
        return {"name": row[0], "money": float(row[1])}

    @_absorb(list)
    def get_accounts(self) -> List[Account]:
        return self._fetch_accounts(self._sql.select_all)

    @_absorb(list)
    def load_top_accounts(self, size: int) -> List[Account]:
        if size <= 0:
            return []
        return self._fetch_accounts(self._sql.select_top, (int(size),))

    @_absorb(lambda: None)
    def save_account(self, name: str, uuid: Optional[str], money: float) -> None:
        by_uuid = uuid is not None
        updated = self._run(
            self._sql.update_account(by_uuid),
            (float(money), name, uuid if by_uuid else name),
        )
        if updated == 0:
            self._run(self._sql.insert_account, (name, uuid, float(money)))

    @_absorb(lambda: None)
    def remove_account(self, name: str, uuid: Optional[str]) -> None:
        by_uuid = uuid is not None
        self._run(self._sql.delete_account(by_uuid), (uuid if by_uuid else name,))

    @_absorb(lambda: None)
    def remove_all_accounts(self) -> None:
        self._run(self._sql.delete_all)

    @_absorb(lambda: None)
    def clean(self) -> None:
        sql = self._sql.select_by_money
        with closing(self._execute(sql, (float(self._default_balance),))) as cur:
            candidates = [row[0] for row in cur.fetchall()]

        stale = [name for name in candidates if not self._is_active(name)]
        if not stale:
            return

        money = float(self._default_balance)
        for start in range(0, len(stale), DELETE_BATCH_SIZE):
            batch = stale[start:start + DELETE_BATCH_SIZE]
            self._run(self._sql.delete_names(len(batch)), [money, *batch])
        logger.info("%s: removed %d inactive default-balance accounts", self.name, len(stale))

    def close(self) -> None:
        with self._lock:
            probe, self._probe = self._probe, None
            if probe is not None:
                probe.cancel()
            self._discard_connection()
