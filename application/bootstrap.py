from __future__ import annotations

import logging
from typing import Callable, Optional

from application.config import Settings
from domain.repositories import AccountRepository
from infrastructure.db.connector import Connector
from infrastructure.db.postgres_connector import PostgresConnector
from infrastructure.db.sql_account_repository import SqlAccountRepository
from infrastructure.db.sqlite_connector import SqliteConnector
from infrastructure.scheduler import Scheduler


logger = logging.getLogger(__name__)


def build_connector(settings: Settings) -> Connector:
    if settings.database == "postgres":
        return PostgresConnector(dict(settings.db_options))
    return SqliteConnector(settings.data_dir)


def create_account_repository(
    settings: Settings,
    is_active: Callable[[str], bool],
    scheduler: Optional[Scheduler] = None,
) -> AccountRepository:
    """
    Build the repository described by `settings`.

    The repository is not initialised; callers decide when to run `init()`.
    """

    connector = build_connector(settings)
    logger.info("Using %s account storage", connector.name)
    return SqlAccountRepository(
        connector,
        is_active=is_active,
        default_balance=settings.default_holdings,
        names=settings.names,
        scheduler=scheduler,
        probe_interval=settings.probe_interval,
    )
