from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

from domain.models import TableNames
from infrastructure.db.postgres_connector import PostgresConnector
from infrastructure.db.sqlite_connector import SqliteConnector
from infrastructure.db.sql_account_repository import DEFAULT_PROBE_INTERVAL


BACKENDS = {
    "sqlite": SqliteConnector,
    "postgres": PostgresConnector,
}


@dataclass(frozen=True)
class Settings:
    """
    Everything needed to build an account repository.

    `db_options` holds backend specific keys (host, port, ...) already
    merged with the backend's defaults.
    """

    database: str = "sqlite"
    data_dir: str = "data"
    default_holdings: float = 0.0
    names: TableNames = field(default_factory=TableNames)
    probe_interval: float = DEFAULT_PROBE_INTERVAL
    db_options: Dict[str, str] = field(default_factory=dict)
    log_level: str = "INFO"


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}") from None


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Read settings from the environment.

    When `env` is omitted a `.env` file in the working directory is loaded
    first (existing variables win) and `os.environ` is used.
    """

    if env is None:
        load_dotenv()
        env = os.environ

    database = env.get("FE_DATABASE", "sqlite").strip().lower()
    if database not in BACKENDS:
        raise ValueError(
            f"Unknown FE_DATABASE {database!r}; expected one of {', '.join(sorted(BACKENDS))}"
        )

    defaults = TableNames()
    names = TableNames(
        accounts=env.get("FE_ACCOUNTS_TABLE", defaults.accounts),
        version=env.get("FE_VERSION_TABLE", defaults.version),
        name_column=env.get("FE_COLUMN_NAME", defaults.name_column),
        money_column=env.get("FE_COLUMN_MONEY", defaults.money_column),
        uuid_column=env.get("FE_COLUMN_UUID", defaults.uuid_column),
    )

    db_options = {
        key: env.get(f"FE_DB_{key.upper()}", default)
        for key, default in BACKENDS[database].config_defaults().items()
    }

    probe_interval = _float(env, "FE_PROBE_INTERVAL", DEFAULT_PROBE_INTERVAL)
    if probe_interval <= 0:
        raise ValueError("FE_PROBE_INTERVAL must be greater than zero.")

    return Settings(
        database=database,
        data_dir=env.get("FE_DATA_DIR", "data"),
        default_holdings=_float(env, "FE_DEFAULT_HOLDINGS", 0.0),
        names=names,
        probe_interval=probe_interval,
        db_options=db_options,
        log_level=env.get("FE_LOG_LEVEL", "INFO").upper(),
    )
