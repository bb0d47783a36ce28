import re
from dataclasses import dataclass
from typing import Optional


_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass
class Account:
    """
    Domain representation of one player's balance.

    `uuid` is the stable player identifier when the host knows it; lookups
    fall back to `name` when it is absent. Instances handed out by a
    repository are detached copies: changing `money` here does nothing until
    the caller saves the account again.
    """

    name: str
    uuid: Optional[str]
    money: float


@dataclass(frozen=True)
class TableNames:
    """
    Table and column names used by the SQL repositories.

    Changing these after the schema has been created orphans the existing
    rows, so they are fixed for the lifetime of a repository.
    """

    accounts: str = "fe_accounts"
    version: str = "fe_version"
    name_column: str = "name"
    money_column: str = "money"
    uuid_column: str = "uuid"

    def __post_init__(self) -> None:
        # The names end up inside SQL text, so only plain identifiers pass.
        for field_name, value in vars(self).items():
            if not _IDENTIFIER.match(value or ""):
                raise ValueError(f"Invalid SQL identifier for {field_name}: {value!r}")
