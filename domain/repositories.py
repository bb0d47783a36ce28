from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from .models import Account


class AccountRepository(Protocol):
    """
    Abstraction over balance persistence.

    Implementations are responsible for:
    - Mapping between database rows and the `Account` domain model.
    - Hiding any SQL / driver details from the host.
    - Never raising storage failures to the caller: failures are logged and
      the operation returns its benign value instead.

    Accounts are matched by `uuid` when one is given and by `name`
    otherwise, ignoring case in both cases.
    """

    @property
    def name(self) -> str:
        """Human readable backend name, used in diagnostics."""

        ...

    @property
    def supports_modification(self) -> bool:
        """Whether the engine can alter existing tables in place."""

        ...

    def init(self) -> bool:
        """
        Create the tables if needed and report whether the repository ended
        up connected. Safe to call more than once.
        """

        ...

    def check_connection(self) -> bool:
        """Make sure a live connection exists, reconnecting once if needed."""

        ...

    def get_version(self) -> int:
        """Return the stored schema version, or 0 when it cannot be read."""

        ...

    def set_version(self, version: int) -> None:
        """
        Replace the stored schema version.

        Best effort: the old row is deleted before the new one is written,
        so a failure in between leaves no version at all.
        """

        ...

    def load_account_data(
        self,
        name: str,
        uuid: Optional[str],
    ) -> Optional[Dict[str, Any]]:
        """
        Return `{"money": ..., "name": ...}` for one account.

        An unknown account yields an empty dict; `None` means the storage
        could not be reached.
        """

        ...

    def get_accounts(self) -> List[Account]:
        """Return every stored account, in the engine's natural order."""

        ...

    def load_top_accounts(self, size: int) -> List[Account]:
        """
        Return at most `size` accounts ordered by balance, richest first.

        The order of accounts with equal balances is whatever the engine
        returns and must not be relied upon.
        """

        ...

    def save_account(self, name: str, uuid: Optional[str], money: float) -> None:
        """Store the balance and current name, creating the row if needed."""

        ...

    def remove_account(self, name: str, uuid: Optional[str]) -> None:
        """Delete one account. Unknown accounts are ignored."""

        ...

    def remove_all_accounts(self) -> None:
        ...

    def clean(self) -> None:
        """
        Delete accounts that still hold the default balance and whose player
        is not currently active on the host.
        """

        ...

    def close(self) -> None:
        """Release the connection. Never raises."""

        ...
