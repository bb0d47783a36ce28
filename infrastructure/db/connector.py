from __future__ import annotations

from typing import Any, Dict, Protocol, Tuple, Type


class Connector(Protocol):
    """
    Engine-specific half of a SQL account repository.

    `SqlAccountRepository` implements every storage operation with generic
    SQL; a connector only knows how to open a connection to its engine and
    which dialect details differ:

    - `placeholder`: DB-API parameter marker (`?` or `%s`).
    - `double_type`: column type used for balances.
    - `errors`: driver exception classes the repository must absorb.
    """

    name: str
    supports_modification: bool
    placeholder: str
    double_type: str
    errors: Tuple[Type[BaseException], ...]

    def connect(self) -> Any:
        """
        Open a new auto-committing DB-API connection.

        Raises `StorageUnavailable` if the engine cannot be reached.
        """

        ...

    def is_closed(self, connection: Any) -> bool:
        ...

    def is_disconnect(self, error: BaseException) -> bool:
        """Whether `error` means the connection itself is unusable."""

        ...

    def config_defaults(self) -> Dict[str, str]:
        """Backend specific settings and their default values."""

        ...
