from abc import ABC, abstractmethod
from typing import Any, Callable

from lifelog.models.user import Identity


class _ServerTimestamp:
    """Sentinel replaced by the store with the write time."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()

AuthStateCallback = Callable[[Identity | None], None]
Unsubscribe = Callable[[], None]


class ProviderError(Exception):
    """Raised by provider adapters with a provider-neutral code."""

    def __init__(self, code: str | None, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class AuthProvider(ABC):
    """Narrow interface over the hosted authentication service."""

    @abstractmethod
    async def create_account(self, email: str, password: str, display_name: str | None = None) -> Identity:
        ...

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Identity:
        ...

    @abstractmethod
    async def sign_out(self) -> None:
        ...

    @abstractmethod
    async def send_password_reset(self, email: str) -> None:
        ...

    @abstractmethod
    async def send_verification_email(self, identity: Identity) -> None:
        ...

    @abstractmethod
    async def apply_verification_code(self, code: str) -> None:
        ...

    @abstractmethod
    async def lookup_sign_in_methods(self, email: str) -> list[str]:
        """Sign-in methods registered for an email; empty when no account exists."""
        ...

    @abstractmethod
    async def reload(self) -> Identity | None:
        """Fetch the current user from the provider."""
        ...

    @abstractmethod
    def on_auth_state_changed(self, callback: AuthStateCallback) -> Unsubscribe:
        """
        Register a callback fired with the current identity (or None) on every
        sign-in/sign-out. Returns the unsubscribe handle.
        """
        ...

    def access_token(self) -> str | None:
        return None


class DocumentStore(ABC):
    """
    Keyed documents grouped in collections.

    Filters are (field, op, value) tuples with op "==" or "!=".
    SERVER_TIMESTAMP values in written data are substituted by the store.
    """

    @abstractmethod
    async def get(self, collection: str, key: str) -> dict | None:
        ...

    @abstractmethod
    async def set(self, collection: str, key: str, data: dict, merge: bool = False) -> dict:
        ...

    @abstractmethod
    async def update(self, collection: str, key: str, data: dict) -> dict:
        """Partial update of an existing document; fails if it does not exist."""
        ...

    @abstractmethod
    async def add(self, collection: str, data: dict) -> dict:
        """Create a document with a generated id and return it (id included)."""
        ...

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: list[tuple[str, str, Any]] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        ...


class PushProvider(ABC):
    """Fire-and-forget push delivery."""

    @abstractmethod
    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: dict[str, str] | None = None,
        link: str | None = None,
    ) -> str:
        """Send one message; returns the provider message id."""
        ...
