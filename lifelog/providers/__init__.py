from lifelog.providers.base import (
    SERVER_TIMESTAMP,
    AuthProvider,
    DocumentStore,
    ProviderError,
    PushProvider,
)


__all__ = [
    "SERVER_TIMESTAMP",
    "AuthProvider",
    "DocumentStore",
    "ProviderError",
    "PushProvider",
]
