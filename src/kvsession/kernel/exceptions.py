"""Unified exception hierarchy for kvsession.

All package exceptions inherit from KVSessionException so callers can catch
one type at the session-store boundary.

Categories:
- KeyNotFoundError: the key-value store has no live value for a key
- StoreException: any other key-value store failure (I/O, locking, closed store)
- SerializationException: session payload could not be encoded or decoded
- ConfigurationException: invalid configuration values
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class KVSessionException(Exception):
    """Base exception for all kvsession errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "STORE_FAILURE").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Store Exceptions
# =============================================================================


class KeyNotFoundError(KVSessionException):
    """The key does not exist in the store, or its TTL has elapsed."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Key not found: '{key}'", code="KEY_NOT_FOUND", context={"key": key})
        self.key = key


class StoreException(KVSessionException):
    """Key-value store failure other than a missing key."""

    def __init__(
        self,
        message: str,
        code: str | None = "STORE_FAILURE",
        context: dict | None = None,
    ) -> None:
        super().__init__(message, code=code, context=context)


class StoreOpenError(StoreException):
    """The store could not be opened at the requested location."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Cannot open key-value store at '{path}': {reason}",
            code="STORE_OPEN_FAILED",
            context={"path": path},
        )


class StoreClosedError(StoreException):
    """An operation was attempted on a store that has been closed."""

    def __init__(self) -> None:
        super().__init__("Key-value store is closed", code="STORE_CLOSED")


# =============================================================================
# Payload Exceptions
# =============================================================================


class SerializationException(KVSessionException):
    """Session payload could not be encoded or decoded."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="SERIALIZATION_FAILURE", context=context)


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationException(KVSessionException):
    """Configuration values are missing or invalid."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, code="CONFIG_INVALID", context=context)
