"""Custom exceptions for the repository layer."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from pymongo.errors import (
    ConfigurationError,
    ConnectionFailure,
    DuplicateKeyError,
    OperationFailure,
    PyMongoError,
)

LOGGER = logging.getLogger(__name__)


class RepositoryError(RuntimeError):
    """Base exception raised when a repository operation fails."""


class StoreUnavailableError(RepositoryError):
    """Raised when the document store cannot be reached."""


class NotFoundRepositoryError(RepositoryError):
    """Raised when an expected document is missing."""


class WriteRejectedError(RepositoryError):
    """Raised when the store refuses a write (validation or constraint failure)."""


class DuplicateKeyRepositoryError(WriteRejectedError):
    """Raised when attempting to insert a document that violates a unique index."""


class ConstraintCreationFailedError(RepositoryError):
    """Raised when a unique index cannot be created, usually over existing duplicates."""


class InvalidPatternError(RepositoryError, ValueError):
    """Raised when a search pattern is not a valid regular expression."""


@contextmanager
def translate_store_errors(
    action: str,
    rejected: Optional[type[RepositoryError]] = None,
) -> Iterator[None]:
    """Re-raise driver errors from the wrapped block as repository errors.

    ``rejected`` is the error used when the server refuses the operation;
    reads leave it unset and surface refusals as a plain ``RepositoryError``.
    """

    try:
        yield
    except (ConnectionFailure, ConfigurationError) as exc:
        LOGGER.debug("Store unavailable during %s: %s", action, exc)
        raise StoreUnavailableError(f"{action}: document store unavailable") from exc
    except DuplicateKeyError as exc:
        LOGGER.debug("Duplicate key during %s: %s", action, exc)
        if rejected is WriteRejectedError:
            raise DuplicateKeyRepositoryError(f"{action}: duplicate key") from exc
        raise (rejected or RepositoryError)(f"{action}: duplicate key") from exc
    except OperationFailure as exc:
        LOGGER.debug("Operation failure during %s: %s", action, exc)
        raise (rejected or RepositoryError)(f"{action}: {exc}") from exc
    except PyMongoError as exc:
        LOGGER.debug("Driver error during %s: %s", action, exc)
        raise RepositoryError(f"{action}: {exc}") from exc


__all__ = [
    "ConstraintCreationFailedError",
    "DuplicateKeyRepositoryError",
    "InvalidPatternError",
    "NotFoundRepositoryError",
    "RepositoryError",
    "StoreUnavailableError",
    "WriteRejectedError",
    "translate_store_errors",
]
