"""Repository layer to abstract MongoDB access patterns."""

from .exceptions import (
    ConstraintCreationFailedError,
    DuplicateKeyRepositoryError,
    InvalidPatternError,
    NotFoundRepositoryError,
    RepositoryError,
    StoreUnavailableError,
    WriteRejectedError,
)
from .document import DocumentRepository

__all__ = [
    "ConstraintCreationFailedError",
    "DocumentRepository",
    "DuplicateKeyRepositoryError",
    "InvalidPatternError",
    "NotFoundRepositoryError",
    "RepositoryError",
    "StoreUnavailableError",
    "WriteRejectedError",
]
