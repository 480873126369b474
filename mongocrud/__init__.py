"""Typed CRUD helpers over a MongoDB database."""

from .repositories import (
    ConstraintCreationFailedError,
    DocumentRepository,
    DuplicateKeyRepositoryError,
    InvalidPatternError,
    NotFoundRepositoryError,
    RepositoryError,
    StoreUnavailableError,
    WriteRejectedError,
)
from .models import Record, UserRecord

__version__ = "0.1.0"

__all__ = [
    "ConstraintCreationFailedError",
    "DocumentRepository",
    "DuplicateKeyRepositoryError",
    "InvalidPatternError",
    "NotFoundRepositoryError",
    "Record",
    "RepositoryError",
    "StoreUnavailableError",
    "UserRecord",
    "WriteRejectedError",
]
