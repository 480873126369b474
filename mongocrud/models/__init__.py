"""Record models stored through the repository layer."""

from .identifiers import PyObjectId, to_object_id
from .record import ID_FIELD, Record
from .user import UserRecord

__all__ = ["ID_FIELD", "PyObjectId", "Record", "UserRecord", "to_object_id"]
