from typing import Optional

from pydantic import Field

from .record import Record


class UserRecord(Record):
    """Account document stored in the ``Users`` collection."""

    user_name: str = Field(alias="UserName")
    name: Optional[str] = Field(default=None, alias="Name")
    password: Optional[str] = Field(default=None, alias="Password")
    user_role: Optional[str] = Field(default=None, alias="UserRole")


__all__ = ["UserRecord"]
