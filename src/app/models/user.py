from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """
    In-memory user record.

    Instances are immutable: the store replaces a record with a new instance on
    update instead of mutating it, so a failed update can never leave a
    half-modified record behind.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    name: str
    email: str
    age: int
    # Exposed as `createdAt` in JSON; set once by the store on creation
    created_at: datetime = Field(alias="createdAt")

    def __repr__(self) -> str:
        # Helpful for debugging/logging
        return f"<User(id={self.id!r}, name={self.name!r}, email={self.email!r})>"
