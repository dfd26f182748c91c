"""Identity model - principals issued by the external identity provider."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.scopegate.models.base import utc_now


class Identity(SQLModel, table=True):
    """Acting principal. Referenced by memberships, never owned by them."""

    __tablename__ = "identities"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    is_active: bool = Field(default=True)
    is_superuser: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
