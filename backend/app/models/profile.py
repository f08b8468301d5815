import uuid
from datetime import datetime
from sqlmodel import SQLModel, Field

from app.models.columns import timestamp_column, utcnow


class Profile(SQLModel, table=True):
    """Public identity of an account. Exactly one per account."""

    __tablename__ = "profiles"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        foreign_key="accounts.id",
        ondelete="CASCADE",
        unique=True,
        index=True,
    )
    full_name: str | None = Field(default=None)
    avatar_url: str | None = Field(default=None)
    role: str = Field(default="member")
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
