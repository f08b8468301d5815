import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field

from app.models.columns import timestamp_column, utcnow


class Account(SQLModel, table=True):
    """
    An identity-provider account.

    Rows are created the first time a verified identity reaches the API
    (see ``app.services.accounts``); every other table hangs off ``id``.
    """

    __tablename__ = "accounts"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    provider_uid: str = Field(unique=True, index=True)
    email: str | None = Field(default=None, index=True)
    user_metadata: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
