import uuid
from datetime import datetime
from typing import Any
from pydantic import BaseModel


class ProfileCreate(BaseModel):
    user_id: uuid.UUID | None = None  # Defaults to the caller
    full_name: str | None = None
    avatar_url: str | None = None


class ProfileUpdate(BaseModel):
    full_name: str | None = None
    avatar_url: str | None = None


class ProfileRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    full_name: str | None
    avatar_url: str | None
    role: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AccountRead(BaseModel):
    id: uuid.UUID
    provider_uid: str
    email: str | None
    user_metadata: dict[str, Any]
    created_at: datetime

    model_config = {"from_attributes": True}
