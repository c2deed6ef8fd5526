from datetime import datetime
from typing import Optional
from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from .auth import CamelModel, UserPublic


class NoteCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)


class NoteUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1)


class NoteResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    title: str
    content: str
    user_id: str
    created_at: datetime
    updated_at: datetime


class ProfileResponse(UserPublic):
    created_at: Optional[datetime] = None
