from pydantic import BaseModel, StringConstraints
from typing import Annotated, Optional
from datetime import datetime

# Blank strips to "" and falls through to the "username is required" check
AuthorName = Annotated[str, StringConstraints(strip_whitespace=True, max_length=64)]
Content = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=5000)]


class PostCreate(BaseModel):
    username: Optional[AuthorName] = None  # ignored when a bearer token is sent
    content: Content


class PostUpdate(BaseModel):
    username: Optional[AuthorName] = None
    content: Content


class PostOwner(BaseModel):
    username: Optional[AuthorName] = None


class PostResponse(BaseModel):
    id: int
    username: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class DeleteResponse(BaseModel):
    success: bool = True
