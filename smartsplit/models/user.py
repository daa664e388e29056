from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime
from typing import Optional

from smartsplit.models.base import MongoModel

class UserBase(BaseModel):
    """Base user schema."""
    username: str = Field(..., min_length=2, max_length=50)
    email: EmailStr

class UserCreate(UserBase):
    """User creation schema."""
    password: str = Field(..., min_length=8, max_length=72)

class UserResponse(BaseModel):
    """User response schema."""
    id: str
    username: str
    email: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True
    )

class UserInDB(MongoModel):
    """User database schema."""
    username: str
    email: str
    hashed_password: str
    is_deleted: bool = False

    def to_response(self) -> UserResponse:
        return UserResponse(
            id=str(self.id),
            username=self.username,
            email=self.email,
            created_at=self.created_at
        )
