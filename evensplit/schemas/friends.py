from datetime import datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict, EmailStr

class FriendRequestCreate(BaseModel):
    email: EmailStr

class FriendRespond(BaseModel):
    response: Literal["accepted", "declined"]

class FriendshipOut(BaseModel):
    id: int
    user_id: int
    friend_id: int
    status: str
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

class FriendOut(BaseModel):
    friendship_id: int
    user_id: int
    name: str
    email: str
