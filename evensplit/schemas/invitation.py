from datetime import datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict, EmailStr

class InvitationCreate(BaseModel):
    invited_user_id: int
    message: str | None = None

class InvitationByEmail(BaseModel):
    email: EmailStr
    message: str | None = None

class InvitationRespond(BaseModel):
    response: Literal["accepted", "declined"]

class InvitationOut(BaseModel):
    id: int
    group_id: int
    invited_user_id: int
    invited_by_user_id: int
    message: str | None = None
    status: str
    created_at: datetime | None = None
    expires_at: datetime | None = None
    responded_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

class MyInvitationOut(InvitationOut):
    group_name: str
