from datetime import datetime
from typing import List, Literal
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    description: str | None = None

class GroupUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    description: str | None = None

class GroupOut(BaseModel):
    id: int
    uuid: UUID
    name: str
    description: str | None = None
    created_by: int
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

class MyGroupOut(GroupOut):
    role: str
    joined_at: datetime | None = None

class AddMemberIn(BaseModel):
    user_id: int
    role: Literal["admin", "member"] = "member"

class GroupMemberOut(BaseModel):
    id: int
    group_id: int
    user_id: int
    role: str
    joined_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

class MemberDetailOut(GroupMemberOut):
    name: str
    email: str

class GroupDetailOut(BaseModel):
    group: GroupOut
    members: List[MemberDetailOut]

class FriendCandidateOut(BaseModel):
    user_id: int
    name: str
    email: str
