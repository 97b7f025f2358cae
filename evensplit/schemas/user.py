from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=6)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserOut(BaseModel):
    id: int
    email: str
    name: str
    display_name: str | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

class DisplayNameUpdate(BaseModel):
    display_name: str

    @field_validator("display_name")
    @classmethod
    def strip_and_check(cls, v: str) -> str:
        v = v.strip()
        if not 1 <= len(v) <= 50:
            raise ValueError("Display name must be between 1 and 50 characters")
        return v
