from pydantic import BaseModel, EmailStr, Field, field_validator
from synergysphere.utils.sanitization import sanitize_string


class UserBase(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    full_name: str | None = None

    @field_validator("username", "full_name", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    username: str | None = None
    user_id: int | None = None


class UserResponse(UserBase):
    user_id: int

    class Config:
        from_attributes = True
