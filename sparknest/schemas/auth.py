from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from ..core.security import MAX_PASSWORD_BYTES, password_too_long


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SignupRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if password_too_long(value):
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class VerifyOTPRequest(CamelModel):
    email: EmailStr
    code: str = Field(min_length=6, max_length=6, pattern=r"^\d{6}$")
    # Only consulted for records issued without a stored pending profile
    user_data: Optional[SignupRequest] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserPublic(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    email: str
    first_name: str
    last_name: str


class MessageResponse(BaseModel):
    message: str


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserPublic
