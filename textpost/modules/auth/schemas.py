from pydantic import BaseModel, EmailStr, Field, StringConstraints, field_validator
from typing import Annotated, Optional

from textpost.modules.auth.passwords import MAX_PASSWORD_BYTES

Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]


class CredentialsRequest(BaseModel):
    username: Username
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class RegisterRequest(CredentialsRequest):
    pass


class LoginRequest(CredentialsRequest):
    pass


class RegisterResponse(BaseModel):
    success: bool = True


class LoginResponse(BaseModel):
    success: bool = True
    username: str


class EmailCredentialsRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class SignupResponse(BaseModel):
    user_id: str
    email: str
    message: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    provider: str


class OAuthUrlResponse(BaseModel):
    provider: str
    url: str
