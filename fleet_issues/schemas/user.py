from typing import List, Optional
from uuid import UUID

from pydantic import EmailStr, Field, model_validator

from fleet_issues.models.enums import UserRole
from fleet_issues.schemas.base import CamelModel


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class SessionUser(CamelModel):
    id: UUID
    email: str
    role: UserRole


class LoginResponse(CamelModel):
    token: str
    user: SessionUser


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class MessageResponse(CamelModel):
    ok: bool = True
    message: Optional[str] = None


# Properties to return to the UI
class MeResponse(CamelModel):
    id: UUID
    email: str
    role: UserRole
    assigned_vessel_ids: List[UUID] = []


class CrewMemberResponse(CamelModel):
    id: UUID
    email: str
