from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime

from familytree.models.enums import Role


# ---------- requests ----------

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LinkPersonRequest(BaseModel):
    person_id: str


class RoleUpdateRequest(BaseModel):
    role: str


# ---------- responses ----------

class LinkedPerson(BaseModel):
    id: str
    first_name: str
    last_name: str
    profile_photo: Optional[str] = None

    class Config:
        from_attributes = True


class UserOut(BaseModel):
    id: str
    email: str
    role: Role
    person_id: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserWithPersonOut(UserOut):
    person: Optional[LinkedPerson] = None


class TokenResponse(BaseModel):
    user: UserOut
    access_token: str
    token_type: str = "bearer"
