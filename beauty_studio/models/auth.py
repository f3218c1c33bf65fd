from typing import Literal

from pydantic import BaseModel


class LoginRequest(BaseModel):
    email: str
    password: str


class AdminUser(BaseModel):
    id: str
    name: str
    email: str
    role: Literal["admin", "user"] = "admin"


class LoginResponse(BaseModel):
    success: bool = True
    user: AdminUser
    token: str


class CurrentUserResponse(BaseModel):
    success: bool = True
    user: AdminUser
