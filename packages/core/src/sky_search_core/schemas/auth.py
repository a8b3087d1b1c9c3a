"""User and credential schemas for the local mock authentication layer."""

from __future__ import annotations

from .base import CamelModel


class User(CamelModel):
    id: str
    email: str
    first_name: str
    last_name: str


class AuthResponse(CamelModel):
    """Result of a successful register / login."""

    user: User
    token: str


class RegisterParams(CamelModel):
    email: str = ""
    password: str = ""
    first_name: str = ""
    last_name: str = ""


class LoginParams(CamelModel):
    email: str = ""
    password: str = ""
