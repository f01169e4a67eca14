from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _clean_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Enter a valid email address")
    return value


class RegisterForm(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=8, max_length=128)  # never stripped

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _clean_email(value)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        value = value.strip()
        if not USERNAME_PATTERN.match(value):
            raise ValueError("Username may contain letters, digits, '.', '_' and '-' only")
        return value


class LoginForm(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=128)  # No strength check on login
    remember_me: bool = False

    @field_validator("email")
    @classmethod
    def strip_email(cls, value: str) -> str:
        return value.strip().lower()
