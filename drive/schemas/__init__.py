"""Pydantic schemas for form input."""

from drive.schemas.auth import LoginForm, SignUpForm

__all__ = [
    "LoginForm",
    "SignUpForm",
]
