"""Pydantic schemas for the sign-up and login forms."""

from pydantic import BaseModel


class SignUpForm(BaseModel):
    """Form model for user registration."""
    username: str = ""
    password: str = ""


class LoginForm(BaseModel):
    """Form model for user login."""
    username: str = ""
    password: str = ""
