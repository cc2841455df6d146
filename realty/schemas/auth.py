"""
Form schemas for sign-in, registration and password recovery.
"""

from pydantic import EmailStr, Field, ValidationInfo, field_validator

from realty.models.user import MIN_PASSWORD_LENGTH
from realty.schemas.forms import FormSchema


def _normalize_email(v: str) -> str:
    return v.lower().strip()


class LoginForm(FormSchema):
    email: EmailStr
    password: str = Field(..., min_length=1)

    error_messages = {
        "email": "A valid email is required",
        "password": "Password is required",
    }

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class RegisterForm(FormSchema):
    name: str = Field(..., min_length=1, max_length=60)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=72)
    repeat_password: str

    error_messages = {
        "name": "Name is required",
        "email": "Email is not valid",
        "password": f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        "repeat_password": "Passwords do not match",
    }

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)

    @field_validator("repeat_password")
    @classmethod
    def passwords_match(cls, v, info: ValidationInfo):
        if v != info.data.get("password"):
            raise ValueError("Passwords do not match")
        return v


class ForgotPasswordForm(FormSchema):
    email: EmailStr

    error_messages = {"email": "Email is not valid"}

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class ResetPasswordForm(FormSchema):
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=72)
    repeat_password: str

    error_messages = {
        "password": f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        "repeat_password": "Passwords do not match",
    }

    @field_validator("repeat_password")
    @classmethod
    def passwords_match(cls, v, info: ValidationInfo):
        if v != info.data.get("password"):
            raise ValueError("Passwords do not match")
        return v
