"""
Authentication and profile schemas.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from api.schemas.common import require_text
from core.storage import UserRecord
from services.text import is_valid_email


class UserOut(BaseModel):
    """Public view of a user; never includes password or answer."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    email: str
    phone: str
    address: str
    role: int = Field(..., description="0 = customer, 1 = admin")

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserOut":
        return cls(
            id=record.id,
            name=record.name,
            email=record.email,
            phone=record.phone,
            address=record.address,
            role=int(record.role),
        )


class RegisterRequest(BaseModel):
    name: Optional[str] = Field(default=None, validate_default=True)
    email: Optional[str] = Field(default=None, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)
    phone: Optional[str] = Field(default=None, validate_default=True)
    address: Optional[str] = Field(default=None, validate_default=True)
    answer: Optional[str] = Field(
        default=None,
        validate_default=True,
        description="Answer to the security question, used to reset the password",
    )

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return require_text(value, "Name is Required")

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value):
        email = require_text(value, "Email is Required")
        if not is_valid_email(email):
            raise ValueError("Invalid Email")
        return email

    @field_validator("password", mode="before")
    @classmethod
    def _password(cls, value):
        # Leading/trailing spaces are part of a password
        require_text(value, "Password is Required")
        return value

    @field_validator("phone", mode="before")
    @classmethod
    def _phone(cls, value):
        return require_text(value, "Phone no is Required")

    @field_validator("address", mode="before")
    @classmethod
    def _address(cls, value):
        return require_text(value, "Address is Required")

    @field_validator("answer", mode="before")
    @classmethod
    def _answer(cls, value):
        return require_text(value, "Answer is Required")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Jane Doe",
                    "email": "jane@example.com",
                    "password": "s3cret-pass",
                    "phone": "81234567",
                    "address": "1 Market Street",
                    "answer": "Football",
                }
            ]
        }
    }


class LoginRequest(BaseModel):
    email: Optional[str] = Field(default=None, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("email", "password", mode="before")
    @classmethod
    def _present(cls, value):
        require_text(value, "Invalid email or password")
        return value


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = Field(default=None, validate_default=True)
    answer: Optional[str] = Field(default=None, validate_default=True)
    new_password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, value):
        return require_text(value, "Email is required")

    @field_validator("answer", mode="before")
    @classmethod
    def _answer(cls, value):
        return require_text(value, "answer is required")

    @field_validator("new_password", mode="before")
    @classmethod
    def _new_password(cls, value):
        require_text(value, "New Password is required")
        return value


class ProfileUpdateRequest(BaseModel):
    """All fields optional; email cannot be changed."""

    name: Optional[str] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class RegisterResponse(BaseModel):
    success: bool = True
    message: str = "User Register Successfully"
    user: UserOut


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "login successfully"
    user: UserOut
    token: str


class ProfileResponse(BaseModel):
    success: bool = True
    message: str = "Profile Updated Successfully"
    updated_user: UserOut


class AuthCheckResponse(BaseModel):
    ok: bool = True
