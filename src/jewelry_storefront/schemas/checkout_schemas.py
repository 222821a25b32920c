from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class CheckoutRequest(BaseModel):
    """Contact and shipping form submitted on /checkout"""
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: str = Field(min_length=5, max_length=30)
    address: str = Field(min_length=1, max_length=300)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    zip_code: str = Field(min_length=1, max_length=20)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("phone")
    @classmethod
    def phone_has_digits(cls, v):
        if sum(ch.isdigit() for ch in v) < 5:
            raise ValueError("Phone number must contain at least 5 digits")
        return v
