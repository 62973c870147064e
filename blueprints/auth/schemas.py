from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

PIN_PATTERN = r"^\d{4}$"

class RegisterIn(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    pin: str = Field(pattern=PIN_PATTERN)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str):
        if not v.strip():
            raise ValueError("name_required")
        return v.strip()

class ProfileIn(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    pin: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str):
        if not v.strip():
            raise ValueError("name_required")
        return v.strip()

    @field_validator("pin")
    @classmethod
    def _pin_digits(cls, v: Optional[str]):
        # empty string from the form means "keep the current PIN"
        if v is None or v == "":
            return None
        if len(v) != 4 or not v.isdigit():
            raise ValueError("pin_must_be_4_digits")
        return v
