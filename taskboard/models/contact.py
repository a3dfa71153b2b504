"""
Contact model
"""

import re
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator
from taskboard.config.constants import PALETTE_SIZE

# Two or more letter tokens separated by single spaces ("Anna Schmidt")
NAME_PATTERN = re.compile(r"^[^\W\d_]+(?:['-][^\W\d_]+)*(?: [^\W\d_]+(?:['-][^\W\d_]+)*)+$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_PATTERN = re.compile(r"^\+?[0-9\s\-]{7,15}$")


def generate_initials(name: str) -> str:
    """Upper-cased first letters of the first two name tokens ("anna maria x" -> "AM")"""
    return "".join(part[0].upper() for part in name.split()[:2])


def _check_name(value: str) -> str:
    value = " ".join(value.split())
    if not NAME_PATTERN.match(value):
        raise ValueError("name needs a first and a last name")
    return value


def _check_email(value: str) -> str:
    value = value.strip()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("email address is not valid")
    return value


def _check_telephone(value: str) -> str:
    value = value.strip()
    if not PHONE_PATTERN.match(value):
        raise ValueError("telephone number is not valid")
    return value


class Contact(BaseModel):
    """Contact as mirrored from the contacts collection"""

    id: str
    name: str = ""
    email: str = ""
    telephone: str = ""
    initials: str = ""
    color: Optional[int] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> "Contact":
        """Build a contact from a raw document, defaulting missing fields"""
        data = data or {}
        color = data.get("color")
        try:
            color = int(color) if color is not None and not isinstance(color, bool) else None
        except (TypeError, ValueError):
            color = None

        return cls(
            id=doc_id,
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            telephone=str(data.get("telephone") or ""),
            initials=str(data.get("initials") or ""),
            color=color,
        )


class ContactCreate(BaseModel):
    """Contact creation model"""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: str
    telephone: str = Field(alias="phone")
    color: Optional[int] = Field(None, ge=1, le=PALETTE_SIZE)

    @field_validator("name")
    @classmethod
    def name_valid(cls, value: str) -> str:
        return _check_name(value)

    @field_validator("email")
    @classmethod
    def email_valid(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("telephone")
    @classmethod
    def telephone_valid(cls, value: str) -> str:
        return _check_telephone(value)


class ContactUpdate(BaseModel):
    """Contact update model; initials change only when given explicitly"""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    telephone: Optional[str] = Field(None, alias="phone")
    initials: Optional[str] = None
    color: Optional[int] = Field(None, ge=1, le=PALETTE_SIZE)

    @field_validator("name")
    @classmethod
    def name_valid(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else _check_name(value)

    @field_validator("email")
    @classmethod
    def email_valid(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else _check_email(value)

    @field_validator("telephone")
    @classmethod
    def telephone_valid(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else _check_telephone(value)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)
