from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict
from pydantic_extra_types.phone_numbers import PhoneNumberValidator
from sqlmodel import Field, SQLModel

# stored as E.164, numbers without a country code are read as Indian numbers
CampusPhoneNumber = Annotated[
    str, PhoneNumberValidator(default_region="IN", number_format="E164")
]


class ProfileFields(SQLModel):
    full_name: Optional[str] = Field(default=None, max_length=255)
    student_id: Optional[str] = Field(default=None, max_length=64)
    phone_number: Optional[str] = Field(default=None, max_length=32)
    hostel_details: Optional[str] = Field(default=None, max_length=255)


class UserBase(ProfileFields):
    email: str = Field(unique=True, index=True, max_length=255)


class RegisterFormRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    full_name: str = Field(min_length=1, max_length=255)
    student_id: Optional[str] = Field(default=None, max_length=64)
    phone_number: Optional[CampusPhoneNumber] = None
    hostel_details: Optional[str] = Field(default=None, max_length=255)


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    student_id: Optional[str] = Field(default=None, max_length=64)
    phone_number: Optional[CampusPhoneNumber] = None
    hostel_details: Optional[str] = Field(default=None, max_length=255)

    model_config = {
        "extra": "forbid",
        "json_schema_extra": {
            "example": {
                "full_name": "Priya Singh",
                "student_id": "R190123",
                "phone_number": "+919876543210",
                "hostel_details": "Hostel 2, Room 114",
            }
        },
    }


class ProfileRead(UserBase):
    id: str
    created_at: datetime


# what other students see on a seller's profile
class PublicProfile(SQLModel):
    id: str
    full_name: Optional[str] = None
    hostel_details: Optional[str] = None
    active_listings: int = 0
