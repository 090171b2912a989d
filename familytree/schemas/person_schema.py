# familytree/schemas/person_schema.py
from pydantic import BaseModel, EmailStr, field_validator
from typing import Any, Optional, List
from datetime import date, datetime

from familytree.models.enums import ProfileStatus
from familytree.schemas.marriage_schema import SpouseIn
from familytree.schemas.pagination_schema import PaginationOut


# blank form values are stored as NULL
NULLABLE_TEXT_FIELDS = (
    "middle_name",
    "maiden_name",
    "gender",
    "email",
    "phone",
    "address",
    "city",
    "state",
    "country",
    "bio",
    "occupation",
    "profile_photo",
    "biological_father_id",
    "biological_mother_id",
    "adoptive_parent_id",
)


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class PersonBase(BaseModel):
    # Identity
    middle_name: Optional[str] = None
    maiden_name: Optional[str] = None
    nicknames: List[str] = []
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    is_deceased: bool = False
    date_of_death: Optional[date] = None

    # Contact & location
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    # Life & story
    bio: Optional[str] = None
    occupation: Optional[str] = None
    profile_photo: Optional[str] = None

    # Family
    biological_father_id: Optional[str] = None
    biological_mother_id: Optional[str] = None
    adoptive_parent_id: Optional[str] = None

    @field_validator(*NULLABLE_TEXT_FIELDS, mode="before")
    @classmethod
    def empty_as_null(cls, v: Any) -> Any:
        return blank_to_none(v)


class PersonCreate(PersonBase):
    first_name: str
    last_name: str


class PersonUpdate(BaseModel):
    """
    Partial update, only fields that were sent are applied.
    """
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    maiden_name: Optional[str] = None
    nicknames: Optional[List[str]] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    is_deceased: Optional[bool] = None
    date_of_death: Optional[date] = None

    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    bio: Optional[str] = None
    occupation: Optional[str] = None
    profile_photo: Optional[str] = None

    biological_father_id: Optional[str] = None
    biological_mother_id: Optional[str] = None
    adoptive_parent_id: Optional[str] = None

    @field_validator(*NULLABLE_TEXT_FIELDS, mode="before")
    @classmethod
    def empty_as_null(cls, v: Any) -> Any:
        return blank_to_none(v)


# --------------------------------------------------
# SELF-SERVICE PROFILE
# --------------------------------------------------
class StoryIn(BaseModel):
    title: str
    content: str
    story_date: Optional[date] = None


class ProfileUpsert(PersonCreate):
    # None keeps what is stored, a list replaces it
    spouses: Optional[List[SpouseIn]] = None
    stories: Optional[List[StoryIn]] = None

    # members may only save a draft or submit for review
    status: Optional[ProfileStatus] = None


# --------------------------------------------------
# OUTPUT
# --------------------------------------------------
class PersonSummary(BaseModel):
    id: str
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    profile_photo: Optional[str] = None

    class Config:
        from_attributes = True


class StoryOut(BaseModel):
    id: int
    title: str
    content: str
    story_date: Optional[date] = None
    author: Optional[str] = None

    class Config:
        from_attributes = True


class SpouseOut(BaseModel):
    marriage_id: int
    status: str
    marriage_date: Optional[date] = None
    marriage_place: Optional[str] = None
    spouse: PersonSummary


class PersonOut(PersonCreate):
    id: str
    profile_status: str
    rejection_reason: Optional[str] = None
    generation: Optional[int] = None

    # stored values are not re-validated on the way out
    email: Optional[str] = None

    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PersonDetailOut(PersonOut):
    biological_father: Optional[PersonSummary] = None
    biological_mother: Optional[PersonSummary] = None
    adoptive_parent: Optional[PersonSummary] = None
    children: List[PersonSummary] = []
    spouses: List[SpouseOut] = []
    stories: List[StoryOut] = []


class PersonListItem(BaseModel):
    id: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    date_of_birth: Optional[date] = None
    date_of_death: Optional[date] = None
    is_deceased: bool
    profile_photo: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None

    class Config:
        from_attributes = True


class PersonPage(BaseModel):
    people: List[PersonListItem]
    pagination: PaginationOut


class PersonSearchOut(BaseModel):
    id: str
    name: str
    first_name: str
    last_name: str
    birth_year: Optional[int] = None
    profile_photo: Optional[str] = None
    city: Optional[str] = None
    is_deceased: bool


class TreeNodeOut(BaseModel):
    id: str
    first_name: str
    last_name: str
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    is_deceased: bool
    profile_photo: Optional[str] = None
    generation: Optional[int] = None
    biological_father_id: Optional[str] = None
    biological_mother_id: Optional[str] = None
    adoptive_parent_id: Optional[str] = None
    spouse_ids: List[str] = []


class PersonGenerationOut(BaseModel):
    person_id: str
    generation: int
