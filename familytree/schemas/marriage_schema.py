from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime

from familytree.models.enums import MarriageStatus


# --------------------------------------------------
# SPOUSE ENTRY (inside a self-service profile)
# --------------------------------------------------
class SpouseIn(BaseModel):
    spouse_id: str
    marriage_date: Optional[date] = None
    status: MarriageStatus = MarriageStatus.MARRIED


# --------------------------------------------------
# CREATE MARRIAGE
# --------------------------------------------------
class MarriageCreate(BaseModel):
    spouse1_id: str
    spouse2_id: str
    marriage_date: Optional[date] = None
    marriage_place: Optional[str] = None
    status: MarriageStatus = MarriageStatus.MARRIED


class MarriageOut(BaseModel):
    id: int
    spouse1_id: str
    spouse2_id: str
    status: str
    marriage_date: Optional[date] = None
    marriage_place: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
