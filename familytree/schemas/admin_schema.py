from pydantic import BaseModel, StrictBool
from typing import Optional, Any, List
from datetime import datetime

from familytree.schemas.pagination_schema import PaginationOut
from familytree.schemas.person_schema import PersonOut, PersonSummary
from familytree.schemas.user_schema import UserOut, UserWithPersonOut


# --------------------------------------------------
# PROFILE APPROVAL
# --------------------------------------------------
class RejectProfileRequest(BaseModel):
    reason: str


class PendingProfileOut(PersonOut):
    user: Optional[UserOut] = None
    biological_father: Optional[PersonSummary] = None
    biological_mother: Optional[PersonSummary] = None


class ProfileDecisionOut(BaseModel):
    message: str
    person: PersonOut


# --------------------------------------------------
# USERS
# --------------------------------------------------
class UserStatusRequest(BaseModel):
    is_active: StrictBool


class UserStatusOut(BaseModel):
    message: str
    user: UserOut


class UserPage(BaseModel):
    users: List[UserWithPersonOut]
    pagination: PaginationOut


# --------------------------------------------------
# STATS / AUDIT
# --------------------------------------------------
class StatsOut(BaseModel):
    total_users: int
    total_people: int
    pending_profiles: int
    approved_profiles: int
    rejected_profiles: int
    draft_profiles: int
    recent_logins: int


class AuditLogOut(BaseModel):
    id: int
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    action: str
    entity_type: str
    entity_id: str
    person_id: Optional[str] = None
    changes: Optional[Any] = None
    ip_address: Optional[str] = None
    created_at: datetime


class AuditLogPage(BaseModel):
    logs: List[AuditLogOut]
    pagination: PaginationOut


# --------------------------------------------------
# MANUAL REGISTRATION
# --------------------------------------------------
class PersonRegistrationOut(BaseModel):
    person: PersonOut
    generation: int
