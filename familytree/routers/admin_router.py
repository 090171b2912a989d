import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from familytree.auth import require_admin
from familytree.core.audit import client_ip, log_audit
from familytree.core.people import (
    build_person,
    generation_or_409,
    get_person_or_404,
    require_names,
    validate_parent_links,
)
from familytree.database import get_db
from familytree.models.audit_log import AuditLog
from familytree.models.enums import AuditAction, ProfileStatus
from familytree.models.person import Person
from familytree.models.user import User
from familytree.schemas.admin_schema import (
    AuditLogPage,
    PendingProfileOut,
    PersonRegistrationOut,
    ProfileDecisionOut,
    RejectProfileRequest,
    StatsOut,
    UserPage,
    UserStatusOut,
    UserStatusRequest,
)
from familytree.schemas.person_schema import PersonCreate
from familytree.utils.pagination import paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])

RECENT_LOGIN_WINDOW = timedelta(days=7)


# ============================================================
# PROFILE APPROVAL
# ============================================================

@router.get("/profiles/pending", response_model=list[PendingProfileOut])
def list_pending_profiles(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return (
        db.query(Person)
        .options(
            joinedload(Person.user),
            joinedload(Person.biological_father),
            joinedload(Person.biological_mother),
        )
        .filter(Person.profile_status == ProfileStatus.PENDING.value)
        .order_by(Person.created_at.desc())
        .all()
    )


@router.post("/profiles/{person_id}/approve", response_model=ProfileDecisionOut)
def approve_profile(
    person_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    person = get_person_or_404(db, person_id)
    previous_status = person.profile_status

    person.profile_status = ProfileStatus.APPROVED.value
    person.rejection_reason = None
    person.updated_by = current_user.id
    db.commit()
    db.refresh(person)

    log_audit(
        db,
        current_user.id,
        AuditAction.UPDATE,
        "Person",
        person_id,
        person_id,
        {"action": "approved_profile", "previous_status": previous_status},
        client_ip(request),
    )

    # TODO: notify the profile owner once email delivery exists
    return {"message": "Profile approved successfully", "person": person}


@router.post("/profiles/{person_id}/reject", response_model=ProfileDecisionOut)
def reject_profile(
    person_id: str,
    payload: RejectProfileRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    reason = payload.reason.strip()
    if not reason:
        raise HTTPException(status_code=400, detail="Rejection reason is required")

    person = get_person_or_404(db, person_id)
    previous_status = person.profile_status

    person.profile_status = ProfileStatus.REJECTED.value
    person.rejection_reason = reason
    person.updated_by = current_user.id
    db.commit()
    db.refresh(person)

    log_audit(
        db,
        current_user.id,
        AuditAction.UPDATE,
        "Person",
        person_id,
        person_id,
        {"action": "rejected_profile", "reason": reason, "previous_status": previous_status},
        client_ip(request),
    )

    return {"message": "Profile rejected successfully", "person": person}


# ============================================================
# USER MANAGEMENT
# ============================================================

@router.get("/users", response_model=UserPage)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    search: str = "",
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    query = db.query(User).outerjoin(Person, User.person_id == Person.id)

    if search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            User.email.ilike(pattern),
            Person.first_name.ilike(pattern),
            Person.last_name.ilike(pattern),
        ))

    query = query.order_by(User.created_at.desc())
    users, pagination = paginate(query, page, limit)

    return {"users": users, "pagination": pagination}


@router.put("/users/{user_id}/status", response_model=UserStatusOut)
def update_user_status(
    user_id: str,
    payload: UserStatusRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.is_active = payload.is_active
    db.commit()
    db.refresh(user)

    verb = "activated" if payload.is_active else "deactivated"

    log_audit(
        db,
        current_user.id,
        AuditAction.UPDATE,
        "User",
        user_id,
        changes={"action": f"{verb}_user"},
        ip_address=client_ip(request),
    )

    return {"message": f"User {verb} successfully", "user": user}


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    email = user.email

    # the linked person stays in the tree
    db.delete(user)
    db.commit()

    logger.info("User %s deleted by %s", user_id, current_user.id)

    log_audit(
        db,
        current_user.id,
        AuditAction.DELETE,
        "User",
        user_id,
        changes={"action": "deleted_user", "email": email},
        ip_address=client_ip(request),
    )

    return {"message": "User deleted successfully"}


# ============================================================
# STATISTICS / AUDIT
# ============================================================

@router.get("/stats", response_model=StatsOut)
def get_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    def people_with(status: ProfileStatus) -> int:
        return db.query(Person).filter(Person.profile_status == status.value).count()

    since = datetime.utcnow() - RECENT_LOGIN_WINDOW

    return {
        "total_users": db.query(User).count(),
        "total_people": db.query(Person).count(),
        "pending_profiles": people_with(ProfileStatus.PENDING),
        "approved_profiles": people_with(ProfileStatus.APPROVED),
        "rejected_profiles": people_with(ProfileStatus.REJECTED),
        "draft_profiles": people_with(ProfileStatus.DRAFT),
        "recent_logins": db.query(User).filter(User.last_login_at >= since).count(),
    }


@router.get("/audit-logs", response_model=AuditLogPage)
def list_audit_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    query = (
        db.query(AuditLog)
        .options(joinedload(AuditLog.user))
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    )
    logs, pagination = paginate(query, page, limit)

    return {
        "logs": [
            {
                "id": log.id,
                "user_id": log.user_id,
                "user_email": log.user.email if log.user else None,
                "action": log.action,
                "entity_type": log.entity_type,
                "entity_id": log.entity_id,
                "person_id": log.person_id,
                "changes": log.changes,
                "ip_address": log.ip_address,
                "created_at": log.created_at,
            }
            for log in logs
        ],
        "pagination": pagination,
    }


# ============================================================
# MANUAL PERSON REGISTRATION
# ============================================================

@router.get("/register/generation-suggestion")
def generation_suggestion(
    biological_father_id: Optional[str] = None,
    biological_mother_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    suggested = generation_or_409(db, biological_father_id, biological_mother_id)
    return {"suggestedGeneration": suggested}


@router.post("/register/person", response_model=PersonRegistrationOut, status_code=201)
def register_person(
    payload: PersonCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    require_names(payload.first_name, payload.last_name)
    validate_parent_links(db, payload.model_dump())

    generation = generation_or_409(db, payload.biological_father_id, payload.biological_mother_id)

    # admin-created people skip the review queue
    person = build_person(
        payload,
        current_user.id,
        generation=generation,
        profile_status=ProfileStatus.APPROVED.value,
    )
    db.add(person)
    db.commit()
    db.refresh(person)

    log_audit(
        db,
        current_user.id,
        AuditAction.CREATE,
        "Person",
        person.id,
        person.id,
        {"action": "admin_manual_registration", "generation": generation},
        client_ip(request),
    )

    return {"person": person, "generation": generation}
