from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from familytree.auth import get_current_user, require_roles
from familytree.core.audit import client_ip, log_audit
from familytree.core.person_permissions import can_modify_person
from familytree.database import get_db
from familytree.models.enums import AuditAction, Role
from familytree.models.marriage import Marriage
from familytree.models.person import Person
from familytree.models.user import User
from familytree.schemas.marriage_schema import MarriageCreate, MarriageOut

router = APIRouter(prefix="/api/marriages", tags=["Marriages"])


def _can_modify_either(db: Session, user: User, spouse1_id: str, spouse2_id: str) -> bool:
    return any(
        can_modify_person(db, user.id, user.role, user.person_id, spouse_id)
        for spouse_id in (spouse1_id, spouse2_id)
    )


def _forbid():
    raise HTTPException(
        status_code=403,
        detail="You do not have permission to modify this person",
    )


# --------------------------------------------------
# CREATE MARRIAGE
# --------------------------------------------------
@router.post("", response_model=MarriageOut, status_code=201)
@router.post("/", response_model=MarriageOut, status_code=201)
def create_marriage(
    payload: MarriageCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.MEMBER, Role.ADMIN)),
):
    if payload.spouse1_id == payload.spouse2_id:
        raise HTTPException(400, "A person cannot marry themselves")

    found = db.query(Person.id).filter(
        Person.id.in_([payload.spouse1_id, payload.spouse2_id])
    ).count()
    if found != 2:
        raise HTTPException(404, "Spouse not found")

    if not _can_modify_either(db, current_user, payload.spouse1_id, payload.spouse2_id):
        _forbid()

    # same couple in either slot order
    existing = db.query(Marriage).filter(
        or_(
            and_(Marriage.spouse1_id == payload.spouse1_id, Marriage.spouse2_id == payload.spouse2_id),
            and_(Marriage.spouse1_id == payload.spouse2_id, Marriage.spouse2_id == payload.spouse1_id),
        )
    ).first()
    if existing:
        raise HTTPException(400, "Marriage already exists")

    marriage = Marriage(
        spouse1_id=payload.spouse1_id,
        spouse2_id=payload.spouse2_id,
        marriage_date=payload.marriage_date,
        marriage_place=payload.marriage_place,
        status=payload.status.value,
    )
    db.add(marriage)
    db.commit()
    db.refresh(marriage)

    log_audit(
        db,
        current_user.id,
        AuditAction.CREATE,
        "Marriage",
        marriage.id,
        changes={"marriage": MarriageOut.model_validate(marriage).model_dump()},
        ip_address=client_ip(request),
    )

    return marriage


# --------------------------------------------------
# DELETE MARRIAGE
# --------------------------------------------------
@router.delete("/{marriage_id}")
def delete_marriage(
    marriage_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    marriage = db.query(Marriage).filter(Marriage.id == marriage_id).first()
    if not marriage:
        raise HTTPException(404, "Marriage not found")

    if not _can_modify_either(db, current_user, marriage.spouse1_id, marriage.spouse2_id):
        _forbid()

    snapshot = MarriageOut.model_validate(marriage).model_dump()
    db.delete(marriage)
    db.commit()

    log_audit(
        db,
        current_user.id,
        AuditAction.DELETE,
        "Marriage",
        marriage_id,
        changes={"deleted": snapshot},
        ip_address=client_ip(request),
    )

    return {"message": "Marriage deleted successfully"}
