from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from familytree.database import get_db
from familytree.auth import (
    MIN_PASSWORD_LENGTH,
    register_user,
    authenticate_user,
    create_access_token,
    get_current_user,
    require_admin,
)
from familytree.core.audit import client_ip, log_audit
from familytree.models.enums import AuditAction, Role
from familytree.models.person import Person
from familytree.models.user import User
from familytree.schemas.user_schema import (
    LinkPersonRequest,
    LoginRequest,
    RegisterRequest,
    RoleUpdateRequest,
    TokenResponse,
    UserOut,
    UserWithPersonOut,
)


router = APIRouter(prefix="/api/auth", tags=["Authentication"])


# ----------------- REGISTER ------------------

@router.post("/register", response_model=TokenResponse, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail="Password must be at least 8 characters long",
        )

    # Self-registration is always GUEST; admins upgrade later
    try:
        user = register_user(db, email=payload.email, password=payload.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    token = create_access_token({"sub": user.id})

    return {
        "user": user,
        "access_token": token,
        "token_type": "bearer",
    }


# ------------------- LOGIN -------------------

@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, email=payload.email, password=payload.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    user.last_login_at = datetime.utcnow()
    db.commit()
    db.refresh(user)

    token = create_access_token({"sub": user.id})

    return {
        "user": user,
        "access_token": token,
        "token_type": "bearer",
    }


# -------------------- ME ---------------------

@router.get("/me", response_model=UserWithPersonOut)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user


# ---------------- LINK PERSON ----------------

@router.post("/link-person", response_model=UserWithPersonOut)
def link_person(
    payload: LinkPersonRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    person = db.query(Person).filter(Person.id == payload.person_id).first()
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")

    existing = db.query(User).filter(User.person_id == payload.person_id).first()
    if existing and existing.id != current_user.id:
        raise HTTPException(
            status_code=400,
            detail="This person is already linked to another user",
        )

    current_user.person_id = person.id
    db.commit()
    db.refresh(current_user)

    log_audit(
        db,
        current_user.id,
        AuditAction.UPDATE,
        "User",
        current_user.id,
        person.id,
        {"action": "linked_person", "person_id": person.id},
        client_ip(request),
    )

    return current_user


# --------------- CHANGE ROLE -----------------

@router.put("/users/{user_id}/role", response_model=UserOut)
def update_role(
    user_id: str,
    payload: RoleUpdateRequest,
    request: Request,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if payload.role not in {r.value for r in Role}:
        raise HTTPException(status_code=400, detail="Invalid role")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    user.role = payload.role
    db.commit()
    db.refresh(user)

    log_audit(
        db,
        current_user.id,
        AuditAction.UPDATE,
        "User",
        user_id,
        changes={"action": "role_change", "new_role": payload.role},
        ip_address=client_ip(request),
    )

    return user
