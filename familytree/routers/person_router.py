import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy import or_
from sqlalchemy.orm import Session

from familytree.auth import ensure_can_modify, get_current_user, require_admin, require_roles
from familytree.core.audit import client_ip, log_audit
from familytree.core.people import (
    build_person,
    generation_or_409,
    get_person_or_404,
    person_generation_or_409,
    require_names,
    serialize_person_detail,
    validate_parent_links,
)
from familytree.database import get_db
from familytree.models.enums import AuditAction, ProfileStatus, Role
from familytree.models.marriage import Marriage
from familytree.models.person import Person
from familytree.models.story import Story
from familytree.models.user import User
from familytree.schemas.marriage_schema import SpouseIn
from familytree.schemas.person_schema import (
    PersonCreate,
    PersonDetailOut,
    PersonGenerationOut,
    PersonOut,
    PersonPage,
    PersonSearchOut,
    PersonUpdate,
    ProfileUpsert,
    StoryIn,
    TreeNodeOut,
)
from familytree.utils.pagination import paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/people", tags=["People"])


# ---------------------------------------------------------------------
# INTERNAL UTIL: replace marriages / stories of a person
# ---------------------------------------------------------------------

def _replace_marriages(db: Session, person: Person, spouses: List[SpouseIn]):
    seen = set()
    for spouse in spouses:
        if spouse.spouse_id == person.id:
            raise HTTPException(status_code=400, detail="A person cannot marry themselves")

        if spouse.spouse_id in seen:
            raise HTTPException(status_code=400, detail="Marriage already exists")
        seen.add(spouse.spouse_id)

        if not db.query(Person.id).filter(Person.id == spouse.spouse_id).first():
            raise HTTPException(status_code=400, detail="Spouse not found")

    existing = db.query(Marriage).filter(
        or_(Marriage.spouse1_id == person.id, Marriage.spouse2_id == person.id)
    ).all()
    for marriage in existing:
        db.delete(marriage)
    db.flush()

    for spouse in spouses:
        db.add(Marriage(
            spouse1_id=person.id,
            spouse2_id=spouse.spouse_id,
            marriage_date=spouse.marriage_date,
            status=spouse.status.value,
        ))


def _replace_stories(db: Session, person: Person, stories: List[StoryIn]):
    db.query(Story).filter(Story.person_id == person.id).delete(synchronize_session=False)

    author = f"{person.first_name} {person.last_name}"
    for story in stories:
        if not story.title.strip() or not story.content.strip():
            continue
        db.add(Story(
            person_id=person.id,
            title=story.title,
            content=story.content,
            story_date=story.story_date,
            author=author,
        ))


# ---------------------------------------------------------------------
# CREATE OR UPDATE MY PROFILE
# ---------------------------------------------------------------------
@router.post("/profile", response_model=PersonDetailOut)
def upsert_my_profile(
    payload: ProfileUpsert,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_names(payload.first_name, payload.last_name)

    if payload.status and payload.status not in (ProfileStatus.DRAFT, ProfileStatus.PENDING):
        raise HTTPException(
            status_code=400,
            detail="Profile status must be DRAFT or PENDING",
        )

    person = None
    if current_user.person_id:
        person = db.query(Person).filter(Person.id == current_user.person_id).first()

    creating = person is None
    data = payload.model_dump(include=set(PersonCreate.model_fields))
    validate_parent_links(db, data, None if creating else person.id)

    if creating:
        person = build_person(
            payload,
            current_user.id,
            generation=generation_or_409(
                db, payload.biological_father_id, payload.biological_mother_id
            ),
        )
        db.add(person)
        db.flush()
        current_user.person_id = person.id
    else:
        for key, value in data.items():
            setattr(person, key, value)
        person.first_name = payload.first_name.strip()
        person.last_name = payload.last_name.strip()
        if not person.is_deceased:
            person.date_of_death = None
        person.updated_by = current_user.id

    if payload.status:
        person.profile_status = payload.status.value

    if payload.spouses is not None:
        _replace_marriages(db, person, payload.spouses)

    if payload.stories is not None:
        _replace_stories(db, person, payload.stories)

    db.commit()
    db.refresh(person)

    log_audit(
        db,
        current_user.id,
        AuditAction.CREATE if creating else AuditAction.UPDATE,
        "Person",
        person.id,
        person.id,
        {
            "action": "created_profile" if creating else "updated_profile",
            "status": payload.status,
        },
        client_ip(request),
    )

    response.status_code = 201 if creating else 200
    return serialize_person_detail(person)


# ---------------------------------------------------------------------
# GET MY PROFILE
# ---------------------------------------------------------------------
@router.get("/profile", response_model=PersonDetailOut)
def get_my_profile(
    current_user: User = Depends(get_current_user),
):
    person = current_user.person
    if not person:
        raise HTTPException(status_code=404, detail="No person profile found")

    return serialize_person_detail(person)


# ---------------------------------------------------------------------
# SEARCH (autocomplete for relationship pickers)
# ---------------------------------------------------------------------
@router.get("/search", response_model=List[PersonSearchOut])
def search_people(
    q: str = "",
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    term = q.strip()
    if len(term) < 2:
        return []

    pattern = f"%{term}%"
    people = (
        db.query(Person)
        .filter(or_(
            Person.first_name.ilike(pattern),
            Person.last_name.ilike(pattern),
            Person.maiden_name.ilike(pattern),
        ))
        .order_by(Person.last_name.asc(), Person.first_name.asc())
        .limit(limit)
        .all()
    )

    return [
        {
            "id": p.id,
            "name": p.full_name,
            "first_name": p.first_name,
            "last_name": p.last_name,
            "birth_year": p.date_of_birth.year if p.date_of_birth else None,
            "profile_photo": p.profile_photo,
            "city": p.city,
            "is_deceased": p.is_deceased,
        }
        for p in people
    ]


# ---------------------------------------------------------------------
# WHOLE TREE
# ---------------------------------------------------------------------
@router.get("/tree", response_model=List[TreeNodeOut])
def get_tree(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    people = db.query(Person).order_by(Person.last_name.asc(), Person.first_name.asc()).all()

    spouse_ids: dict[str, list[str]] = {p.id: [] for p in people}
    for m in db.query(Marriage).all():
        spouse_ids.setdefault(m.spouse1_id, []).append(m.spouse2_id)
        spouse_ids.setdefault(m.spouse2_id, []).append(m.spouse1_id)

    log_audit(db, current_user.id, AuditAction.VIEW, "Person", "all", ip_address=client_ip(request))

    return [
        {
            "id": p.id,
            "first_name": p.first_name,
            "last_name": p.last_name,
            "gender": p.gender,
            "date_of_birth": p.date_of_birth,
            "is_deceased": p.is_deceased,
            "profile_photo": p.profile_photo,
            "generation": p.generation,
            "biological_father_id": p.biological_father_id,
            "biological_mother_id": p.biological_mother_id,
            "adoptive_parent_id": p.adoptive_parent_id,
            "spouse_ids": spouse_ids[p.id],
        }
        for p in people
    ]


# ---------------------------------------------------------------------
# LIST (paginated)
# ---------------------------------------------------------------------
@router.get("", response_model=PersonPage)
@router.get("/", response_model=PersonPage)
def list_people(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str = "",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Person)

    if search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            Person.first_name.ilike(pattern),
            Person.last_name.ilike(pattern),
            Person.email.ilike(pattern),
        ))

    query = query.order_by(Person.last_name.asc(), Person.first_name.asc())
    people, pagination = paginate(query, page, limit)

    return {"people": people, "pagination": pagination}


# ---------------------------------------------------------------------
# CREATE PERSON (members and admins)
# ---------------------------------------------------------------------
@router.post("", response_model=PersonOut, status_code=201)
@router.post("/", response_model=PersonOut, status_code=201)
def create_person(
    payload: PersonCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.MEMBER, Role.ADMIN)),
):
    require_names(payload.first_name, payload.last_name)
    validate_parent_links(db, payload.model_dump())

    generation = generation_or_409(db, payload.biological_father_id, payload.biological_mother_id)
    person = build_person(payload, current_user.id, generation=generation)

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
        {"action": "created_person", "generation": generation},
        client_ip(request),
    )

    return person


# ---------------------------------------------------------------------
# GET ONE
# ---------------------------------------------------------------------
@router.get("/{person_id}", response_model=PersonDetailOut)
def get_person(
    person_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    person = get_person_or_404(db, person_id)

    log_audit(
        db,
        current_user.id,
        AuditAction.VIEW,
        "Person",
        person_id,
        person_id,
        {"action": "viewed_person"},
        client_ip(request),
    )

    return serialize_person_detail(person)


@router.get("/{person_id}/generation", response_model=PersonGenerationOut)
def get_person_generation(
    person_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_person_or_404(db, person_id)
    return {"person_id": person_id, "generation": person_generation_or_409(db, person_id)}


# ---------------------------------------------------------------------
# UPDATE (self, direct relatives, or admin)
# ---------------------------------------------------------------------
@router.put("/{person_id}", response_model=PersonOut)
def update_person(
    person_id: str,
    payload: PersonUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    person = get_person_or_404(db, person_id)
    ensure_can_modify(db, current_user, person_id)

    changes = payload.model_dump(exclude_unset=True)

    for field in ("first_name", "last_name"):
        if field in changes:
            value = (changes[field] or "").strip()
            if not value:
                raise HTTPException(
                    status_code=400,
                    detail="First name and last name are required",
                )
            changes[field] = value

    if "nicknames" in changes and changes["nicknames"] is None:
        changes["nicknames"] = []

    if changes.get("is_deceased") is None:
        changes.pop("is_deceased", None)

    validate_parent_links(db, changes, person_id)

    for key, value in changes.items():
        setattr(person, key, value)
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
        {"action": "updated_person", "changes": changes},
        client_ip(request),
    )

    return person


# ---------------------------------------------------------------------
# DELETE (admin only)
# ---------------------------------------------------------------------
@router.delete("/{person_id}")
def delete_person(
    person_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    person = get_person_or_404(db, person_id)

    if person.user is not None:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete a person linked to a user account. Unlink the user first.",
        )

    snapshot = PersonOut.model_validate(person).model_dump()

    for column in (
        Person.biological_father_id,
        Person.biological_mother_id,
        Person.adoptive_parent_id,
    ):
        db.query(Person).filter(column == person_id).update(
            {column: None}, synchronize_session=False
        )

    # marriages and stories go with the person (delete-orphan cascade)
    db.delete(person)
    db.commit()

    logger.info("Person %s deleted by %s", person_id, current_user.id)

    log_audit(
        db,
        current_user.id,
        AuditAction.DELETE,
        "Person",
        person_id,
        person_id,
        {"action": "deleted_person", "deleted": snapshot},
        client_ip(request),
    )

    return {"message": "Person deleted successfully"}
