import uuid
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from familytree.core.generation import (
    GenerationCycleError,
    estimate_generation,
    person_generation,
)
from familytree.models.person import Person
from familytree.schemas.person_schema import PersonCreate, PersonOut, PersonSummary


PARENT_FIELDS = {
    "biological_father_id": "Biological father",
    "biological_mother_id": "Biological mother",
    "adoptive_parent_id": "Adoptive parent",
}


def get_person_or_404(db: Session, person_id: str) -> Person:
    person = db.query(Person).filter(Person.id == person_id).first()
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    return person


def require_names(first_name: Optional[str], last_name: Optional[str]) -> None:
    if not (first_name or "").strip() or not (last_name or "").strip():
        raise HTTPException(
            status_code=400,
            detail="First name and last name are required",
        )


def validate_parent_links(db: Session, data: dict, person_id: Optional[str] = None) -> None:
    """
    Every parent id that is set must point at an existing person.
    """
    for field, label in PARENT_FIELDS.items():
        parent_id = data.get(field)
        if not parent_id:
            continue

        if person_id and parent_id == person_id:
            raise HTTPException(
                status_code=400,
                detail="A person cannot be their own parent",
            )

        exists = db.query(Person.id).filter(Person.id == parent_id).first()
        if not exists:
            raise HTTPException(status_code=400, detail=f"{label} not found")


def generation_or_409(
    db: Session,
    father_id: Optional[str],
    mother_id: Optional[str],
) -> int:
    try:
        return estimate_generation(db, father_id, mother_id)
    except GenerationCycleError as e:
        raise HTTPException(status_code=409, detail=str(e))


def person_generation_or_409(db: Session, person_id: str) -> int:
    try:
        return person_generation(db, person_id)
    except GenerationCycleError as e:
        raise HTTPException(status_code=409, detail=str(e))


def build_person(payload: PersonCreate, user_id: str, **extra) -> Person:
    """
    New (unsaved) Person from a create payload.
    """
    data = payload.model_dump(include=set(PersonCreate.model_fields))
    data["first_name"] = data["first_name"].strip()
    data["last_name"] = data["last_name"].strip()

    # a living person has no date of death
    if not data["is_deceased"]:
        data["date_of_death"] = None

    return Person(
        id=str(uuid.uuid4()),
        created_by=user_id,
        updated_by=user_id,
        **data,
        **extra,
    )


def serialize_person_detail(person: Person) -> dict:
    data = PersonOut.model_validate(person).model_dump()

    spouses = [
        (m, m.spouse2) for m in person.marriages_as_spouse1
    ] + [
        (m, m.spouse1) for m in person.marriages_as_spouse2
    ]

    def summary(p: Optional[Person]):
        return PersonSummary.model_validate(p).model_dump() if p else None

    data.update(
        biological_father=summary(person.biological_father),
        biological_mother=summary(person.biological_mother),
        adoptive_parent=summary(person.adoptive_parent),
        children=[summary(c) for c in person.children],
        spouses=[
            {
                "marriage_id": m.id,
                "status": m.status,
                "marriage_date": m.marriage_date,
                "marriage_place": m.marriage_place,
                "spouse": summary(spouse),
            }
            for m, spouse in spouses
        ],
        stories=[
            {
                "id": s.id,
                "title": s.title,
                "content": s.content,
                "story_date": s.story_date,
                "author": s.author,
            }
            for s in person.stories
        ],
    )
    return data
