from typing import Optional

from sqlalchemy.orm import Session

from familytree.models.enums import Role
from familytree.models.person import Person


def target_lists_acting_as_relative(
    db: Session,
    acting_person_id: str,
    target_person_id: str,
) -> bool:
    """
    Looks at the TARGET's own record.

    True if the acting person is the target's father, mother or adoptive
    parent, one of the target's biological children, or one of the
    target's spouses (either marriage slot).
    """
    target = db.query(Person).filter(Person.id == target_person_id).first()
    if not target:
        return False

    if acting_person_id in (
        target.biological_father_id,
        target.biological_mother_id,
        target.adoptive_parent_id,
    ):
        return True

    # biological links only, adoptive children are not listed here
    child_ids = [c.id for c in target.children_as_father] + [
        c.id for c in target.children_as_mother
    ]
    if acting_person_id in child_ids:
        return True

    spouse_ids = [m.spouse2_id for m in target.marriages_as_spouse1] + [
        m.spouse1_id for m in target.marriages_as_spouse2
    ]
    return acting_person_id in spouse_ids


def target_is_parent_of_acting(
    db: Session,
    acting_person_id: str,
    target_person_id: str,
) -> bool:
    """
    Looks at the ACTING person's own record: is the target one of my parents?
    """
    acting = db.query(Person).filter(Person.id == acting_person_id).first()
    if not acting:
        return False

    return target_person_id in (
        acting.biological_father_id,
        acting.biological_mother_id,
        acting.adoptive_parent_id,
    )


def can_modify_person(
    db: Session,
    acting_user_id: str,
    acting_role: Optional[str],
    acting_person_id: Optional[str],
    target_person_id: str,
) -> bool:
    """
    Decide whether a user may edit a person record.

    - ADMIN: anyone
    - GUEST: nobody, not even themselves
    - MEMBER: themselves and direct relatives (parent, child, spouse)
    - anything else: nobody

    Only one hop is considered; grandparents, siblings and in-laws are
    denied. Never raises for missing records, a missing target is a deny.
    """
    if acting_role == Role.ADMIN:
        return True

    if acting_role == Role.GUEST:
        return False

    if acting_role != Role.MEMBER:
        return False

    if acting_person_id == target_person_id:
        return True

    if not acting_person_id:
        return False

    if target_lists_acting_as_relative(db, acting_person_id, target_person_id):
        return True

    return target_is_parent_of_acting(db, acting_person_id, target_person_id)
