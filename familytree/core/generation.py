from typing import Optional

from sqlalchemy.orm import Session

from familytree.models.person import Person


class GenerationCycleError(Exception):
    """
    Raised when a parent chain loops back on itself.
    """

    def __init__(self, person_id: str):
        self.person_id = person_id
        super().__init__(f"Cycle detected in ancestry of person {person_id}")


def _parent_ids(db: Session, person_id: str) -> Optional[tuple[Optional[str], Optional[str]]]:
    row = (
        db.query(Person.biological_father_id, Person.biological_mother_id)
        .filter(Person.id == person_id)
        .first()
    )
    if row is None:
        return None
    return row[0], row[1]


def _resolve(
    db: Session,
    person_id: str,
    path: set[str],
    memo: dict[str, int],
) -> int:
    """
    Generation of an existing person, 0 if the id does not resolve.
    """
    if person_id in memo:
        return memo[person_id]

    if person_id in path:
        raise GenerationCycleError(person_id)

    parents = _parent_ids(db, person_id)
    if parents is None:
        return 0

    path.add(person_id)
    try:
        generation = _from_parents(db, parents[0], parents[1], path, memo)
    finally:
        path.discard(person_id)

    memo[person_id] = generation
    return generation


def _from_parents(
    db: Session,
    father_id: Optional[str],
    mother_id: Optional[str],
    path: set[str],
    memo: dict[str, int],
) -> int:
    if not father_id and not mother_id:
        return 1

    parent_generation = 0
    for parent_id in (father_id, mother_id):
        if parent_id:
            parent_generation = max(parent_generation, _resolve(db, parent_id, path, memo))

    return parent_generation + 1


def estimate_generation(
    db: Session,
    father_id: Optional[str] = None,
    mother_id: Optional[str] = None,
) -> int:
    """
    Suggested generation for a (new) person with the given parents.

    Root ancestors are generation 1. Each known parent resolves to its own
    generation by walking up its parent links; an unknown parent id
    contributes 0. The result is the deepest parent + 1.

    Raises GenerationCycleError if a parent chain loops.
    """
    return _from_parents(db, father_id, mother_id, set(), {})


def person_generation(db: Session, person_id: str) -> int:
    """
    Generation of an existing person, 0 for an unknown id.
    """
    return _resolve(db, person_id, set(), {})
