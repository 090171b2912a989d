import uuid
from datetime import datetime

from sqlalchemy import Column, String, Boolean, DateTime, Date, ForeignKey, Integer, Text, JSON
from sqlalchemy.orm import relationship

from familytree.database import Base
from familytree.models.enums import ProfileStatus


class Person(Base):
    """
    A node in the family graph.
    May exist without a User account (ancestors, children, etc).
    """
    __tablename__ = "people"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)

    # -------------------------------------------------------
    # Identity
    # -------------------------------------------------------
    first_name = Column(String, nullable=False)
    middle_name = Column(String, nullable=True)
    last_name = Column(String, nullable=False, index=True)
    maiden_name = Column(String, nullable=True)
    nicknames = Column(JSON, default=list, nullable=False)
    gender = Column(String, nullable=True)

    date_of_birth = Column(Date, nullable=True)
    is_deceased = Column(Boolean, default=False, nullable=False)
    date_of_death = Column(Date, nullable=True)

    # -------------------------------------------------------
    # Contact & location
    # -------------------------------------------------------
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    country = Column(String, nullable=True)

    # -------------------------------------------------------
    # Life & story
    # -------------------------------------------------------
    bio = Column(Text, nullable=True)
    occupation = Column(String, nullable=True)
    profile_photo = Column(String, nullable=True)

    # -------------------------------------------------------
    # Self-service approval workflow
    # -------------------------------------------------------
    profile_status = Column(String, default=ProfileStatus.DRAFT.value, nullable=False, index=True)
    rejection_reason = Column(Text, nullable=True)

    generation = Column(Integer, nullable=True)

    # -------------------------------------------------------
    # Parent links (nothing prevents cycles here)
    # -------------------------------------------------------
    biological_father_id = Column(
        String,
        ForeignKey("people.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    biological_mother_id = Column(
        String,
        ForeignKey("people.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    adoptive_parent_id = Column(
        String,
        ForeignKey("people.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # -------------------------------------------------------
    # RELATIONSHIPS
    # -------------------------------------------------------

    biological_father = relationship(
        "Person",
        remote_side=[id],
        foreign_keys=[biological_father_id],
        back_populates="children_as_father",
    )
    biological_mother = relationship(
        "Person",
        remote_side=[id],
        foreign_keys=[biological_mother_id],
        back_populates="children_as_mother",
    )
    adoptive_parent = relationship(
        "Person",
        remote_side=[id],
        foreign_keys=[adoptive_parent_id],
    )

    children_as_father = relationship(
        "Person",
        foreign_keys=[biological_father_id],
        back_populates="biological_father",
    )
    children_as_mother = relationship(
        "Person",
        foreign_keys=[biological_mother_id],
        back_populates="biological_mother",
    )

    marriages_as_spouse1 = relationship(
        "Marriage",
        foreign_keys="Marriage.spouse1_id",
        back_populates="spouse1",
        cascade="all, delete-orphan",
    )
    marriages_as_spouse2 = relationship(
        "Marriage",
        foreign_keys="Marriage.spouse2_id",
        back_populates="spouse2",
        cascade="all, delete-orphan",
    )

    stories = relationship(
        "Story",
        back_populates="person",
        cascade="all, delete-orphan",
        order_by="Story.story_date.desc()",
    )

    user = relationship(
        "User",
        back_populates="person",
        uselist=False,
        foreign_keys="User.person_id",
    )

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p)

    @property
    def children(self) -> list["Person"]:
        return list(self.children_as_father) + list(self.children_as_mother)

