import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from familytree.database import Base
from familytree.models.enums import Role


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)

    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)

    # GUEST / MEMBER / ADMIN
    role = Column(String, default=Role.GUEST.value, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    last_login_at = Column(DateTime, nullable=True)

    # one-to-one link to the person this account represents
    person_id = Column(
        String,
        ForeignKey("people.id", ondelete="SET NULL"),
        unique=True,
        nullable=True,
    )

    person = relationship(
        "Person",
        back_populates="user",
        foreign_keys=[person_id],
    )
