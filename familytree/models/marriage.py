from datetime import datetime

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from familytree.database import Base
from familytree.models.enums import MarriageStatus


class Marriage(Base):
    """
    A couple in the tree.
    Stored as an ordered pair; lookups must check both orderings.
    """

    __tablename__ = "marriages"

    id = Column(Integer, primary_key=True)

    spouse1_id = Column(
        String,
        ForeignKey("people.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    spouse2_id = Column(
        String,
        ForeignKey("people.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # MARRIED / DIVORCED / WIDOWED
    status = Column(String, default=MarriageStatus.MARRIED.value, nullable=False)

    marriage_date = Column(Date, nullable=True)
    marriage_place = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    spouse1 = relationship("Person", foreign_keys=[spouse1_id], back_populates="marriages_as_spouse1")
    spouse2 = relationship("Person", foreign_keys=[spouse2_id], back_populates="marriages_as_spouse2")
