from datetime import datetime

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from familytree.database import Base


class Story(Base):
    __tablename__ = "stories"

    id = Column(Integer, primary_key=True)

    person_id = Column(
        String,
        ForeignKey("people.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    story_date = Column(Date, nullable=True)
    author = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    person = relationship("Person", back_populates="stories")
