from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from familytree.database import Base


class AuditLog(Base):
    """
    Append-only record of every mutation (and person views).
    Rows are never updated or deleted by the API.
    """

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True)

    user_id = Column(
        String,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # CREATE / UPDATE / DELETE / VIEW
    action = Column(String, nullable=False)

    entity_type = Column(String, nullable=False)
    entity_id = Column(String, nullable=False)
    person_id = Column(String, nullable=True)

    changes = Column(JSON, nullable=True)
    ip_address = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    user = relationship("User")
