import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from familytree.models.audit_log import AuditLog
from familytree.models.enums import AuditAction

logger = logging.getLogger(__name__)


def client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None or request.client is None:
        return None
    return request.client.host


def log_audit(
    db: Session,
    user_id: Optional[str],
    action: AuditAction,
    entity_type: str,
    entity_id: str,
    person_id: Optional[str] = None,
    changes: Optional[dict[str, Any]] = None,
    ip_address: Optional[str] = None,
) -> Optional[AuditLog]:
    """
    Append an audit entry and commit it.

    A failed audit write is logged and rolled back; it never fails the
    request that triggered it.
    """
    entry = AuditLog(
        user_id=user_id,
        action=AuditAction(action).value,
        entity_type=entity_type,
        entity_id=str(entity_id),
        person_id=person_id,
        changes=jsonable_encoder(changes) if changes is not None else None,
        ip_address=ip_address,
    )

    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "Failed to write audit log: %s %s %s", action, entity_type, entity_id
        )
        return None

    return entry
