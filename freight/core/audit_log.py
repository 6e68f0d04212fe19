"""Audit logging for state-changing operations"""
import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from freight.core.enums import AuditAction
from freight.core.metrics import audit_logs_created
from freight.models.audit import Audit
from freight.utils.hashing import payload_hash

logger = logging.getLogger(__name__)


async def log_audit(
    db: AsyncSession,
    user_id: int,
    action: AuditAction,
    payload: Optional[Any] = None
) -> None:

    try:
        if payload is None:
            payload = {}

        if hasattr(payload, "model_dump"):
            payload_dict = payload.model_dump(exclude_unset=True)
        elif isinstance(payload, dict):
            payload_dict = payload
        else:
            payload_dict = {}

        audit_record = Audit(
            user_id=int(user_id),
            endpoint=str(action),
            payload_hash=payload_hash(payload_dict),
        )
        audit_record.stamp_created()

        db.add(audit_record)
        await db.flush()
        audit_logs_created.labels(action=str(action)).inc()

    except Exception as e:
        logger.error(f"Audit logging failed for action {action}: {e}", exc_info=True)
