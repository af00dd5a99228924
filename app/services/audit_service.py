"""
Audit trail writer
Appends event_logs rows for scheduling actions (series creation, bulk edits, swap decisions)
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Union

from sqlalchemy.orm import Session

from ..models import EventLog

logger = logging.getLogger(__name__)


def _json_default(value: Any):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return str(value)


def record_event(
    db: Session,
    company_id: int,
    event_type: str,
    description: str,
    entity_type: Optional[str] = None,
    entity_id: Union[int, str, None] = None,
    metadata: Optional[dict] = None,
    user_id: Optional[int] = None,
) -> EventLog:
    """
    Stage an audit row on the session. The caller owns the commit, so the
    entry lands in the same transaction as the change it describes.
    """
    entry = EventLog(
        company_id=company_id,
        event_type=event_type,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        user_id=user_id,
        description=description,
        event_metadata=json.dumps(metadata, default=_json_default) if metadata is not None else None,
    )
    db.add(entry)
    logger.info(f"📝 Audit {event_type} ({entity_type}:{entity_id}) for company {company_id}: {description}")
    return entry


def log_event(db: Session, **kwargs) -> Optional[EventLog]:
    """
    Write and commit an audit row on its own. Failures are logged and rolled
    back; they never break the calling flow.
    """
    try:
        entry = record_event(db, **kwargs)
        db.commit()
        return entry
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to write audit event {kwargs.get('event_type')}: {e}")
        return None
