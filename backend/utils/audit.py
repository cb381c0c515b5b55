import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from models.log import Log

logger = logging.getLogger(__name__)

# Audit entries are committed on their own so a failed request still leaves a FAIL record.
# A failed audit write never changes the response of the request being audited.
def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    try:
        entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not write audit entry %s/%s (%s)", resource, action, status)

def client_ip(request) -> Optional[str]:
    if request is None or request.client is None:
        return None
    return request.client.host

# Login failures only record what kind of identifier was typed, never the value
def identifier_kind(identifier: Optional[str]) -> Optional[str]:
    if not identifier or not identifier.strip():
        return None
    return "email" if "@" in identifier else "college_id"
