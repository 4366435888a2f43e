from __future__ import annotations

from typing import Generator

from fastapi import Query

from depot.app.core.config import settings
from depot.app.db.session import SessionLocal
from depot.services.audit import AuditNotifier, NoopAuditNotifier, SqlAuditNotifier
from depot.services.errors import InvalidArgument


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_audit_notifier() -> AuditNotifier:
    if not settings.audit_enabled:
        return NoopAuditNotifier()
    return SqlAuditNotifier(SessionLocal)


def require_actor(actor_id: int = Query(default=0, alias="actorId")) -> int:
    # Mutations refusées sans acteur identifié, avant toute transaction
    if actor_id <= 0:
        raise InvalidArgument("A valid actorId is required")
    return actor_id
