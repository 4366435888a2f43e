"""
Audit notifier.

Appelé APRÈS le commit de la transaction métier. Best-effort :
- écrit dans sa propre session (jamais dans la transaction métier)
- toute erreur est loggée en warning, jamais propagée, jamais rejouée
- actor_id absent / 0 => rien n'est enregistré
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Protocol

import structlog
from sqlalchemy.orm import Session

from depot.app.db.models.core_types import AuditAction, EntityType
from depot.app.db.models.models_v1 import AuditLog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AuditEvent:
    actor_id: int | None
    action: AuditAction
    endpoint: str
    entity_type: EntityType
    entity_id: str
    payload: dict[str, Any] = field(default_factory=dict)


class AuditNotifier(Protocol):
    def record(self, event: AuditEvent) -> None: ...


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, "value"):  # enums
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_payload(payload: dict[str, Any]) -> str:
    return json.dumps(payload, default=_json_default, ensure_ascii=False)


class NoopAuditNotifier:
    def record(self, event: AuditEvent) -> None:
        return None


class SqlAuditNotifier:
    """Écrit une ligne `audit_log` par évènement."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.session_factory = session_factory

    def record(self, event: AuditEvent) -> None:
        if not event.actor_id:
            return

        try:
            with self.session_factory() as db:
                db.add(
                    AuditLog(
                        actor_id=event.actor_id,
                        action=event.action.value,
                        endpoint=event.endpoint,
                        entity_type=event.entity_type.value,
                        entity_id=event.entity_id,
                        meta=serialize_payload(event.payload),
                    )
                )
                db.commit()
        except Exception as exc:
            # L'audit ne doit jamais faire échouer l'opération métier
            logger.warning(
                "audit_record_failed",
                action=event.action.value,
                endpoint=event.endpoint,
                entity_id=event.entity_id,
                error=str(exc),
            )
