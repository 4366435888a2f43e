"""
Transaction scopée : acquire → closure → commit, rollback garanti sinon.

    with transaction(db):
        ...  # lectures, contrôles, écritures

Toute erreur (métier ou non) annule l'intégralité des écritures du bloc.
Les erreurs SQLAlchemy sont converties en `InternalFailure` après rollback.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from depot.services.errors import DepotError, InternalFailure

logger = structlog.get_logger(__name__)


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    if not db.in_transaction():
        db.begin()
    try:
        yield db
        db.commit()
    except DepotError as exc:
        db.rollback()
        logger.info("transaction_rejected", error=exc.code, reason=exc.message)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("transaction_failed")
        raise InternalFailure("Database operation failed") from exc
    except BaseException:
        db.rollback()
        raise


def require_transaction(db: Session) -> None:
    if not db.in_transaction():
        raise RuntimeError("stock ledger operations require an active transaction")
