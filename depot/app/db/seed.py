from __future__ import annotations

from decimal import Decimal

import structlog
from sqlalchemy import select

from depot.app.core.logging import configure_logging
from depot.app.db.session import SessionLocal
from depot.app.db.models.models_v1 import Employee, Warehouse

logger = structlog.get_logger(__name__)


def run_seed():
    db = SessionLocal()
    try:
        # 1) Employé de démo
        emp = db.scalar(select(Employee).where(Employee.name == "ADMIN"))
        if not emp:
            emp = Employee(id=1, name="ADMIN")
            db.add(emp)
            db.commit()

        # 2) Entrepôts : un borné, un illimité
        if not db.scalar(select(Warehouse).where(Warehouse.name == "MAIN")):
            db.add(Warehouse(name="MAIN", employee_id=emp.id, capacity=Decimal("1000")))
        if not db.scalar(select(Warehouse).where(Warehouse.name == "OVERFLOW")):
            db.add(Warehouse(name="OVERFLOW", employee_id=emp.id, capacity=None))
        db.commit()

        logger.info("seed_ok", employee_id=emp.id)
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    run_seed()
