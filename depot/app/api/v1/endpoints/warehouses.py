from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from depot.app.api.deps import get_db
from depot.app.db.models.models_v1 import Warehouse
from depot.app.schemas.stock import OccupancyRead, WarehouseRead
from depot.services import capacity

router = APIRouter(prefix="/warehouse")


@router.get("/{emp_id}", response_model=list[WarehouseRead])
def list_employee_warehouses(emp_id: int, db: Session = Depends(get_db)):
    return (
        db.execute(select(Warehouse).where(Warehouse.employee_id == emp_id).order_by(Warehouse.id))
        .scalars()
        .all()
    )


@router.get("/{warehouse_id}/occupancy", response_model=OccupancyRead)
def get_occupancy(warehouse_id: int, db: Session = Depends(get_db)):
    occ = capacity.warehouse_occupancy(db, warehouse_id)
    return OccupancyRead(
        warehouse_id=warehouse_id,
        capacity=occ.capacity,
        occupied=occ.current_total,
        available=occ.available,
    )
