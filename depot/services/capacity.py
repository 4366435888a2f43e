"""
Oracle de capacité.

Règle métier :
    occupation = SUM(stock.quantity * product.size)   (size NULL => 0)
    projection = occupation + SUM(delta * product.size)
    ok         = capacity IS NULL OR projection <= capacity

Toujours évalué dans la transaction de l'écriture qui suit (même Session).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from depot.app.db.models.models_v1 import Warehouse, StockEntry, Product
from depot.services.errors import CapacityExceeded, NotFound

ZERO = Decimal("0")


@dataclass(frozen=True)
class Occupancy:
    capacity: Decimal | None
    current_total: Decimal

    @property
    def available(self) -> Decimal | None:
        if self.capacity is None:
            return None
        return self.capacity - self.current_total


@dataclass(frozen=True)
class CapacityProjection:
    ok: bool
    projected_total: Decimal
    capacity: Decimal | None
    current_total: Decimal
    delta_total: Decimal


def _dec(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    # SQLite peut renvoyer un float / int pour SUM()
    return Decimal(str(value))


def warehouse_occupancy(db: Session, warehouse_id: int, *, lock: bool = False) -> Occupancy:
    # lock=True : FOR UPDATE sur l'entrepôt, les contrôles concurrents passent un par un
    wh = db.get(Warehouse, warehouse_id, with_for_update=True) if lock else db.get(Warehouse, warehouse_id)
    if not wh:
        raise NotFound(f"Warehouse {warehouse_id} not found", warehouse_id=warehouse_id)

    total = db.execute(
        select(func.coalesce(func.sum(StockEntry.quantity * Product.size), 0))
        .select_from(StockEntry)
        .join(Product, Product.id == StockEntry.product_id)
        .where(StockEntry.warehouse_id == warehouse_id)
    ).scalar_one()

    capacity = None if wh.capacity is None else _dec(wh.capacity)
    return Occupancy(capacity=capacity, current_total=_dec(total))


def volume_delta(db: Session, deltas: Mapping[int, int]) -> Decimal:
    """Variation de volume pour un ensemble {product_id: delta quantité}."""
    product_ids = sorted({int(pid) for pid, qty in deltas.items() if qty})
    if not product_ids:
        return ZERO

    sizes = dict(
        db.execute(select(Product.id, Product.size).where(Product.id.in_(product_ids))).all()
    )
    return sum((_dec(sizes.get(pid)) * int(deltas[pid]) for pid in product_ids), ZERO)


def project_and_check(
    db: Session,
    *,
    warehouse_id: int,
    deltas: Mapping[int, int],
) -> CapacityProjection:
    occ = warehouse_occupancy(db, warehouse_id, lock=True)
    delta_total = volume_delta(db, deltas)
    projected = occ.current_total + delta_total
    ok = occ.capacity is None or projected <= occ.capacity
    return CapacityProjection(
        ok=ok,
        projected_total=projected,
        capacity=occ.capacity,
        current_total=occ.current_total,
        delta_total=delta_total,
    )


def ensure_capacity(
    db: Session,
    *,
    warehouse_id: int,
    deltas: Mapping[int, int],
) -> CapacityProjection:
    projection = project_and_check(db, warehouse_id=warehouse_id, deltas=deltas)
    return reject_if_over(projection, warehouse_id=warehouse_id)


def reject_if_over(projection: CapacityProjection, *, warehouse_id: int) -> CapacityProjection:
    if not projection.ok:
        raise CapacityExceeded(
            f"Capacity check failed: volume would go from {projection.current_total} "
            f"to {projection.projected_total}, exceeding warehouse capacity {projection.capacity}",
            warehouse_id=warehouse_id,
            projected_total=str(projection.projected_total),
            capacity=str(projection.capacity),
        )
    return projection
