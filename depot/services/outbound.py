"""
Commandes de sortie (expéditions).

Miroir de `inbound` avec le signe inversé : chaque ligne retire sa quantité
du stock. La disponibilité est vérifiée ligne par ligne sur le solde courant
de la transaction (une ligne précédente de la même commande compte).
Pas de contrôle de capacité : une sortie ne fait que diminuer le volume.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

import structlog
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from depot.app.db.models.models_v1 import OutboundOrder, OutboundLine, Product, Warehouse
from depot.services import stock_ledger
from depot.services.errors import InsufficientStock, InvalidArgument, NotFound
from depot.services.uow import transaction

logger = structlog.get_logger(__name__)


@dataclass
class OutboundLineSpec:
    product_id: int
    quantity: int


@dataclass
class OutboundCreated:
    order_id: int
    warehouse_id: int
    line_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class OutboundLineUpdated:
    line_id: int
    order_id: int
    warehouse_id: int
    product_id: int
    product_name: str
    old_quantity: int
    new_quantity: int
    stock_change: int
    stock_after: int


@dataclass(frozen=True)
class OutboundLineDeleted:
    line_id: int
    order_id: int
    warehouse_id: int
    product_id: int
    quantity_reverted: int
    order_deleted: bool


def _take(db: Session, *, warehouse_id: int, product_id: int, quantity: int) -> int:
    entry = stock_ledger.lock_entry(db, warehouse_id=warehouse_id, product_id=product_id)
    if not entry:
        raise InsufficientStock(
            f"Product {product_id} is not stocked in warehouse {warehouse_id}",
            warehouse_id=warehouse_id,
            product_id=product_id,
        )
    if entry.quantity < quantity:
        raise InsufficientStock(
            f"Insufficient stock for product {product_id} "
            f"(on hand: {entry.quantity}, requested: {quantity})",
            warehouse_id=warehouse_id,
            product_id=product_id,
        )
    change = stock_ledger.adjust(db, warehouse_id=warehouse_id, product_id=product_id, delta=-quantity)
    return change.new_quantity


# ---------- Reads ----------
def list_orders(db: Session, warehouse_id: int) -> list[OutboundOrder]:
    return (
        db.execute(
            select(OutboundOrder)
            .where(OutboundOrder.warehouse_id == warehouse_id)
            .order_by(OutboundOrder.id.desc())
        )
        .scalars()
        .all()
    )


def get_order(db: Session, order_id: int) -> OutboundOrder:
    order = db.get(OutboundOrder, order_id)
    if not order:
        raise NotFound(f"Outbound order {order_id} not found", order_id=order_id)
    return order


def list_lines(db: Session, order_id: int) -> list[tuple[OutboundLine, Product]]:
    return (
        db.execute(
            select(OutboundLine, Product)
            .join(Product, Product.id == OutboundLine.product_id)
            .where(OutboundLine.order_id == order_id)
            .order_by(OutboundLine.id)
        )
        .tuples()
        .all()
    )


# ---------- Mutations ----------
def create_full(
    db: Session,
    *,
    warehouse_id: int,
    shipped_date: date,
    address: str,
    lines: Sequence[OutboundLineSpec],
) -> OutboundCreated:
    if not lines:
        raise InvalidArgument("An outbound order needs at least one line")

    with transaction(db):
        if not db.get(Warehouse, warehouse_id):
            raise NotFound(f"Warehouse {warehouse_id} not found", warehouse_id=warehouse_id)

        order = OutboundOrder(warehouse_id=warehouse_id, shipped_date=shipped_date, address=address)
        db.add(order)
        db.flush()  # get order.id

        result = OutboundCreated(order_id=order.id, warehouse_id=warehouse_id)
        for spec in lines:
            if spec.quantity <= 0:
                raise InvalidArgument(
                    f"Outbound quantity for product {spec.product_id} must be greater than 0",
                    product_id=spec.product_id,
                )
            _take(db, warehouse_id=warehouse_id, product_id=spec.product_id, quantity=spec.quantity)

            line = OutboundLine(order_id=order.id, product_id=spec.product_id, quantity=spec.quantity)
            db.add(line)
            db.flush()
            result.line_ids.append(line.id)

    logger.info(
        "outbound_order_created",
        order_id=result.order_id,
        warehouse_id=warehouse_id,
        line_count=len(result.line_ids),
    )
    return result


def update_line_quantity(db: Session, *, line_id: int, quantity: int) -> OutboundLineUpdated:
    if quantity < 0:
        raise InvalidArgument("Outbound line quantity cannot be negative")

    with transaction(db):
        line = db.get(OutboundLine, line_id, with_for_update=True)
        if not line:
            raise NotFound(f"Outbound line {line_id} not found", line_id=line_id)
        warehouse_id = line.order.warehouse_id
        old_quantity = line.quantity

        # diff > 0 : on rend du stock ; diff < 0 : on en consomme davantage
        diff = old_quantity - quantity
        if diff < 0:
            stock_after = _take(db, warehouse_id=warehouse_id, product_id=line.product_id, quantity=-diff)
        else:
            stock_ledger.ensure_exists(db, warehouse_id=warehouse_id, product_id=line.product_id)
            stock_after = stock_ledger.adjust(
                db, warehouse_id=warehouse_id, product_id=line.product_id, delta=diff
            ).new_quantity

        line.quantity = quantity
        db.flush()

        result = OutboundLineUpdated(
            line_id=line_id,
            order_id=line.order_id,
            warehouse_id=warehouse_id,
            product_id=line.product_id,
            product_name=line.product.name,
            old_quantity=old_quantity,
            new_quantity=quantity,
            stock_change=diff,
            stock_after=stock_after,
        )

    logger.info("outbound_line_updated", line_id=line_id, old_quantity=old_quantity, new_quantity=quantity)
    return result


def delete_line(db: Session, *, line_id: int) -> OutboundLineDeleted:
    with transaction(db):
        line = db.get(OutboundLine, line_id, with_for_update=True)
        if not line:
            raise NotFound(f"Outbound line {line_id} not found", line_id=line_id)
        order = line.order
        warehouse_id = order.warehouse_id
        product_id, quantity = line.product_id, line.quantity

        stock_ledger.ensure_exists(db, warehouse_id=warehouse_id, product_id=product_id)
        stock_ledger.adjust(db, warehouse_id=warehouse_id, product_id=product_id, delta=quantity)

        order.lines.remove(line)
        db.flush()

        remaining = db.execute(
            select(func.count()).select_from(OutboundLine).where(OutboundLine.order_id == order.id)
        ).scalar_one()
        order_deleted = remaining == 0
        if order_deleted:
            db.delete(order)
            db.flush()

        result = OutboundLineDeleted(
            line_id=line_id,
            order_id=order.id,
            warehouse_id=warehouse_id,
            product_id=product_id,
            quantity_reverted=quantity,
            order_deleted=order_deleted,
        )

    logger.info("outbound_line_deleted", line_id=line_id, order_id=result.order_id, order_deleted=order_deleted)
    return result


def update_header(db: Session, *, order_id: int, shipped_date: date, address: str) -> OutboundOrder:
    with transaction(db):
        order = db.get(OutboundOrder, order_id)
        if not order:
            raise NotFound(f"Outbound order {order_id} not found", order_id=order_id)
        order.shipped_date = shipped_date
        order.address = address
        db.flush()

    logger.info("outbound_order_updated", order_id=order_id)
    return order
