"""
Commandes d'entrée (réceptions fournisseur).

Chaque ligne ajoute sa quantité au stock de l'entrepôt de la commande.
Éditer / supprimer une ligne annule d'abord sa contribution, puis applique
la nouvelle : le stock reflète toujours exactement une fois chaque ligne.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Sequence

import structlog
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from depot.app.db.models.models_v1 import InboundOrder, InboundLine, Product, Warehouse
from depot.services import capacity, catalog, stock_ledger
from depot.services.errors import Conflict, InvalidArgument, NotFound
from depot.services.uow import transaction

logger = structlog.get_logger(__name__)


@dataclass
class InboundLineSpec:
    quantity: int
    product_id: int | None = None
    product_name: str | None = None
    size: Decimal | None = None
    weight: Decimal | None = None
    price: Decimal | None = None


@dataclass
class InboundCreated:
    order_id: int
    warehouse_id: int
    line_ids: list[int] = field(default_factory=list)
    product_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class InboundLineUpdated:
    line_id: int
    order_id: int
    warehouse_id: int
    old_product_id: int
    new_product_id: int
    old_quantity: int
    new_quantity: int


@dataclass(frozen=True)
class InboundLineDeleted:
    line_id: int
    order_id: int
    warehouse_id: int
    product_id: int
    quantity_reverted: int
    order_deleted: bool


def _resolve_product(db: Session, spec: InboundLineSpec) -> Product:
    catalog.check_dimensions(spec.size, spec.weight, spec.price)
    if spec.product_id is not None:
        p = catalog.get_product(db, spec.product_id)
        if spec.size is not None and p.size != spec.size:
            p.size = spec.size
            db.flush()
        return p
    if spec.product_name:
        return catalog.resolve_or_create(
            db,
            name=spec.product_name,
            size=spec.size,
            weight=spec.weight,
            price=spec.price,
        )
    raise InvalidArgument("Each inbound line needs a productId or a productName")


def _revert(db: Session, *, warehouse_id: int, product_id: int, quantity: int) -> None:
    """Retire la contribution d'une ligne ; Conflict si le stock deviendrait négatif."""
    if quantity <= 0:
        return
    entry = stock_ledger.lock_entry(db, warehouse_id=warehouse_id, product_id=product_id)
    current = int(entry.quantity) if entry else 0
    if current < quantity:
        raise Conflict(
            f"Reverting quantity {quantity} would make stock of product {product_id} negative "
            f"(current stock: {current})",
            warehouse_id=warehouse_id,
            product_id=product_id,
        )
    stock_ledger.adjust(db, warehouse_id=warehouse_id, product_id=product_id, delta=-quantity)


# ---------- Reads ----------
def list_orders(db: Session, warehouse_id: int) -> list[InboundOrder]:
    return (
        db.execute(
            select(InboundOrder)
            .where(InboundOrder.warehouse_id == warehouse_id)
            .order_by(InboundOrder.id.desc())
        )
        .scalars()
        .all()
    )


def get_order(db: Session, order_id: int) -> InboundOrder:
    order = db.get(InboundOrder, order_id)
    if not order:
        raise NotFound(f"Inbound order {order_id} not found", order_id=order_id)
    return order


def list_lines(db: Session, order_id: int) -> list[tuple[InboundLine, Product]]:
    return (
        db.execute(
            select(InboundLine, Product)
            .join(Product, Product.id == InboundLine.product_id)
            .where(InboundLine.order_id == order_id)
            .order_by(InboundLine.id)
        )
        .tuples()
        .all()
    )


# ---------- Mutations ----------
def create_full(
    db: Session,
    *,
    warehouse_id: int,
    supplier: str,
    received_date: date,
    lines: Sequence[InboundLineSpec],
) -> InboundCreated:
    if not lines:
        raise InvalidArgument("An inbound order needs at least one line")

    with transaction(db):
        if not db.get(Warehouse, warehouse_id):
            raise NotFound(f"Warehouse {warehouse_id} not found", warehouse_id=warehouse_id)

        # 1) produits
        products = [_resolve_product(db, spec) for spec in lines]

        # 2) quantités
        for spec in lines:
            if spec.quantity < 0:
                raise InvalidArgument("Inbound quantity cannot be negative")

        # 3) capacité : un seul contrôle pour toute la commande
        deltas: dict[int, int] = defaultdict(int)
        for p, spec in zip(products, lines):
            deltas[p.id] += spec.quantity
        capacity.ensure_capacity(db, warehouse_id=warehouse_id, deltas=deltas)

        # 4) en-tête puis lignes + stock
        order = InboundOrder(warehouse_id=warehouse_id, supplier=supplier, received_date=received_date)
        db.add(order)
        db.flush()  # get order.id

        result = InboundCreated(order_id=order.id, warehouse_id=warehouse_id)
        for p, spec in zip(products, lines):
            line = InboundLine(order_id=order.id, product_id=p.id, quantity=spec.quantity)
            db.add(line)
            stock_ledger.ensure_exists(db, warehouse_id=warehouse_id, product_id=p.id)
            stock_ledger.adjust(db, warehouse_id=warehouse_id, product_id=p.id, delta=spec.quantity)
            db.flush()
            result.line_ids.append(line.id)
            result.product_ids.append(p.id)

    logger.info(
        "inbound_order_created",
        order_id=result.order_id,
        warehouse_id=warehouse_id,
        line_count=len(result.line_ids),
    )
    return result


def update_line(db: Session, *, line_id: int, product_id: int, quantity: int) -> InboundLineUpdated:
    if quantity < 0:
        raise InvalidArgument("Inbound line quantity cannot be negative")

    with transaction(db):
        line = db.get(InboundLine, line_id, with_for_update=True)
        if not line:
            raise NotFound(f"Inbound line {line_id} not found", line_id=line_id)
        warehouse_id = line.order.warehouse_id
        old_product_id, old_quantity = line.product_id, line.quantity

        catalog.get_product(db, product_id)

        # Contrôle de capacité sur le delta agrégé (ancien retiré, nouveau ajouté).
        # Une édition qui ne fait pas croître le volume passe toujours.
        deltas: dict[int, int] = defaultdict(int)
        deltas[old_product_id] -= old_quantity
        deltas[product_id] += quantity
        projection = capacity.project_and_check(db, warehouse_id=warehouse_id, deltas=deltas)
        if projection.delta_total > 0:
            capacity.reject_if_over(projection, warehouse_id=warehouse_id)

        _revert(db, warehouse_id=warehouse_id, product_id=old_product_id, quantity=old_quantity)

        stock_ledger.ensure_exists(db, warehouse_id=warehouse_id, product_id=product_id)
        stock_ledger.adjust(db, warehouse_id=warehouse_id, product_id=product_id, delta=quantity)

        line.product_id = product_id
        line.quantity = quantity
        db.flush()

        result = InboundLineUpdated(
            line_id=line_id,
            order_id=line.order_id,
            warehouse_id=warehouse_id,
            old_product_id=old_product_id,
            new_product_id=product_id,
            old_quantity=old_quantity,
            new_quantity=quantity,
        )

    logger.info("inbound_line_updated", line_id=line_id, old_quantity=old_quantity, new_quantity=quantity)
    return result


def delete_line(db: Session, *, line_id: int) -> InboundLineDeleted:
    with transaction(db):
        line = db.get(InboundLine, line_id, with_for_update=True)
        if not line:
            raise NotFound(f"Inbound line {line_id} not found", line_id=line_id)
        order = line.order
        warehouse_id = order.warehouse_id
        product_id, quantity = line.product_id, line.quantity

        _revert(db, warehouse_id=warehouse_id, product_id=product_id, quantity=quantity)

        order.lines.remove(line)
        db.flush()

        remaining = db.execute(
            select(func.count()).select_from(InboundLine).where(InboundLine.order_id == order.id)
        ).scalar_one()
        order_deleted = remaining == 0
        if order_deleted:
            db.delete(order)
            db.flush()

        result = InboundLineDeleted(
            line_id=line_id,
            order_id=order.id,
            warehouse_id=warehouse_id,
            product_id=product_id,
            quantity_reverted=quantity,
            order_deleted=order_deleted,
        )

    logger.info("inbound_line_deleted", line_id=line_id, order_id=result.order_id, order_deleted=order_deleted)
    return result


def update_header(db: Session, *, order_id: int, supplier: str, received_date: date) -> InboundOrder:
    with transaction(db):
        order = db.get(InboundOrder, order_id)
        if not order:
            raise NotFound(f"Inbound order {order_id} not found", order_id=order_id)
        order.supplier = supplier
        order.received_date = received_date
        db.flush()

    logger.info("inbound_order_updated", order_id=order_id)
    return order
