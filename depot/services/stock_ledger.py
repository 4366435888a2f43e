"""
Stock ledger : source de vérité de la quantité en stock par (entrepôt, produit).

Toute variation de stock passe par ce module :
    - set_quantity   (inventaire manuel, avec contrôle de capacité)
    - adjust         (application / annulation d'une ligne de commande)
    - ensure_exists  (création d'une ligne à 0 avant le premier adjust)
    - delete         (uniquement si quantité == 0)
    - initialize     (réassort par nom de produit)

Propriétés :
- quantité jamais négative
- verrouillage SQL (FOR UPDATE) sur la ligne de stock
- aucune opération ne commit : l'appelant fournit la transaction
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from depot.app.db.models.models_v1 import StockEntry, Product, Warehouse, utcnow
from depot.services import capacity, catalog
from depot.services.errors import Conflict, InvalidArgument, NotFound
from depot.services.uow import require_transaction

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class QuantityChange:
    warehouse_id: int
    product_id: int
    old_quantity: int
    new_quantity: int


def lock_entry(db: Session, *, warehouse_id: int, product_id: int) -> StockEntry | None:
    return (
        db.execute(
            select(StockEntry)
            .where(StockEntry.warehouse_id == warehouse_id)
            .where(StockEntry.product_id == product_id)
            .with_for_update()
        )
        .scalar_one_or_none()
    )


def ensure_exists(db: Session, *, warehouse_id: int, product_id: int) -> StockEntry:
    require_transaction(db)

    entry = lock_entry(db, warehouse_id=warehouse_id, product_id=product_id)
    if entry:
        return entry

    entry = StockEntry(warehouse_id=warehouse_id, product_id=product_id, quantity=0)
    db.add(entry)
    db.flush()
    return entry


def adjust(db: Session, *, warehouse_id: int, product_id: int, delta: int) -> QuantityChange:
    """quantity += delta. Pas de contrôle de capacité ici (fait au niveau commande)."""
    require_transaction(db)

    entry = lock_entry(db, warehouse_id=warehouse_id, product_id=product_id)
    if not entry:
        raise NotFound(
            f"Product {product_id} has no stock record in warehouse {warehouse_id}",
            warehouse_id=warehouse_id,
            product_id=product_id,
        )

    old = int(entry.quantity)
    new = old + int(delta)
    if new < 0:
        raise InvalidArgument(
            f"Stock of product {product_id} would become negative ({old} {delta:+d})",
            warehouse_id=warehouse_id,
            product_id=product_id,
        )

    if delta:
        entry.quantity = new
        entry.last_updated = utcnow()
        db.flush()

    return QuantityChange(warehouse_id, product_id, old, new)


def set_quantity(db: Session, *, warehouse_id: int, product_id: int, quantity: int) -> QuantityChange:
    require_transaction(db)

    if quantity < 0:
        raise InvalidArgument("Stock quantity cannot be negative")

    entry = lock_entry(db, warehouse_id=warehouse_id, product_id=product_id)
    if not entry:
        raise NotFound(
            f"No stock record for product {product_id} in warehouse {warehouse_id}",
            warehouse_id=warehouse_id,
            product_id=product_id,
        )

    old = int(entry.quantity)
    size = entry.product.size
    if size is not None and size > 0 and quantity != old:
        capacity.ensure_capacity(db, warehouse_id=warehouse_id, deltas={product_id: quantity - old})

    if quantity != old:
        entry.quantity = quantity
        entry.last_updated = utcnow()
        db.flush()

    logger.info(
        "stock_quantity_set",
        warehouse_id=warehouse_id,
        product_id=product_id,
        old_quantity=old,
        new_quantity=quantity,
    )
    return QuantityChange(warehouse_id, product_id, old, quantity)


def delete(db: Session, *, warehouse_id: int, product_id: int) -> None:
    require_transaction(db)

    entry = lock_entry(db, warehouse_id=warehouse_id, product_id=product_id)
    if not entry:
        raise NotFound(
            f"Product {product_id} does not exist in the stock of warehouse {warehouse_id}",
            warehouse_id=warehouse_id,
            product_id=product_id,
        )
    if entry.quantity != 0:
        raise Conflict(
            f"Product {product_id} still has quantity {entry.quantity}; set it to 0 before deleting",
            warehouse_id=warehouse_id,
            product_id=product_id,
        )

    db.delete(entry)
    db.flush()
    logger.info("stock_entry_deleted", warehouse_id=warehouse_id, product_id=product_id)


def initialize(
    db: Session,
    *,
    warehouse_id: int,
    product_name: str,
    quantity: int,
    size: Decimal | None = None,
    weight: Decimal | None = None,
    price: Decimal | None = None,
) -> tuple[Product, QuantityChange]:
    """
    Réassort par nom : crée le produit si besoin, puis ajoute `quantity`
    au stock de l'entrepôt après contrôle de capacité.
    """
    require_transaction(db)

    if quantity < 0:
        raise InvalidArgument("Initial quantity cannot be negative")
    if not db.get(Warehouse, warehouse_id):
        raise NotFound(f"Warehouse {warehouse_id} not found", warehouse_id=warehouse_id)

    product = catalog.resolve_or_create(db, name=product_name, size=size, weight=weight, price=price)
    capacity.ensure_capacity(db, warehouse_id=warehouse_id, deltas={product.id: quantity})

    ensure_exists(db, warehouse_id=warehouse_id, product_id=product.id)
    change = adjust(db, warehouse_id=warehouse_id, product_id=product.id, delta=quantity)

    logger.info(
        "stock_initialized",
        warehouse_id=warehouse_id,
        product_id=product.id,
        quantity=quantity,
        new_quantity=change.new_quantity,
    )
    return product, change


def list_stock(db: Session, warehouse_id: int) -> list[tuple[StockEntry, Product]]:
    return (
        db.execute(
            select(StockEntry, Product)
            .join(Product, Product.id == StockEntry.product_id)
            .where(StockEntry.warehouse_id == warehouse_id)
            .order_by(Product.name)
        )
        .tuples()
        .all()
    )
