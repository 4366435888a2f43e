from __future__ import annotations

from decimal import Decimal

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from depot.app.db.models.models_v1 import Product
from depot.services.errors import InvalidArgument, NotFound

logger = structlog.get_logger(__name__)


def check_dimensions(
    size: Decimal | None = None,
    weight: Decimal | None = None,
    price: Decimal | None = None,
) -> None:
    for field_name, value in (("size", size), ("weight", weight), ("price", price)):
        if value is not None and value < 0:
            raise InvalidArgument(f"Product {field_name} cannot be negative", **{field_name: str(value)})


def get_product(db: Session, product_id: int) -> Product:
    p = db.get(Product, product_id)
    if not p:
        raise NotFound(f"Product {product_id} not found", product_id=product_id)
    return p


def resolve_or_create(
    db: Session,
    *,
    name: str,
    size: Decimal | None = None,
    weight: Decimal | None = None,
    price: Decimal | None = None,
) -> Product:
    """
    Retourne le produit nommé `name`, le crée s'il n'existe pas.

    - produit existant + size fourni => size mis à jour
    - weight / price ne sont renseignés qu'à la création
    """
    name = (name or "").strip()
    if not name:
        raise InvalidArgument("Product name is required")
    check_dimensions(size, weight, price)

    p = db.execute(select(Product).where(Product.name == name)).scalar_one_or_none()
    if p:
        if size is not None and p.size != size:
            p.size = size
            db.flush()
            logger.info("product_size_updated", product_id=p.id, size=str(size))
        return p

    p = Product(name=name, size=size, weight=weight, price=price)
    db.add(p)
    db.flush()  # get p.id
    logger.info("product_created", product_id=p.id, name=name)
    return p
