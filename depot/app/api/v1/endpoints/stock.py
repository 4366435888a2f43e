from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from pydantic import Field
from sqlalchemy.orm import Session

from depot.app.api.deps import get_audit_notifier, get_db, require_actor
from depot.app.db.models.core_types import AuditAction, EntityType
from depot.app.schemas.base import CamelModel
from depot.app.schemas.stock import StockEntryRead
from depot.services import stock_ledger
from depot.services.audit import AuditEvent, AuditNotifier
from depot.services.uow import transaction

router = APIRouter(prefix="/stock")


# ---------- Schemas ----------
class StockQuantityUpdate(CamelModel):
    quantity: int


class StockInitialize(CamelModel):
    product_name: str
    quantity: int
    size: Decimal | None = Field(default=None, ge=0)
    weight: Decimal | None = Field(default=None, ge=0)
    price: Decimal | None = Field(default=None, ge=0)


# ---------- Endpoints ----------
@router.get("/{warehouse_id}", response_model=list[StockEntryRead])
def list_stock(warehouse_id: int, db: Session = Depends(get_db)):
    return [
        StockEntryRead(
            product_id=entry.product_id,
            product_name=product.name,
            quantity=entry.quantity,
            last_updated=entry.last_updated,
            size=product.size,
            weight=product.weight,
            price=product.price,
        )
        for entry, product in stock_ledger.list_stock(db, warehouse_id)
    ]


@router.put("/{warehouse_id}/{product_id}")
def set_stock_quantity(
    warehouse_id: int,
    product_id: int,
    payload: StockQuantityUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    actor_id: int = Depends(require_actor),
    db: Session = Depends(get_db),
    audit: AuditNotifier = Depends(get_audit_notifier),
):
    with transaction(db):
        change = stock_ledger.set_quantity(
            db,
            warehouse_id=warehouse_id,
            product_id=product_id,
            quantity=payload.quantity,
        )

    background_tasks.add_task(
        audit.record,
        AuditEvent(
            actor_id=actor_id,
            action=AuditAction.update_stock_quantity,
            endpoint=request.url.path,
            entity_type=EntityType.stock,
            entity_id=f"{warehouse_id}:{product_id}",
            payload={
                "warehouseId": warehouse_id,
                "productId": product_id,
                "oldQuantity": change.old_quantity,
                "newQuantity": change.new_quantity,
            },
        ),
    )
    return {
        "success": True,
        "warehouseId": warehouse_id,
        "productId": product_id,
        "quantity": change.new_quantity,
    }


@router.post("/initialize/{warehouse_id}")
def initialize_stock(
    warehouse_id: int,
    payload: StockInitialize,
    request: Request,
    background_tasks: BackgroundTasks,
    actor_id: int = Depends(require_actor),
    db: Session = Depends(get_db),
    audit: AuditNotifier = Depends(get_audit_notifier),
):
    with transaction(db):
        product, change = stock_ledger.initialize(
            db,
            warehouse_id=warehouse_id,
            product_name=payload.product_name,
            quantity=payload.quantity,
            size=payload.size,
            weight=payload.weight,
            price=payload.price,
        )
        product_id = product.id

    background_tasks.add_task(
        audit.record,
        AuditEvent(
            actor_id=actor_id,
            action=AuditAction.initialize_stock,
            endpoint=request.url.path,
            entity_type=EntityType.stock,
            entity_id=f"{warehouse_id}:{product_id}",
            payload={
                "warehouseId": warehouse_id,
                "productId": product_id,
                "productName": payload.product_name,
                "quantity": payload.quantity,
                "oldQuantity": change.old_quantity,
                "newQuantity": change.new_quantity,
                "size": payload.size,
                "weight": payload.weight,
                "price": payload.price,
            },
        ),
    )
    return {"success": True, "productId": product_id, "quantity": change.new_quantity}


@router.delete("/{warehouse_id}/{product_id}")
def delete_stock(
    warehouse_id: int,
    product_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    actor_id: int = Depends(require_actor),
    db: Session = Depends(get_db),
    audit: AuditNotifier = Depends(get_audit_notifier),
):
    with transaction(db):
        stock_ledger.delete(db, warehouse_id=warehouse_id, product_id=product_id)

    background_tasks.add_task(
        audit.record,
        AuditEvent(
            actor_id=actor_id,
            action=AuditAction.stock_delete,
            endpoint=request.url.path,
            entity_type=EntityType.stock,
            entity_id=f"{warehouse_id}:{product_id}",
            payload={"warehouseId": warehouse_id, "productId": product_id},
        ),
    )
    return {"success": True}
