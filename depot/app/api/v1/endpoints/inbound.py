from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from pydantic import Field
from sqlalchemy.orm import Session

from depot.app.api.deps import get_audit_notifier, get_db, require_actor
from depot.app.db.models.core_types import AuditAction, EntityType
from depot.app.schemas.base import CamelModel
from depot.app.schemas.orders import InboundOrderRead, OrderLineRead
from depot.services import inbound
from depot.services.audit import AuditEvent, AuditNotifier

router = APIRouter(prefix="/inbound")


# ---------- Schemas ----------
class InboundLineCreate(CamelModel):
    product_id: int | None = None
    product_name: str | None = None
    quantity: int
    size: Decimal | None = Field(default=None, ge=0)
    weight: Decimal | None = Field(default=None, ge=0)
    price: Decimal | None = Field(default=None, ge=0)


class InboundCreate(CamelModel):
    supplier: str = Field(min_length=1, max_length=255)
    received_date: date
    # "details" : nom historique du champ côté front
    details: list[InboundLineCreate] = Field(default_factory=list)


class InboundHeaderUpdate(CamelModel):
    supplier: str = Field(min_length=1, max_length=255)
    received_date: date


class InboundLineUpdate(CamelModel):
    product_id: int
    quantity: int


def _order_read(order) -> InboundOrderRead:
    return InboundOrderRead(
        inbound_id=order.id,
        warehouse_id=order.warehouse_id,
        supplier=order.supplier,
        received_date=order.received_date,
    )


# ---------- Reads ----------
@router.get("/{warehouse_id}", response_model=list[InboundOrderRead])
def list_inbound_orders(warehouse_id: int, db: Session = Depends(get_db)):
    return [_order_read(o) for o in inbound.list_orders(db, warehouse_id)]


@router.get("/order/{order_id}")
def get_inbound_order(order_id: int, db: Session = Depends(get_db)):
    order = inbound.get_order(db, order_id)
    lines = inbound.list_lines(db, order_id)
    return {
        **_order_read(order).model_dump(by_alias=True, mode="json"),
        "details": [
            OrderLineRead(
                detail_id=l.id,
                product_id=l.product_id,
                product_name=p.name,
                quantity=l.quantity,
            ).model_dump(by_alias=True)
            for l, p in lines
        ],
    }


@router.get("/detail/{order_id}", response_model=list[OrderLineRead])
def list_inbound_lines(order_id: int, db: Session = Depends(get_db)):
    return [
        OrderLineRead(detail_id=l.id, product_id=l.product_id, product_name=p.name, quantity=l.quantity)
        for l, p in inbound.list_lines(db, order_id)
    ]


# ---------- Mutations ----------
@router.post("/full/{warehouse_id}")
def create_inbound_order(
    warehouse_id: int,
    payload: InboundCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    actor_id: int = Depends(require_actor),
    db: Session = Depends(get_db),
    audit: AuditNotifier = Depends(get_audit_notifier),
):
    created = inbound.create_full(
        db,
        warehouse_id=warehouse_id,
        supplier=payload.supplier,
        received_date=payload.received_date,
        lines=[
            inbound.InboundLineSpec(
                quantity=d.quantity,
                product_id=d.product_id,
                product_name=d.product_name,
                size=d.size,
                weight=d.weight,
                price=d.price,
            )
            for d in payload.details
        ],
    )

    background_tasks.add_task(
        audit.record,
        AuditEvent(
            actor_id=actor_id,
            action=AuditAction.inbound_order,
            endpoint=request.url.path,
            entity_type=EntityType.inbound_order,
            entity_id=str(created.order_id),
            payload={
                "inboundId": created.order_id,
                "warehouseId": warehouse_id,
                "supplier": payload.supplier,
                "receivedDate": payload.received_date,
                "details": [
                    {"detailId": line_id, "productId": product_id, "quantity": d.quantity}
                    for line_id, product_id, d in zip(created.line_ids, created.product_ids, payload.details)
                ],
            },
        ),
    )
    return {"success": True, "inboundId": created.order_id, "detailIds": created.line_ids}


@router.put("/{order_id}")
def update_inbound_order(
    order_id: int,
    payload: InboundHeaderUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    actor_id: int = Depends(require_actor),
    db: Session = Depends(get_db),
    audit: AuditNotifier = Depends(get_audit_notifier),
):
    inbound.update_header(db, order_id=order_id, supplier=payload.supplier, received_date=payload.received_date)

    background_tasks.add_task(
        audit.record,
        AuditEvent(
            actor_id=actor_id,
            action=AuditAction.inbound_order_update,
            endpoint=request.url.path,
            entity_type=EntityType.inbound_order,
            entity_id=str(order_id),
            payload={
                "inboundId": order_id,
                "newSupplier": payload.supplier,
                "newDate": payload.received_date,
            },
        ),
    )
    return {"success": True, "inboundId": order_id}


@router.put("/detail/{line_id}")
def update_inbound_line(
    line_id: int,
    payload: InboundLineUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    actor_id: int = Depends(require_actor),
    db: Session = Depends(get_db),
    audit: AuditNotifier = Depends(get_audit_notifier),
):
    updated = inbound.update_line(db, line_id=line_id, product_id=payload.product_id, quantity=payload.quantity)

    background_tasks.add_task(
        audit.record,
        AuditEvent(
            actor_id=actor_id,
            action=AuditAction.inbound_detail_update,
            endpoint=request.url.path,
            entity_type=EntityType.inbound_line,
            entity_id=str(line_id),
            payload={
                "detailId": line_id,
                "warehouseId": updated.warehouse_id,
                "oldProductId": updated.old_product_id,
                "newProductId": updated.new_product_id,
                "oldQuantity": updated.old_quantity,
                "newQuantity": updated.new_quantity,
            },
        ),
    )
    return {
        "success": True,
        "detailId": line_id,
        "productId": updated.new_product_id,
        "quantity": updated.new_quantity,
    }


@router.delete("/detail/{line_id}")
def delete_inbound_line(
    line_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    actor_id: int = Depends(require_actor),
    db: Session = Depends(get_db),
    audit: AuditNotifier = Depends(get_audit_notifier),
):
    deleted = inbound.delete_line(db, line_id=line_id)

    background_tasks.add_task(
        audit.record,
        AuditEvent(
            actor_id=actor_id,
            action=AuditAction.inbound_detail_delete,
            endpoint=request.url.path,
            entity_type=EntityType.inbound_line,
            entity_id=str(line_id),
            payload={
                "detailId": line_id,
                "inboundId": deleted.order_id,
                "warehouseId": deleted.warehouse_id,
                "productId": deleted.product_id,
                "quantityReverted": deleted.quantity_reverted,
                "orderDeleted": deleted.order_deleted,
            },
        ),
    )
    return {
        "success": True,
        "inboundId": deleted.order_id if deleted.order_deleted else None,
        "orderDeleted": deleted.order_deleted,
    }
