from __future__ import annotations

from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from pydantic import Field
from sqlalchemy.orm import Session

from depot.app.api.deps import get_audit_notifier, get_db, require_actor
from depot.app.db.models.core_types import AuditAction, EntityType
from depot.app.schemas.base import CamelModel
from depot.app.schemas.orders import OrderLineRead, OutboundOrderRead
from depot.services import outbound
from depot.services.audit import AuditEvent, AuditNotifier

router = APIRouter(prefix="/outbound")


# ---------- Schemas ----------
class OutboundLineCreate(CamelModel):
    product_id: int
    quantity: int


class OutboundCreate(CamelModel):
    shipped_date: date
    address: str = Field(min_length=1, max_length=500)
    details: list[OutboundLineCreate] = Field(default_factory=list)


class OutboundHeaderUpdate(CamelModel):
    shipped_date: date
    address: str = Field(min_length=1, max_length=500)


class OutboundLineUpdate(CamelModel):
    quantity: int


def _order_read(order) -> OutboundOrderRead:
    return OutboundOrderRead(
        outbound_id=order.id,
        warehouse_id=order.warehouse_id,
        shipped_date=order.shipped_date,
        address=order.address,
    )


# ---------- Reads ----------
@router.get("/{warehouse_id}", response_model=list[OutboundOrderRead])
def list_outbound_orders(warehouse_id: int, db: Session = Depends(get_db)):
    return [_order_read(o) for o in outbound.list_orders(db, warehouse_id)]


@router.get("/order/{order_id}")
def get_outbound_order(order_id: int, db: Session = Depends(get_db)):
    order = outbound.get_order(db, order_id)
    lines = outbound.list_lines(db, order_id)
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
def list_outbound_lines(order_id: int, db: Session = Depends(get_db)):
    return [
        OrderLineRead(detail_id=l.id, product_id=l.product_id, product_name=p.name, quantity=l.quantity)
        for l, p in outbound.list_lines(db, order_id)
    ]


# ---------- Mutations ----------
@router.post("/full/{warehouse_id}")
def create_outbound_order(
    warehouse_id: int,
    payload: OutboundCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    actor_id: int = Depends(require_actor),
    db: Session = Depends(get_db),
    audit: AuditNotifier = Depends(get_audit_notifier),
):
    created = outbound.create_full(
        db,
        warehouse_id=warehouse_id,
        shipped_date=payload.shipped_date,
        address=payload.address,
        lines=[outbound.OutboundLineSpec(product_id=d.product_id, quantity=d.quantity) for d in payload.details],
    )

    background_tasks.add_task(
        audit.record,
        AuditEvent(
            actor_id=actor_id,
            action=AuditAction.outbound_order_create,
            endpoint=request.url.path,
            entity_type=EntityType.outbound_order,
            entity_id=str(created.order_id),
            payload={
                "outboundId": created.order_id,
                "warehouseId": warehouse_id,
                "shippedDate": payload.shipped_date,
                "address": payload.address,
                "itemCount": len(created.line_ids),
                "details": [{"productId": d.product_id, "quantity": d.quantity} for d in payload.details],
            },
        ),
    )
    return {"success": True, "outboundId": created.order_id, "detailIds": created.line_ids}


@router.put("/{order_id}")
def update_outbound_order(
    order_id: int,
    payload: OutboundHeaderUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    actor_id: int = Depends(require_actor),
    db: Session = Depends(get_db),
    audit: AuditNotifier = Depends(get_audit_notifier),
):
    outbound.update_header(db, order_id=order_id, shipped_date=payload.shipped_date, address=payload.address)

    background_tasks.add_task(
        audit.record,
        AuditEvent(
            actor_id=actor_id,
            action=AuditAction.outbound_order_update,
            endpoint=request.url.path,
            entity_type=EntityType.outbound_order,
            entity_id=str(order_id),
            payload={"outboundId": order_id, "newDate": payload.shipped_date, "newAddress": payload.address},
        ),
    )
    return {"success": True, "outboundId": order_id}


@router.put("/detail/{line_id}")
def update_outbound_line(
    line_id: int,
    payload: OutboundLineUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    actor_id: int = Depends(require_actor),
    db: Session = Depends(get_db),
    audit: AuditNotifier = Depends(get_audit_notifier),
):
    updated = outbound.update_line_quantity(db, line_id=line_id, quantity=payload.quantity)

    background_tasks.add_task(
        audit.record,
        AuditEvent(
            actor_id=actor_id,
            action=AuditAction.outbound_detail_update,
            endpoint=request.url.path,
            entity_type=EntityType.outbound_line,
            entity_id=str(line_id),
            payload={
                "detailId": line_id,
                "warehouseId": updated.warehouse_id,
                "productId": updated.product_id,
                "productName": updated.product_name,
                "oldQuantity": updated.old_quantity,
                "newQuantity": updated.new_quantity,
                "stockChange": updated.stock_change,
            },
        ),
    )
    return {
        "success": True,
        "detailId": line_id,
        "quantity": updated.new_quantity,
        "stockQuantity": updated.stock_after,
    }


@router.delete("/detail/{line_id}")
def delete_outbound_line(
    line_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    actor_id: int = Depends(require_actor),
    db: Session = Depends(get_db),
    audit: AuditNotifier = Depends(get_audit_notifier),
):
    deleted = outbound.delete_line(db, line_id=line_id)

    background_tasks.add_task(
        audit.record,
        AuditEvent(
            actor_id=actor_id,
            action=AuditAction.outbound_detail_delete,
            endpoint=request.url.path,
            entity_type=EntityType.outbound_line,
            entity_id=str(line_id),
            payload={
                "detailId": line_id,
                "outboundId": deleted.order_id,
                "warehouseId": deleted.warehouse_id,
                "productId": deleted.product_id,
                "quantityReverted": deleted.quantity_reverted,
                "orderDeleted": deleted.order_deleted,
            },
        ),
    )
    return {
        "success": True,
        "outboundId": deleted.order_id if deleted.order_deleted else None,
        "orderDeleted": deleted.order_deleted,
    }
