from datetime import date

from depot.app.schemas.base import CamelModel


class InboundOrderRead(CamelModel):
    inbound_id: int
    warehouse_id: int
    supplier: str
    received_date: date


class OutboundOrderRead(CamelModel):
    outbound_id: int
    warehouse_id: int
    shipped_date: date
    address: str


class OrderLineRead(CamelModel):
    detail_id: int
    product_id: int
    product_name: str
    quantity: int
