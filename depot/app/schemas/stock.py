from datetime import datetime
from decimal import Decimal

from depot.app.schemas.base import CamelModel


class StockEntryRead(CamelModel):
    product_id: int
    product_name: str
    quantity: int
    last_updated: datetime
    size: Decimal | None = None
    weight: Decimal | None = None
    price: Decimal | None = None


class OccupancyRead(CamelModel):
    warehouse_id: int
    capacity: Decimal | None  # NULL = illimité
    occupied: Decimal
    available: Decimal | None


class WarehouseRead(CamelModel):
    id: int
    name: str
    capacity: Decimal | None = None
