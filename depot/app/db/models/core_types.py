import enum


class AuditAction(str, enum.Enum):
    update_stock_quantity = "UPDATE_STOCK_QUANTITY"
    initialize_stock = "INITIALIZE_STOCK"
    stock_delete = "STOCK_DELETE"
    inbound_order = "INBOUND_ORDER"
    inbound_order_update = "INBOUND_ORDER_UPDATE"
    inbound_detail_update = "INBOUND_DETAIL_UPDATE"
    inbound_detail_delete = "INBOUND_DETAIL_DELETE"
    outbound_order_create = "OUTBOUND_ORDER_CREATE"
    outbound_order_update = "OUTBOUND_ORDER_UPDATE"
    outbound_detail_update = "UPDATE_OUTBOUND_DETAIL"
    outbound_detail_delete = "OUTBOUND_DETAIL_DELETE"


class EntityType(str, enum.Enum):
    stock = "STOCK"
    inbound_order = "INBOUND_ORDER"
    inbound_line = "INBOUND_LINE"
    outbound_order = "OUTBOUND_ORDER"
    outbound_line = "OUTBOUND_LINE"
