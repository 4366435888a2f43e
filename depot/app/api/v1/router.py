from fastapi import APIRouter

from depot.app.api.v1.endpoints.warehouses import router as warehouses_router
from depot.app.api.v1.endpoints.stock import router as stock_router
from depot.app.api.v1.endpoints.inbound import router as inbound_router
from depot.app.api.v1.endpoints.outbound import router as outbound_router

router = APIRouter()
router.include_router(warehouses_router, tags=["warehouses"])
router.include_router(stock_router, tags=["stock"])
router.include_router(inbound_router, tags=["inbound"])
router.include_router(outbound_router, tags=["outbound"])
