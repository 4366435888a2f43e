import uvicorn
from fastapi import FastAPI

from depot.app.api.errors import register_error_handlers
from depot.app.api.v1.router import router as v1_router
from depot.app.core.logging import configure_logging

configure_logging()

app = FastAPI(title="Depot WMS", version="0.1.0")
register_error_handlers(app)
app.include_router(v1_router, prefix="/api")

if __name__ == "__main__":
    uvicorn.run("depot.app.main:app", host="0.0.0.0", port=8000, reload=True)
