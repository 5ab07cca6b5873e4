import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import info_router, order_processing_router, orders_router
from config import settings
from services.order_processing_service import order_processing_worker

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("order-panel")

app = FastAPI(title="Order Panel API")

if settings.allowed_origins == ["*"]:
    allow_origins = ["*"]
else:
    allow_origins = settings.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(info_router)
app.include_router(orders_router)
app.include_router(order_processing_router)


@app.on_event("startup")
async def _on_startup() -> None:
    if settings.auto_process_orders:
        await order_processing_worker.start()
    if allow_origins == ["*"]:
        logger.warning(
            "CORS is set to allow all origins with credentials; set ALLOWED_ORIGINS to explicit values for local dev."
        )


@app.on_event("shutdown")
async def _on_shutdown() -> None:
    await order_processing_worker.stop()


@app.get("/api/health")
async def health():
    return {"status": "ok"}
