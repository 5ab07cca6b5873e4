from fastapi import APIRouter, Depends, HTTPException

from schemas import OrderProcessingStatusResponse
from services.order_processing_service import (
    OrderProcessingWorker,
    get_order_processing_worker,
)

router = APIRouter(prefix="/api/order-processing", tags=["order-processing"])


@router.get("/status", response_model=OrderProcessingStatusResponse)
async def get_status(
    worker: OrderProcessingWorker = Depends(get_order_processing_worker),
) -> OrderProcessingStatusResponse:
    return OrderProcessingStatusResponse(**worker.get_status())


@router.post("/start", response_model=OrderProcessingStatusResponse)
async def start_worker(
    worker: OrderProcessingWorker = Depends(get_order_processing_worker),
) -> OrderProcessingStatusResponse:
    try:
        await worker.start()
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return OrderProcessingStatusResponse(**worker.get_status())


@router.post("/stop", response_model=OrderProcessingStatusResponse)
async def stop_worker(
    worker: OrderProcessingWorker = Depends(get_order_processing_worker),
) -> OrderProcessingStatusResponse:
    try:
        await worker.stop()
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return OrderProcessingStatusResponse(**worker.get_status())
