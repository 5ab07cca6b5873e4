from fastapi import APIRouter, Depends

from schemas import ApiInfoResponse
from services.info_service import get_api_info
from services.order_processing.processors import OrderProcessor
from services.order_processing_service import get_order_processor

router = APIRouter(prefix="/api", tags=["info"])


@router.get("/info", response_model=ApiInfoResponse)
async def read_info(
    processor: OrderProcessor = Depends(get_order_processor),
) -> ApiInfoResponse:
    return await get_api_info(processor)
