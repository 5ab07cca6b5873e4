from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from schemas import (
    OrderActionLogResponse,
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    RefundOrderRequest,
    ReturnOrderRequest,
    ShipOrderRequest,
)
from services import orders_service
from services.order_processing.errors import (
    InvalidOrderTransition,
    OrderNotFound,
    OrderProcessingError,
    OrderValidationError,
    PaymentDeclined,
    PaymentError,
    UnsupportedOrderAction,
    UnsupportedPaymentMethod,
)
from services.order_processing.models import OrderStatus
from services.order_processing.processors import OrderProcessor
from services.order_processing_service import get_order_processor

router = APIRouter(prefix="/api/orders", tags=["orders"])


def _to_http_error(exc: OrderProcessingError) -> HTTPException:
    if isinstance(exc, OrderNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, OrderValidationError):
        return HTTPException(status_code=422, detail=exc.problems)
    if isinstance(exc, UnsupportedPaymentMethod):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, PaymentDeclined):
        return HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=str(exc))
    if isinstance(exc, (InvalidOrderTransition, UnsupportedOrderAction, PaymentError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreate,
    processor: OrderProcessor = Depends(get_order_processor),
) -> OrderResponse:
    try:
        return await orders_service.place_order(processor, payload)
    except OrderProcessingError as exc:
        raise _to_http_error(exc) from exc


@router.get("", response_model=OrderListResponse)
async def read_orders(
    status_filter: Optional[OrderStatus] = Query(default=None, alias="status"),
    processor: OrderProcessor = Depends(get_order_processor),
) -> OrderListResponse:
    items = await orders_service.list_orders(processor, status_filter)
    return OrderListResponse(items=items)


@router.get("/{order_id}", response_model=OrderResponse)
async def read_order(
    order_id: str,
    processor: OrderProcessor = Depends(get_order_processor),
) -> OrderResponse:
    try:
        return await orders_service.get_order(processor, order_id)
    except OrderProcessingError as exc:
        raise _to_http_error(exc) from exc


@router.get("/{order_id}/log", response_model=OrderActionLogResponse)
async def read_order_log(
    order_id: str,
    processor: OrderProcessor = Depends(get_order_processor),
) -> OrderActionLogResponse:
    try:
        return await orders_service.get_order_log(processor, order_id)
    except OrderProcessingError as exc:
        raise _to_http_error(exc) from exc


@router.post("/{order_id}/process", response_model=OrderResponse)
async def process_order(
    order_id: str,
    processor: OrderProcessor = Depends(get_order_processor),
) -> OrderResponse:
    try:
        return await orders_service.process_order(processor, order_id)
    except OrderProcessingError as exc:
        raise _to_http_error(exc) from exc


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    processor: OrderProcessor = Depends(get_order_processor),
) -> OrderResponse:
    try:
        return await orders_service.cancel_order(processor, order_id)
    except OrderProcessingError as exc:
        raise _to_http_error(exc) from exc


@router.post("/{order_id}/ship", response_model=OrderResponse)
async def ship_order(
    order_id: str,
    payload: ShipOrderRequest,
    processor: OrderProcessor = Depends(get_order_processor),
) -> OrderResponse:
    try:
        return await orders_service.ship_order(processor, order_id, payload.tracking_number)
    except OrderProcessingError as exc:
        raise _to_http_error(exc) from exc


@router.post("/{order_id}/deliver", response_model=OrderResponse)
async def deliver_order(
    order_id: str,
    processor: OrderProcessor = Depends(get_order_processor),
) -> OrderResponse:
    try:
        return await orders_service.mark_delivered(processor, order_id)
    except OrderProcessingError as exc:
        raise _to_http_error(exc) from exc


@router.post("/{order_id}/download", response_model=OrderResponse)
async def issue_download(
    order_id: str,
    processor: OrderProcessor = Depends(get_order_processor),
) -> OrderResponse:
    try:
        return await orders_service.issue_download(processor, order_id)
    except OrderProcessingError as exc:
        raise _to_http_error(exc) from exc


@router.post("/{order_id}/return", response_model=OrderResponse)
async def return_order(
    order_id: str,
    payload: ReturnOrderRequest,
    processor: OrderProcessor = Depends(get_order_processor),
) -> OrderResponse:
    try:
        return await orders_service.request_return(processor, order_id, payload.reason)
    except OrderProcessingError as exc:
        raise _to_http_error(exc) from exc


@router.post("/{order_id}/refund", response_model=OrderResponse)
async def refund_order(
    order_id: str,
    payload: Optional[RefundOrderRequest] = None,
    processor: OrderProcessor = Depends(get_order_processor),
) -> OrderResponse:
    amount = payload.amount if payload else None
    try:
        return await orders_service.refund_order(processor, order_id, amount)
    except OrderProcessingError as exc:
        raise _to_http_error(exc) from exc
