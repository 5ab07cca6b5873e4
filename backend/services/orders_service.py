import asyncio
from decimal import Decimal
from typing import Any, Dict, List, Optional

from schemas import (
    AddressIn,
    CustomerIn,
    OrderActionLogEntry,
    OrderActionLogResponse,
    OrderCreate,
    OrderItemOut,
    OrderResponse,
    PaymentReceiptOut,
    PriceBreakdownOut,
)
from services.order_processing.models import Order, OrderStatus
from services.order_processing.processors import OrderProcessor


def format_order(order: Order) -> OrderResponse:
    receipt = order.receipt
    address = order.shipping_address
    return OrderResponse(
        order_id=order.order_id,
        kind=order.kind,
        status=order.status,
        customer=CustomerIn(**order.customer.to_record()),
        items=[
            OrderItemOut(
                sku=item.sku,
                name=item.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in order.items
        ],
        shipping_address=AddressIn(**address.to_record()) if address else None,
        payment_method=order.payment_method,
        pricing=PriceBreakdownOut(**order.pricing.to_record()),
        receipt=PaymentReceiptOut(**receipt.to_record()) if receipt else None,
        tracking_number=order.tracking_number,
        download_url=order.download_url,
        return_reason=order.return_reason,
        created_at=order.created_at,
        updated_at=order.updated_at,
        paid_at=order.paid_at,
        shipped_at=order.shipped_at,
        delivered_at=order.delivered_at,
    )


def _format_log_entry(row: Dict[str, Any]) -> OrderActionLogEntry:
    return OrderActionLogEntry(
        action=row.get("action", ""),
        status=row.get("status", "success"),
        request=row.get("request") or {},
        response=row.get("response") or {},
        created_at=row.get("created_at"),
    )


async def place_order(processor: OrderProcessor, payload: OrderCreate) -> OrderResponse:
    order = await asyncio.to_thread(processor.place_order, payload)
    return format_order(order)


async def list_orders(processor: OrderProcessor, status: Optional[OrderStatus] = None) -> List[OrderResponse]:
    orders = await asyncio.to_thread(processor.list_orders, status)
    return [format_order(order) for order in orders]


async def get_order(processor: OrderProcessor, order_id: str) -> OrderResponse:
    order = await asyncio.to_thread(processor.get_order, order_id)
    return format_order(order)


async def get_order_log(processor: OrderProcessor, order_id: str) -> OrderActionLogResponse:
    rows = await asyncio.to_thread(processor.order_log, order_id)
    return OrderActionLogResponse(order_id=order_id, entries=[_format_log_entry(row) for row in rows])


async def process_order(processor: OrderProcessor, order_id: str) -> OrderResponse:
    return format_order(await asyncio.to_thread(processor.process_order, order_id))


async def cancel_order(processor: OrderProcessor, order_id: str) -> OrderResponse:
    return format_order(await asyncio.to_thread(processor.cancel_order, order_id))


async def ship_order(processor: OrderProcessor, order_id: str, tracking_number: str) -> OrderResponse:
    return format_order(await asyncio.to_thread(processor.ship_order, order_id, tracking_number))


async def mark_delivered(processor: OrderProcessor, order_id: str) -> OrderResponse:
    return format_order(await asyncio.to_thread(processor.mark_delivered, order_id))


async def issue_download(processor: OrderProcessor, order_id: str) -> OrderResponse:
    return format_order(await asyncio.to_thread(processor.issue_download, order_id))


async def request_return(processor: OrderProcessor, order_id: str, reason: str) -> OrderResponse:
    return format_order(await asyncio.to_thread(processor.request_return, order_id, reason))


async def refund_order(processor: OrderProcessor, order_id: str, amount: Optional[Decimal] = None) -> OrderResponse:
    return format_order(await asyncio.to_thread(processor.refund_order, order_id, amount))
