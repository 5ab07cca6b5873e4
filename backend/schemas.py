from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from services.order_processing.models import OrderKind, OrderStatus


class OrderItemIn(BaseModel):
    sku: str
    name: Optional[str] = None
    quantity: int
    unit_price: Decimal


class AddressIn(BaseModel):
    full_name: str
    line1: str
    line2: Optional[str] = None
    city: str
    postal_code: str
    country_code: str = Field(..., description="ISO 3166 alpha-2 or alpha-3 code")


class CustomerIn(BaseModel):
    name: str
    email: str
    country_code: Optional[str] = None


class PaymentIn(BaseModel):
    method: str = Field(..., description="Payment method identifier, e.g. credit_card")
    details: Dict[str, str] = {}


class OrderCreate(BaseModel):
    kind: OrderKind
    customer: CustomerIn
    items: List[OrderItemIn]
    shipping_address: Optional[AddressIn] = None
    payment: PaymentIn
    discount: Optional[Dict[str, Any]] = Field(
        default=None, description='Discount policy, e.g. {"type": "percentage", "percent": 10}'
    )


class OrderItemOut(BaseModel):
    sku: str
    name: str
    quantity: int
    unit_price: Decimal


class PriceBreakdownOut(BaseModel):
    subtotal: Decimal
    discount: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal


class PaymentReceiptOut(BaseModel):
    payment_id: str
    method: str
    amount: Decimal
    captured: bool
    reference: str
    refunded_amount: Decimal
    created_at: datetime


class OrderResponse(BaseModel):
    order_id: str
    kind: OrderKind
    status: OrderStatus
    customer: CustomerIn
    items: List[OrderItemOut]
    shipping_address: Optional[AddressIn]
    payment_method: str
    pricing: PriceBreakdownOut
    receipt: Optional[PaymentReceiptOut] = None
    tracking_number: Optional[str] = None
    download_url: Optional[str] = None
    return_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    paid_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None


class OrderListResponse(BaseModel):
    items: List[OrderResponse]


class ShipOrderRequest(BaseModel):
    tracking_number: str


class ReturnOrderRequest(BaseModel):
    reason: str


class RefundOrderRequest(BaseModel):
    amount: Optional[Decimal] = None


class OrderActionLogEntry(BaseModel):
    action: str
    status: str
    request: Dict[str, Any] = {}
    response: Dict[str, Any] = {}
    created_at: Optional[datetime] = None


class OrderActionLogResponse(BaseModel):
    order_id: str
    entries: List[OrderActionLogEntry]


class PaymentMethodInfo(BaseModel):
    name: str
    physical_only: bool
    refundable: bool


class ApiInfoResponse(BaseModel):
    payment_methods: List[PaymentMethodInfo]
    discount_types: List[str]
    notification_channel: str
    order_store: str


class OrderProcessingStatusResponse(BaseModel):
    running: bool
    interval_seconds: int
    last_run_at: Optional[datetime]
    last_success_at: Optional[datetime]
    last_error: Optional[str]
    processed_total: int = 0
