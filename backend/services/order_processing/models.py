from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

CENT = Decimal("0.01")


def quantize_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class OrderKind(str, Enum):
    PHYSICAL = "physical"
    DIGITAL = "digital"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAYMENT_FAILED = "payment_failed"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"
    REFUNDED = "refunded"


@dataclass
class OrderItem:
    sku: str
    name: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_record(self) -> Dict[str, Any]:
        return {
            "sku": self.sku,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
        }

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "OrderItem":
        return cls(
            sku=str(row["sku"]),
            name=str(row.get("name") or row["sku"]),
            quantity=int(row["quantity"]),
            unit_price=Decimal(str(row["unit_price"])),
        )


@dataclass
class Address:
    full_name: str
    line1: str
    city: str
    postal_code: str
    country_code: str
    line2: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "full_name": self.full_name,
            "line1": self.line1,
            "line2": self.line2,
            "city": self.city,
            "postal_code": self.postal_code,
            "country_code": self.country_code,
        }

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Address":
        return cls(
            full_name=row["full_name"],
            line1=row["line1"],
            line2=row.get("line2"),
            city=row["city"],
            postal_code=row["postal_code"],
            country_code=row["country_code"],
        )


@dataclass
class Customer:
    name: str
    email: str
    country_code: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return {"name": self.name, "email": self.email, "country_code": self.country_code}

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Customer":
        return cls(name=row["name"], email=row["email"], country_code=row.get("country_code"))


@dataclass
class PriceBreakdown:
    subtotal: Decimal
    discount: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal

    def to_record(self) -> Dict[str, str]:
        return {
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "shipping": str(self.shipping),
            "tax": str(self.tax),
            "total": str(self.total),
        }

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "PriceBreakdown":
        return cls(**{key: Decimal(str(row[key])) for key in ("subtotal", "discount", "shipping", "tax", "total")})


@dataclass
class PaymentReceipt:
    payment_id: str
    method: str
    amount: Decimal
    captured: bool
    reference: str
    created_at: datetime = field(default_factory=utcnow)
    refunded_amount: Decimal = Decimal("0.00")

    @property
    def refundable_amount(self) -> Decimal:
        if not self.captured:
            return Decimal("0.00")
        return self.amount - self.refunded_amount

    def to_record(self) -> Dict[str, Any]:
        return {
            "payment_id": self.payment_id,
            "method": self.method,
            "amount": str(self.amount),
            "captured": self.captured,
            "reference": self.reference,
            "created_at": _format_datetime(self.created_at),
            "refunded_amount": str(self.refunded_amount),
        }

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "PaymentReceipt":
        return cls(
            payment_id=row["payment_id"],
            method=row["method"],
            amount=Decimal(str(row["amount"])),
            captured=bool(row.get("captured")),
            reference=row.get("reference") or "",
            created_at=_parse_datetime(row.get("created_at")) or utcnow(),
            refunded_amount=Decimal(str(row.get("refunded_amount") or "0.00")),
        )


@dataclass
class Order:
    order_id: str
    kind: OrderKind
    customer: Customer
    items: List[OrderItem]
    payment_method: str
    pricing: PriceBreakdown
    payment_details: Dict[str, str] = field(default_factory=dict)
    shipping_address: Optional[Address] = None
    discount: Optional[Dict[str, Any]] = None
    status: OrderStatus = OrderStatus.PENDING
    receipt: Optional[PaymentReceipt] = None
    tracking_number: Optional[str] = None
    download_url: Optional[str] = None
    return_reason: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    paid_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    def touch(self) -> None:
        self.updated_at = utcnow()

    def to_record(self) -> Dict[str, Any]:
        return {
            "order_id": self.order_id,
            "kind": self.kind.value,
            "status": self.status.value,
            "customer": self.customer.to_record(),
            "items": [item.to_record() for item in self.items],
            "shipping_address": self.shipping_address.to_record() if self.shipping_address else None,
            "payment_method": self.payment_method,
            "payment_details": dict(self.payment_details),
            "discount": self.discount,
            "pricing": self.pricing.to_record(),
            "receipt": self.receipt.to_record() if self.receipt else None,
            "tracking_number": self.tracking_number,
            "download_url": self.download_url,
            "return_reason": self.return_reason,
            "created_at": _format_datetime(self.created_at),
            "updated_at": _format_datetime(self.updated_at),
            "paid_at": _format_datetime(self.paid_at),
            "shipped_at": _format_datetime(self.shipped_at),
            "delivered_at": _format_datetime(self.delivered_at),
        }

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Order":
        address = row.get("shipping_address")
        receipt = row.get("receipt")
        return cls(
            order_id=row["order_id"],
            kind=OrderKind(row["kind"]),
            status=OrderStatus(row.get("status") or OrderStatus.PENDING.value),
            customer=Customer.from_record(row["customer"]),
            items=[OrderItem.from_record(item) for item in row.get("items") or []],
            shipping_address=Address.from_record(address) if address else None,
            payment_method=row["payment_method"],
            payment_details=dict(row.get("payment_details") or {}),
            discount=row.get("discount"),
            pricing=PriceBreakdown.from_record(row["pricing"]),
            receipt=PaymentReceipt.from_record(receipt) if receipt else None,
            tracking_number=row.get("tracking_number"),
            download_url=row.get("download_url"),
            return_reason=row.get("return_reason"),
            created_at=_parse_datetime(row.get("created_at")) or utcnow(),
            updated_at=_parse_datetime(row.get("updated_at")) or utcnow(),
            paid_at=_parse_datetime(row.get("paid_at")),
            shipped_at=_parse_datetime(row.get("shipped_at")),
            delivered_at=_parse_datetime(row.get("delivered_at")),
        )
