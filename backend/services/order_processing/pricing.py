from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from .errors import OrderValidationError
from .models import OrderItem, OrderKind, PriceBreakdown, quantize_money

ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


class DiscountPolicy(Protocol):
    def discount_for(self, items: Sequence[OrderItem], subtotal: Decimal) -> Decimal:
        ...


class NoDiscount:
    def discount_for(self, items: Sequence[OrderItem], subtotal: Decimal) -> Decimal:
        return ZERO


class PercentageDiscount:
    def __init__(self, percent: Decimal) -> None:
        if not ZERO <= percent <= HUNDRED:
            raise OrderValidationError([f"discount percent must be between 0 and 100, got {percent}"])
        self.percent = percent

    def discount_for(self, items: Sequence[OrderItem], subtotal: Decimal) -> Decimal:
        return subtotal * self.percent / HUNDRED


class FixedAmountDiscount:
    def __init__(self, amount: Decimal) -> None:
        if amount < ZERO:
            raise OrderValidationError([f"discount amount must not be negative, got {amount}"])
        self.amount = amount

    def discount_for(self, items: Sequence[OrderItem], subtotal: Decimal) -> Decimal:
        return self.amount


class BulkDiscount:
    """Percentage off once the order holds at least ``min_quantity`` units."""

    def __init__(self, min_quantity: int, percent: Decimal) -> None:
        if min_quantity < 1:
            raise OrderValidationError([f"bulk discount min_quantity must be positive, got {min_quantity}"])
        self.min_quantity = min_quantity
        self._percentage = PercentageDiscount(percent)

    def discount_for(self, items: Sequence[OrderItem], subtotal: Decimal) -> Decimal:
        if sum(item.quantity for item in items) < self.min_quantity:
            return ZERO
        return self._percentage.discount_for(items, subtotal)


def _decimal(spec: Dict[str, Any], key: str) -> Decimal:
    try:
        value = Decimal(str(spec[key]))
    except KeyError as exc:
        raise OrderValidationError([f"discount '{spec.get('type')}' requires '{key}'"]) from exc
    except InvalidOperation as exc:
        raise OrderValidationError([f"discount '{key}' must be numeric"]) from exc
    if not value.is_finite():
        raise OrderValidationError([f"discount '{key}' must be a finite number, got {value}"])
    return value


def _int(spec: Dict[str, Any], key: str) -> int:
    try:
        return int(spec[key])
    except KeyError as exc:
        raise OrderValidationError([f"discount '{spec.get('type')}' requires '{key}'"]) from exc
    except (TypeError, ValueError) as exc:
        raise OrderValidationError([f"discount '{key}' must be an integer"]) from exc


DiscountFactory = Callable[[Dict[str, Any]], DiscountPolicy]

_DISCOUNT_POLICIES: Dict[str, DiscountFactory] = {
    "none": lambda spec: NoDiscount(),
    "percentage": lambda spec: PercentageDiscount(_decimal(spec, "percent")),
    "fixed": lambda spec: FixedAmountDiscount(_decimal(spec, "amount")),
    "bulk": lambda spec: BulkDiscount(_int(spec, "min_quantity"), _decimal(spec, "percent")),
}


def register_discount_policy(name: str, factory: DiscountFactory) -> None:
    _DISCOUNT_POLICIES[name] = factory


def supported_discount_types() -> List[str]:
    return list(_DISCOUNT_POLICIES)


def create_discount_policy(spec: Optional[Dict[str, Any]]) -> DiscountPolicy:
    if not spec:
        return NoDiscount()
    kind = str(spec.get("type") or "")
    factory = _DISCOUNT_POLICIES.get(kind)
    if factory is None:
        raise OrderValidationError([f"unknown discount type '{kind}'"])
    return factory(spec)


class PriceCalculator:
    def __init__(
        self,
        tax_rate: Decimal = ZERO,
        shipping_fee: Decimal = ZERO,
        free_shipping_threshold: Optional[Decimal] = None,
    ) -> None:
        self.tax_rate = Decimal(tax_rate)
        self.shipping_fee = Decimal(shipping_fee)
        self.free_shipping_threshold = (
            Decimal(free_shipping_threshold) if free_shipping_threshold is not None else None
        )

    def _shipping_for(self, kind: OrderKind, discounted: Decimal) -> Decimal:
        if kind is OrderKind.DIGITAL:
            return ZERO
        if self.free_shipping_threshold is not None and discounted >= self.free_shipping_threshold:
            return ZERO
        return self.shipping_fee

    def price(
        self,
        kind: OrderKind,
        items: Sequence[OrderItem],
        discount_policy: Optional[DiscountPolicy] = None,
    ) -> PriceBreakdown:
        policy = discount_policy or NoDiscount()
        subtotal = quantize_money(sum((item.line_total for item in items), ZERO))
        discount = quantize_money(min(max(policy.discount_for(items, subtotal), ZERO), subtotal))
        discounted = subtotal - discount
        shipping = quantize_money(self._shipping_for(kind, discounted))
        tax = quantize_money(discounted * self.tax_rate)
        total = quantize_money(max(discounted + shipping + tax, ZERO))
        return PriceBreakdown(
            subtotal=subtotal,
            discount=discount,
            shipping=shipping,
            tax=tax,
            total=total,
        )
